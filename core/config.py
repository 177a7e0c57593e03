"""
Entitlement engine configuration.

Reads the ``ENTITLEMENTS`` settings dict into a typed, immutable object so
the engine itself never touches ``django.conf.settings`` directly.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULTS: Dict[str, Any] = {
    "POLL_INTERVAL_MS": 3000,
    "POLL_MAX_ATTEMPTS": 10,
    "GRACE_PERIOD_DAYS": 7,
    "FREE_CHECKOUT_SKIPS_CONFIRMATION": False,
    "SNAPSHOT_CACHE_TTL": 60 * 60 * 24,
}


@dataclass(frozen=True)
class RemoteSyncSettings:
    """Connection settings for the billing backend."""

    base_url: str
    api_token: str = ""
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class EntitlementSettings:
    """Engine tunables."""

    poll_interval_ms: int = DEFAULTS["POLL_INTERVAL_MS"]
    poll_max_attempts: int = DEFAULTS["POLL_MAX_ATTEMPTS"]
    grace_period_days: int = DEFAULTS["GRACE_PERIOD_DAYS"]
    free_checkout_skips_confirmation: bool = DEFAULTS["FREE_CHECKOUT_SKIPS_CONFIRMATION"]
    snapshot_cache_ttl: int = DEFAULTS["SNAPSHOT_CACHE_TTL"]
    remote_sync: Optional[RemoteSyncSettings] = None

    def __post_init__(self):
        """Validate settings."""
        if self.poll_interval_ms < 0:
            raise ValueError("POLL_INTERVAL_MS cannot be negative")
        if self.poll_max_attempts < 1:
            raise ValueError("POLL_MAX_ATTEMPTS must be at least 1")
        if self.grace_period_days < 0:
            raise ValueError("GRACE_PERIOD_DAYS cannot be negative")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "EntitlementSettings":
        """
        Build settings from an ``ENTITLEMENTS``-shaped dict.

        Args:
            values: Partial or complete settings dict

        Returns:
            EntitlementSettings with defaults filled in
        """
        merged = {**DEFAULTS, **values}
        remote = merged.get("REMOTE_SYNC")
        return cls(
            poll_interval_ms=int(merged["POLL_INTERVAL_MS"]),
            poll_max_attempts=int(merged["POLL_MAX_ATTEMPTS"]),
            grace_period_days=int(merged["GRACE_PERIOD_DAYS"]),
            free_checkout_skips_confirmation=bool(merged["FREE_CHECKOUT_SKIPS_CONFIRMATION"]),
            snapshot_cache_ttl=int(merged["SNAPSHOT_CACHE_TTL"]),
            remote_sync=(
                RemoteSyncSettings(
                    base_url=remote["BASE_URL"],
                    api_token=remote.get("API_TOKEN", ""),
                    timeout_seconds=float(remote.get("TIMEOUT_SECONDS", 10)),
                )
                if remote
                else None
            ),
        )

    @classmethod
    def from_django(cls) -> "EntitlementSettings":
        """Read ``settings.ENTITLEMENTS``."""
        from django.conf import settings

        return cls.from_dict(getattr(settings, "ENTITLEMENTS", {}))
