"""
Unit tests for entitlement settings.
"""
import pytest
from django.test import override_settings

from core.config import EntitlementSettings


class TestEntitlementSettings:
    """Tests for EntitlementSettings."""

    def test_defaults(self):
        """Test defaults match the documented engine behaviour."""
        settings = EntitlementSettings.from_dict({})
        assert settings.poll_interval_ms == 3000
        assert settings.poll_max_attempts == 10
        assert settings.grace_period_days == 7
        assert settings.free_checkout_skips_confirmation is False
        assert settings.remote_sync is None

    def test_remote_sync(self):
        """Test the backend connection block is parsed."""
        settings = EntitlementSettings.from_dict(
            {"REMOTE_SYNC": {"BASE_URL": "http://billing", "TIMEOUT_SECONDS": "2.5"}}
        )
        assert settings.remote_sync.base_url == "http://billing"
        assert settings.remote_sync.api_token == ""
        assert settings.remote_sync.timeout_seconds == 2.5

    def test_invalid_attempts(self):
        """Test a zero attempt bound is rejected."""
        with pytest.raises(ValueError, match="POLL_MAX_ATTEMPTS"):
            EntitlementSettings.from_dict({"POLL_MAX_ATTEMPTS": 0})

    def test_from_django(self):
        """Test settings are read from Django."""
        with override_settings(ENTITLEMENTS={"GRACE_PERIOD_DAYS": 14}):
            settings = EntitlementSettings.from_django()
        assert settings.grace_period_days == 14
        assert settings.poll_max_attempts == 10
