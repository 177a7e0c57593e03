"""
Snapshot cache service.

Persists the last confirmed CompanyRecord so a new session can show
something before its first refresh completes. The cache is advisory:
anything it returns is superseded by the next successful refresh.
"""
import logging
from typing import Optional

from core.infrastructure.cache import CachePort
from subscriptions.domain.company import CompanyRecord
from subscriptions.infrastructure.company_payload import (
    MalformedPayloadError,
    to_domain,
    to_payload,
)

logger = logging.getLogger(__name__)

# Cache TTL (in seconds)
CACHE_TTL_COMPANY_SNAPSHOT = 60 * 60 * 24  # 1 day


class SnapshotCacheService:
    """Service for caching company entitlement snapshots."""

    def __init__(self, cache: CachePort, ttl: Optional[int] = None):
        """
        Initialize service.

        Args:
            cache: Cache port implementation
            ttl: Time to live in seconds
        """
        self.cache = cache
        self.ttl = ttl or CACHE_TTL_COMPANY_SNAPSHOT

    @staticmethod
    def _company_key(company_id: str) -> str:
        """Generate cache key for a company snapshot."""
        return f"entitlements:company:{company_id}"

    async def get_company(self, company_id: str) -> Optional[CompanyRecord]:
        """
        Get cached company record.

        Args:
            company_id: Company identifier

        Returns:
            Cached CompanyRecord or None
        """
        cached = await self.cache.get(self._company_key(company_id))
        if not cached:
            return None
        try:
            return to_domain(cached, company_id=company_id)
        except MalformedPayloadError as e:
            logger.warning("Discarding unreadable cached snapshot for %s: %s", company_id, e)
            await self.cache.delete(self._company_key(company_id))
            return None

    async def set_company(self, record: CompanyRecord) -> None:
        """
        Cache a company record.

        Args:
            record: Confirmed CompanyRecord
        """
        await self.cache.set(
            self._company_key(record.company_id), to_payload(record), timeout=self.ttl
        )

    async def invalidate_company(self, company_id: str) -> None:
        """
        Invalidate cached company record.

        Args:
            company_id: Company identifier
        """
        await self.cache.delete(self._company_key(company_id))
        logger.info("Invalidated snapshot cache: %s", company_id)
