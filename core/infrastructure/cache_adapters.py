"""
Cache adapter implementations.

Provides the Django cache (Redis in deployed environments) implementation
of CachePort.
"""

import logging
from typing import Any, Optional

from asgiref.sync import sync_to_async
from django.core.cache import caches

from core.infrastructure.cache import CachePort
from core.metrics import cache_hits_total, cache_misses_total

logger = logging.getLogger(__name__)


class DjangoCacheAdapter(CachePort):
    """
    Django cache adapter implementing CachePort.

    Backend errors are logged and degrade to a miss; a failed write is
    logged and dropped.
    """

    def __init__(self, alias: str = "default", metric_label: str = "snapshot"):
        """
        Initialize adapter.

        Args:
            alias: Django cache alias to use
            metric_label: Label recorded on hit/miss counters
        """
        self.alias = alias
        self.metric_label = metric_label

    @property
    def _cache(self):
        return caches[self.alias]

    async def get(self, key: str) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found
        """
        try:
            value = await sync_to_async(self._cache.get)(key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error getting from cache: %s", e, exc_info=True)
            return None

        if value is not None:
            logger.debug("Cache hit: %s", key)
            cache_hits_total.labels(cache_key=self.metric_label).inc()
        else:
            logger.debug("Cache miss: %s", key)
            cache_misses_total.labels(cache_key=self.metric_label).inc()
        return value

    async def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        """
        Set a value in cache.

        Args:
            key: Cache key
            value: Value to cache
            timeout: Timeout in seconds (None for no expiration)
        """
        try:
            await sync_to_async(self._cache.set)(key, value, timeout=timeout)
            logger.debug("Cache set: %s (timeout=%s)", key, timeout)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error setting cache: %s", e, exc_info=True)

    async def delete(self, key: str) -> None:
        """
        Delete a value from cache.

        Args:
            key: Cache key
        """
        try:
            await sync_to_async(self._cache.delete)(key)
            logger.debug("Cache delete: %s", key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error deleting from cache: %s", e, exc_info=True)
