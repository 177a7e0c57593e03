"""
Advisory snapshot cache port.

The last confirmed CompanyRecord is kept here so that a new session can
show something while the billing backend is slow or unreachable. The
cache is never authoritative: a remote refresh always wins. The Django
adapter backs it with Redis in production and locmem in tests.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional


class CachePort(ABC):
    """
    Abstract cache port.

    Implementations must never raise for backend outages: a cold or
    unreachable cache only means the next refresh starts from nothing.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        """
        Set a value in cache.

        Args:
            key: Cache key
            value: Value to cache
            timeout: Timeout in seconds (None for no expiration)
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete a value from cache.

        Args:
            key: Cache key
        """
        pass
