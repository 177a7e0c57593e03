"""
Entitlement snapshot.

An immutable view of what the engine currently believes about a company.
Readers always get a complete snapshot, never a partially written one.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from subscriptions.domain.company import CompanyRecord


class SnapshotSource(Enum):
    """Where the snapshot's record came from."""

    EMPTY = "empty"
    REMOTE = "remote"
    OPTIMISTIC = "optimistic"
    CACHE = "cache"

    def __str__(self) -> str:
        """Return source as string."""
        return self.value


@dataclass(frozen=True)
class EntitlementSnapshot:
    """Versioned, immutable store contents."""

    company_id: str
    record: Optional[CompanyRecord]
    source: SnapshotSource
    version: int
    updated_at: datetime

    @property
    def confirmed(self) -> bool:
        """True only for records that came straight from the backend."""
        return self.source == SnapshotSource.REMOTE

    @property
    def is_empty(self) -> bool:
        """True until a record has been loaded."""
        return self.record is None
