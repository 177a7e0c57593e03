"""
Entitlement store.

Holds the last-known CompanyRecord for one company and is the system of
record for everything downstream (gate, cache, progress displays).
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from core.domain.events import EventBus
from core.domain.exceptions import CapacityExceededError, CompanyNotFoundError
from subscriptions.domain.company import CompanyRecord, ordered_unique
from subscriptions.domain.events import EntitlementSnapshotChanged
from subscriptions.domain.snapshot import EntitlementSnapshot, SnapshotSource

logger = logging.getLogger(__name__)


class EntitlementStore:
    """
    Single-writer store for one company's entitlement snapshot.

    Reads never block. Writes are serialised on an asyncio.Lock and each
    one publishes EntitlementSnapshotChanged before the lock is released,
    so subscribers observe writes in order. Subscribers must not write
    back into the store from their handler.
    """

    def __init__(self, company_id: str, event_bus: EventBus):
        """
        Initialize store.

        Args:
            company_id: Company this store belongs to
            event_bus: Session event bus receiving change events
        """
        self.company_id = company_id
        self.event_bus = event_bus
        self._lock = asyncio.Lock()
        self._snapshot = EntitlementSnapshot(
            company_id=company_id,
            record=None,
            source=SnapshotSource.EMPTY,
            version=0,
            updated_at=datetime.now(timezone.utc),
        )
        self._baseline = self._snapshot

    def get(self) -> EntitlementSnapshot:
        """Return the current snapshot."""
        return self._snapshot

    @property
    def record(self) -> Optional[CompanyRecord]:
        """Shortcut for the current record."""
        return self._snapshot.record

    @property
    def last_confirmed(self) -> EntitlementSnapshot:
        """Snapshot that rollback() restores."""
        return self._baseline

    async def apply_remote(self, record: CompanyRecord) -> EntitlementSnapshot:
        """
        Overwrite the store with a backend record.

        The backend is authoritative, so records that break the local
        capacity rule are accepted and only logged.

        Args:
            record: Record returned by RemoteSync

        Returns:
            New confirmed snapshot
        """
        self._check_company(record)
        if record.is_over_capacity:
            logger.warning(
                "Backend record for company %s seats %d users with %d seats",
                record.company_id,
                record.seated_count,
                record.max_seats,
            )
        async with self._lock:
            return await self._write(record, SnapshotSource.REMOTE, as_baseline=True)

    async def apply_optimistic(self, seated_user_ids: Iterable[str]) -> EntitlementSnapshot:
        """
        Apply a local, unconfirmed seated set.

        Args:
            seated_user_ids: Full seated set in seating order

        Returns:
            New unconfirmed snapshot

        Raises:
            CompanyNotFoundError: If no record is loaded yet
            CapacityExceededError: If the set is larger than max_seats
        """
        async with self._lock:
            current = self._snapshot.record
            if current is None:
                raise CompanyNotFoundError(
                    f"No subscription loaded for company {self.company_id}"
                )
            seats = ordered_unique(seated_user_ids)
            if len(seats) > current.max_seats:
                raise CapacityExceededError()
            return await self._write(current.with_seats(seats), SnapshotSource.OPTIMISTIC)

    async def rollback(self) -> EntitlementSnapshot:
        """
        Restore the last confirmed (or cache-hydrated) record.

        Returns:
            New snapshot carrying the restored record
        """
        async with self._lock:
            baseline = self._baseline
            if self._snapshot.version == baseline.version:
                return self._snapshot
            logger.info(
                "Rolling back company %s to snapshot version %d",
                self.company_id,
                baseline.version,
            )
            return await self._write(baseline.record, baseline.source, as_baseline=True)

    async def hydrate(self, record: CompanyRecord) -> bool:
        """
        Seed an empty store from the advisory cache.

        Args:
            record: Cached record

        Returns:
            True if the store was empty and has been seeded
        """
        self._check_company(record)
        async with self._lock:
            if self._snapshot.record is not None:
                return False
            await self._write(record, SnapshotSource.CACHE, as_baseline=True)
            return True

    async def _write(
        self,
        record: Optional[CompanyRecord],
        source: SnapshotSource,
        as_baseline: bool = False,
    ) -> EntitlementSnapshot:
        previous = self._snapshot
        snapshot = EntitlementSnapshot(
            company_id=self.company_id,
            record=record,
            source=source,
            version=previous.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        # Snapshot and baseline change together, before any await
        self._snapshot = snapshot
        if as_baseline:
            self._baseline = snapshot
        logger.debug(
            "Company %s snapshot v%d (%s)", self.company_id, snapshot.version, source
        )
        await self.event_bus.publish(EntitlementSnapshotChanged(snapshot, previous))
        return snapshot

    def _check_company(self, record: CompanyRecord) -> None:
        if record.company_id != self.company_id:
            raise ValueError(
                f"Record for company {record.company_id} written to store "
                f"for company {self.company_id}"
            )
