"""
Unit tests for EntitlementStore.
"""
import asyncio

import pytest

from core.domain.events import EventHandler
from core.domain.exceptions import CapacityExceededError, CompanyNotFoundError
from core.domain.value_objects import SubscriptionStatus
from subscriptions.domain.events import EntitlementSnapshotChanged
from subscriptions.domain.snapshot import SnapshotSource
from factories import make_record


class RecordingHandler(EventHandler):
    def __init__(self):
        self.snapshots = []

    async def handle(self, event):
        self.snapshots.append(event.snapshot)


class BlockingHandler(EventHandler):
    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def handle(self, event):
        self.started.set()
        await self.release.wait()


@pytest.mark.asyncio
class TestEntitlementStore:
    """Tests for EntitlementStore."""

    async def test_starts_empty(self, store):
        """Test a new store has no record."""
        snapshot = store.get()
        assert snapshot.is_empty is True
        assert snapshot.version == 0
        assert snapshot.confirmed is False

    async def test_apply_remote(self, store, active_record):
        """Test remote records become the confirmed snapshot."""
        snapshot = await store.apply_remote(active_record)
        assert snapshot.record == active_record
        assert snapshot.confirmed is True
        assert snapshot.version == 1
        assert store.get() is snapshot

    async def test_apply_remote_accepts_over_capacity(self, store):
        """Test the backend may send records that break the seat limit."""
        record = make_record(max_seats=1, seated=("a", "b"))
        snapshot = await store.apply_remote(record)
        assert snapshot.record.is_over_capacity is True

    async def test_apply_remote_other_company(self, store):
        """Test records for another company are refused."""
        with pytest.raises(ValueError):
            await store.apply_remote(make_record(company_id="other"))

    async def test_apply_optimistic(self, store, active_record):
        """Test optimistic writes are unconfirmed."""
        await store.apply_remote(active_record)
        snapshot = await store.apply_optimistic(["admin-1", "field-1", "new"])
        assert snapshot.source == SnapshotSource.OPTIMISTIC
        assert snapshot.confirmed is False
        assert snapshot.record.seated_user_ids == ("admin-1", "field-1", "new")

    async def test_apply_optimistic_over_capacity(self, store, active_record):
        """Test optimistic writes never exceed the seat limit."""
        await store.apply_remote(active_record)
        before = store.get()
        with pytest.raises(CapacityExceededError):
            await store.apply_optimistic(["a", "b", "c", "d"])
        assert store.get() is before

    async def test_apply_optimistic_without_record(self, store):
        """Test optimistic writes need a loaded record."""
        with pytest.raises(CompanyNotFoundError):
            await store.apply_optimistic(["a"])

    async def test_rollback(self, store, active_record):
        """Test rollback restores the last confirmed record."""
        await store.apply_remote(active_record)
        await store.apply_optimistic(["admin-1"])
        snapshot = await store.rollback()
        assert snapshot.record == active_record
        assert snapshot.confirmed is True
        assert snapshot.version == 3

    async def test_rollback_without_changes(self, store, active_record):
        """Test rollback is a no-op when nothing is pending."""
        confirmed = await store.apply_remote(active_record)
        assert await store.rollback() is confirmed

    async def test_hydrate(self, store, active_record):
        """Test hydration only seeds an empty store."""
        assert await store.hydrate(active_record) is True
        assert store.get().source == SnapshotSource.CACHE
        assert store.get().confirmed is False
        assert await store.hydrate(make_record()) is False
        assert store.record == active_record

    async def test_writes_publish_in_order(self, store, event_bus, active_record):
        """Test every write publishes a change event in version order."""
        handler = RecordingHandler()
        event_bus.subscribe(EntitlementSnapshotChanged, handler)

        await store.apply_remote(active_record)
        await store.apply_optimistic(["admin-1"])
        await store.rollback()

        assert [s.version for s in handler.snapshots] == [1, 2, 3]
        assert [s.source for s in handler.snapshots] == [
            SnapshotSource.REMOTE,
            SnapshotSource.OPTIMISTIC,
            SnapshotSource.REMOTE,
        ]

    async def test_cancelled_write_keeps_baseline_in_step(self, store, event_bus):
        """Test cancelling a remote write mid-publish leaves a consistent baseline."""
        grace = make_record(status=SubscriptionStatus.GRACE)
        active = make_record(status=SubscriptionStatus.ACTIVE)
        await store.apply_remote(grace)
        handler = BlockingHandler()
        event_bus.subscribe(EntitlementSnapshotChanged, handler)

        write = asyncio.ensure_future(store.apply_remote(active))
        await handler.started.wait()
        write.cancel()
        with pytest.raises(asyncio.CancelledError):
            await write

        assert store.get().version == 2
        assert store.last_confirmed is store.get()
        assert store.record == active
        rolled_back = await store.rollback()
        assert rolled_back.record == active
