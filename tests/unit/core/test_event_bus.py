"""
Unit tests for the in-memory event bus.
"""
import pytest

from core.domain.events import DomainEvent, EventHandler
from core.infrastructure.events import InMemoryEventBus
from subscriptions.domain.events import EntitlementSnapshotChanged
from subscriptions.domain.snapshot import EntitlementSnapshot, SnapshotSource
from factories import COMPANY_ID, NOW


class RecordingHandler(EventHandler):
    def __init__(self, fail=False):
        self.events = []
        self.fail = fail

    async def handle(self, event):
        self.events.append(event)
        if self.fail:
            raise RuntimeError("handler failed")


def snapshot_event():
    snapshot = EntitlementSnapshot(
        company_id=COMPANY_ID,
        record=None,
        source=SnapshotSource.EMPTY,
        version=1,
        updated_at=NOW,
    )
    return EntitlementSnapshotChanged(snapshot)


@pytest.mark.asyncio
class TestInMemoryEventBus:
    """Tests for InMemoryEventBus."""

    async def test_publish_to_subscribers(self):
        """Test subscribers receive published events."""
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        bus.subscribe(EntitlementSnapshotChanged, handler)

        event = snapshot_event()
        await bus.publish(event)

        assert handler.events == [event]
        assert event.event_type == "EntitlementSnapshotChanged"
        assert event.aggregate_id == COMPANY_ID

    async def test_base_class_subscription(self):
        """Test a DomainEvent subscriber receives every event."""
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        bus.subscribe(DomainEvent, handler)

        await bus.publish(snapshot_event())

        assert len(handler.events) == 1

    async def test_unsubscribe(self):
        """Test unsubscribed handlers stop receiving events."""
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        unsubscribe = bus.subscribe(EntitlementSnapshotChanged, handler)
        unsubscribe()

        await bus.publish(snapshot_event())

        assert handler.events == []

    async def test_failing_handler_does_not_stop_others(self):
        """Test a failing handler neither raises nor blocks other handlers."""
        bus = InMemoryEventBus()
        failing = RecordingHandler(fail=True)
        healthy = RecordingHandler()
        bus.subscribe(EntitlementSnapshotChanged, failing)
        bus.subscribe(EntitlementSnapshotChanged, healthy)

        await bus.publish(snapshot_event())

        assert len(failing.events) == 1
        assert len(healthy.events) == 1

    async def test_to_dict(self):
        """Test event serialization carries snapshot metadata."""
        data = snapshot_event().to_dict()
        assert data["aggregate_id"] == COMPANY_ID
        assert data["version"] == 1
        assert data["source"] == "empty"
        assert data["confirmed"] is False
