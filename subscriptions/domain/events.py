"""
Subscription domain events.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from core.domain.events import DomainEvent
from subscriptions.domain.snapshot import EntitlementSnapshot


class EntitlementSnapshotChanged(DomainEvent):
    """Event raised after every entitlement store write."""

    def __init__(
        self,
        snapshot: EntitlementSnapshot,
        previous: Optional[EntitlementSnapshot] = None,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize EntitlementSnapshotChanged event.

        Args:
            snapshot: Snapshot after the write
            previous: Snapshot before the write
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=snapshot.company_id,
            event_type="EntitlementSnapshotChanged",
        )
        self.snapshot = snapshot
        self.previous = previous

    def to_dict(self):
        """Convert event to dictionary for serialization."""
        data = super().to_dict()
        data.update(
            {
                "version": self.snapshot.version,
                "source": str(self.snapshot.source),
                "confirmed": self.snapshot.confirmed,
            }
        )
        return data
