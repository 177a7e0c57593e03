"""
Activation domain events.

Domain events represent something that happened in the activation domain.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from activations.domain.polling import PollingStatus
from core.domain.events import DomainEvent


class PollingStatusChanged(DomainEvent):
    """Event raised for every entry of a poller's status stream."""

    def __init__(self, status: PollingStatus, occurred_at: Optional[datetime] = None):
        """
        Initialize PollingStatusChanged event.

        Args:
            status: Status entry
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=status.company_id,
            event_type="PollingStatusChanged",
        )
        self.status = status

    def to_dict(self):
        """Convert event to dictionary for serialization."""
        data = super().to_dict()
        data.update(
            {
                "session_id": str(self.status.session_id),
                "state": self.status.state.value,
                "attempt": self.status.attempt,
            }
        )
        return data
