"""
Seat domain events.

Raised only after the billing backend has confirmed the change.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from core.domain.events import DomainEvent


class SeatGranted(DomainEvent):
    """Event raised when a seat grant is confirmed."""

    def __init__(
        self,
        company_id: str,
        user_id: str,
        granted_by: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize SeatGranted event.

        Args:
            company_id: Company identifier
            user_id: User who received the seat
            granted_by: Administrator who granted it
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=company_id,
            event_type="SeatGranted",
        )
        self.user_id = user_id
        self.granted_by = granted_by


class SeatRevoked(DomainEvent):
    """Event raised when a seat revocation is confirmed."""

    def __init__(
        self,
        company_id: str,
        user_id: str,
        revoked_by: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize SeatRevoked event.

        Args:
            company_id: Company identifier
            user_id: User who lost the seat
            revoked_by: Administrator who revoked it
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=company_id,
            event_type="SeatRevoked",
        )
        self.user_id = user_id
        self.revoked_by = revoked_by


class SeatsCommitted(DomainEvent):
    """Event raised when a full seated set is saved."""

    def __init__(
        self,
        company_id: str,
        seated_user_ids: Tuple[str, ...],
        committed_by: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize SeatsCommitted event.

        Args:
            company_id: Company identifier
            seated_user_ids: Confirmed seated set
            committed_by: Administrator who saved it
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=company_id,
            event_type="SeatsCommitted",
        )
        self.seated_user_ids = seated_user_ids
        self.committed_by = committed_by
