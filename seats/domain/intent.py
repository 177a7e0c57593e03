"""
Seat mutation intent.

Ephemeral description of one requested seat change. Never persisted.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class SeatAction(Enum):
    """Seat mutation kind."""

    GRANT = "grant"
    REVOKE = "revoke"

    def __str__(self) -> str:
        """Return action as string."""
        return self.value


@dataclass(frozen=True)
class SeatMutationIntent:
    """A requested seat change for one user."""

    target_user_id: str
    action: SeatAction
    requested_at: datetime

    def __post_init__(self):
        """Validate intent."""
        if not self.target_user_id:
            raise ValueError("Target user ID is required")

    @classmethod
    def create(cls, target_user_id: str, action: SeatAction) -> "SeatMutationIntent":
        """
        Create an intent stamped with the current time.

        Args:
            target_user_id: User whose seat changes
            action: Grant or revoke

        Returns:
            SeatMutationIntent instance
        """
        return cls(
            target_user_id=target_user_id,
            action=action,
            requested_at=datetime.now(timezone.utc),
        )

    def apply_to(self, seated_user_ids: tuple[str, ...]) -> tuple[str, ...]:
        """
        Seated set after this intent.

        Grants append, so the newest seat is always last.

        Args:
            seated_user_ids: Current seated users in seating order

        Returns:
            New seated users in seating order
        """
        if self.action == SeatAction.GRANT:
            if self.target_user_id in seated_user_ids:
                return seated_user_ids
            return seated_user_ids + (self.target_user_id,)
        return tuple(uid for uid in seated_user_ids if uid != self.target_user_id)
