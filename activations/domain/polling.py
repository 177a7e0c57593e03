"""
Polling session domain model.

A polling session waits for the billing backend to reflect a change the
user already made. It never decides that the change failed; it only
reports whether confirmation arrived in time.
"""
import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from subscriptions.domain.company import CompanyRecord

Predicate = Callable[[CompanyRecord], bool]

DEFAULT_INTERVAL_MS = 3000
DEFAULT_MAX_ATTEMPTS = 10

TIMED_OUT_MESSAGE = (
    "Your payment was successful. Please check back in a few minutes. "
    "If your subscription is still not active, contact support."
)


class PollingState(Enum):
    """Poller state machine states."""

    IDLE = "idle"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    REJECTED = "rejected"
    ERROR = "error"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        """Return state as string."""
        return self.value

    @property
    def is_terminal(self) -> bool:
        """True for states that end a session."""
        return self not in (PollingState.IDLE, PollingState.POLLING)


def progress_message(attempt: int) -> str:
    """
    Progress copy for an in-flight attempt.

    Args:
        attempt: 1-based attempt number

    Returns:
        Message for progress displays
    """
    if attempt >= 7:
        return "This is taking longer than expected..."
    if attempt >= 4:
        return "Confirming with payment processor..."
    return "Activating your subscription..."


@dataclass(frozen=True)
class PollingStatus:
    """One entry of the poller's status stream."""

    session_id: uuid.UUID
    company_id: str
    state: PollingState
    attempt: int = 0
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    message: str = ""
    error_code: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        """True when the session has ended."""
        return self.state.is_terminal

    def to_dict(self) -> dict:
        """Convert status to a JSON-serializable dict."""
        return {
            "session_id": str(self.session_id),
            "company_id": self.company_id,
            "state": self.state.value,
            "attempt": self.attempt,
            "max_attempts": self.max_attempts,
            "message": self.message,
            "error_code": self.error_code,
        }


@dataclass(eq=False)
class PollingSession:
    """
    A single confirmation loop for one company.

    Mutable while polling; ``final_status`` is set exactly once.
    """

    company_id: str
    terminal_predicate: Predicate
    rejection_predicate: Optional[Predicate] = None
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    interval_ms: int = DEFAULT_INTERVAL_MS
    label: str = "activation"
    session_id: uuid.UUID = field(default_factory=uuid.uuid4)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    attempt: int = 0
    successful_refreshes: int = 0
    final_status: Optional[PollingStatus] = None
    task: Optional["asyncio.Task"] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate session."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval_ms < 0:
            raise ValueError("interval_ms cannot be negative")

    @property
    def is_finished(self) -> bool:
        """True once a terminal status has been recorded."""
        return self.final_status is not None

    @property
    def has_attempts_left(self) -> bool:
        """True while another attempt is allowed after the current one."""
        return self.attempt < self.max_attempts

    def status(
        self,
        state: PollingState,
        message: str = "",
        error_code: Optional[str] = None,
    ) -> PollingStatus:
        """
        Build a status entry for this session.

        Args:
            state: New state
            message: Human-facing message
            error_code: Domain error code for failed sessions

        Returns:
            PollingStatus
        """
        return PollingStatus(
            session_id=self.session_id,
            company_id=self.company_id,
            state=state,
            attempt=self.attempt,
            max_attempts=self.max_attempts,
            message=message,
            error_code=error_code,
        )
