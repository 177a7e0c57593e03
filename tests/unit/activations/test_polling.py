"""
Unit tests for the polling domain model and predicates.
"""
import pytest

from activations.domain.polling import (
    PollingSession,
    PollingState,
    progress_message,
)
from activations.domain.predicates import (
    payment_confirmed,
    payment_rejected,
    seat_assigned,
)
from core.domain.value_objects import SubscriptionStatus
from factories import COMPANY_ID, make_record


class TestPredicates:
    """Tests for polling predicates."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            (SubscriptionStatus.ACTIVE, True),
            (SubscriptionStatus.TRIAL, True),
            (SubscriptionStatus.GRACE, False),
            (SubscriptionStatus.EXPIRED, False),
            (SubscriptionStatus.CANCELLED, False),
        ],
    )
    def test_payment_confirmed(self, status, expected):
        """Test payment is confirmed by active or trial status."""
        assert payment_confirmed(make_record(status=status)) is expected

    def test_seat_assigned(self):
        """Test the seat predicate watches one user."""
        predicate = seat_assigned("u1")
        assert predicate(make_record(seated=("admin-1", "u1"))) is True
        assert predicate(make_record(seated=("admin-1",))) is False

    def test_payment_rejected(self):
        """Test only a cancelled subscription counts as a rejection."""
        assert payment_rejected(make_record(status=SubscriptionStatus.CANCELLED)) is True
        assert payment_rejected(make_record(status=SubscriptionStatus.EXPIRED)) is False
        assert payment_rejected(make_record(status=SubscriptionStatus.GRACE)) is False


class TestPollingSession:
    """Tests for PollingSession."""

    def test_attempt_bound(self):
        """Test attempts stop at the bound."""
        session = PollingSession(COMPANY_ID, payment_confirmed, max_attempts=2)
        assert session.has_attempts_left is True
        session.attempt = 2
        assert session.has_attempts_left is False

    @pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"interval_ms": -1}])
    def test_invalid(self, kwargs):
        """Test invalid bounds are rejected."""
        with pytest.raises(ValueError):
            PollingSession(COMPANY_ID, payment_confirmed, **kwargs)

    def test_status(self):
        """Test statuses carry the session's progress."""
        session = PollingSession(COMPANY_ID, payment_confirmed, max_attempts=5)
        session.attempt = 3
        status = session.status(PollingState.POLLING, "working")

        assert status.attempt == 3
        assert status.max_attempts == 5
        assert status.is_terminal is False
        assert status.to_dict()["state"] == "polling"
        assert session.status(PollingState.TIMED_OUT).is_terminal is True


@pytest.mark.parametrize(
    "attempt,message",
    [
        (1, "Activating your subscription..."),
        (4, "Confirming with payment processor..."),
        (7, "This is taking longer than expected..."),
        (10, "This is taking longer than expected..."),
    ],
)
def test_progress_message(attempt, message):
    """Test progress copy escalates with the attempt number."""
    assert progress_message(attempt) == message
