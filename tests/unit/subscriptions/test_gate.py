"""
Unit tests for the entitlement gate.
"""
from datetime import timedelta

import pytest

from core.domain.value_objects import SubscriptionStatus, User, UserRole
from subscriptions.domain.gate import EntitlementGate, LockReason, grace_days_remaining
from subscriptions.domain.snapshot import EntitlementSnapshot, SnapshotSource
from factories import COMPANY_ID, NOW, make_record


def snapshot_of(record):
    return EntitlementSnapshot(
        company_id=COMPANY_ID,
        record=record,
        source=SnapshotSource.REMOTE if record else SnapshotSource.EMPTY,
        version=1,
        updated_at=NOW,
    )


def decide(record, user_id="u1", **kwargs):
    user = kwargs.pop("user", None) or User(id=user_id)
    return EntitlementGate.decide(snapshot_of(record), user, now=NOW, **kwargs)


class TestEntitlementGate:
    """Tests for EntitlementGate.decide."""

    def test_unseated_user_on_active_plan(self):
        """Test an active company locks out users without a seat."""
        record = make_record(max_seats=3, seated=("u1", "u2"), admins=())
        decision = decide(record, user_id="u3")
        assert decision.allowed is False
        assert decision.reason == LockReason.NO_SEAT_ASSIGNED

    @pytest.mark.parametrize("status", [SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL])
    def test_seated_user_allowed(self, status):
        """Test seated users are allowed on active and trial plans."""
        decision = decide(make_record(status=status, seated=("u1",)))
        assert decision.allowed is True
        assert decision.show_grace_banner is False
        assert decision.reason is None

    def test_grace_banner(self):
        """Test grace two days in leaves five of seven days."""
        record = make_record(
            status=SubscriptionStatus.GRACE,
            seated=("u1",),
            grace_started_at=NOW - timedelta(days=2),
        )
        decision = decide(record, grace_period_days=7)
        assert decision.allowed is True
        assert decision.show_grace_banner is True
        assert decision.grace_days_remaining == 5

    @pytest.mark.parametrize("seated", [("u1",), ()])
    def test_cancelled_locks_regardless_of_seat(self, seated):
        """Test cancelled companies lock everyone out."""
        decision = decide(make_record(status=SubscriptionStatus.CANCELLED, seated=seated))
        assert decision.allowed is False
        assert decision.reason == LockReason.SUBSCRIPTION_INACTIVE

    def test_expired_locks(self):
        """Test expired companies lock everyone out."""
        decision = decide(make_record(status=SubscriptionStatus.EXPIRED, seated=("u1",)))
        assert decision.reason == LockReason.SUBSCRIPTION_INACTIVE

    def test_trial_expired_by_signal(self):
        """Test the external trial-elapsed signal locks trial users."""
        record = make_record(status=SubscriptionStatus.TRIAL, seated=("u1",))
        decision = decide(record, trial_expired=True)
        assert decision.reason == LockReason.TRIAL_EXPIRED

    def test_trial_expired_by_end_date(self):
        """Test an elapsed trial end date locks trial users."""
        record = make_record(
            status=SubscriptionStatus.TRIAL,
            seated=("u1",),
            trial_ends_at=NOW - timedelta(hours=1),
        )
        assert decide(record).reason == LockReason.TRIAL_EXPIRED

    def test_trial_signal_overrides_end_date(self):
        """Test an explicit not-expired signal wins over the end date."""
        record = make_record(
            status=SubscriptionStatus.TRIAL,
            seated=("u1",),
            trial_ends_at=NOW - timedelta(hours=1),
        )
        assert decide(record, trial_expired=False).allowed is True

    def test_over_capacity_locks(self):
        """Test over-allocated companies are locked with invalid configuration."""
        record = make_record(max_seats=1, seated=("u1", "u2"), admins=())
        assert decide(record).reason == LockReason.INVALID_SEAT_CONFIGURATION

    def test_zero_seats_locks(self):
        """Test companies without seats are locked with invalid configuration."""
        record = make_record(max_seats=0, seated=(), admins=())
        assert decide(record).reason == LockReason.INVALID_SEAT_CONFIGURATION

    def test_grace_without_seat_locks(self):
        """Test seat absence overrides grace."""
        record = make_record(status=SubscriptionStatus.GRACE, seated=("u2",))
        assert decide(record).reason == LockReason.NO_SEAT_ASSIGNED

    def test_unknown_subscription(self):
        """Test nothing loaded yet locks with unknown subscription."""
        decision = decide(None)
        assert decision.reason == LockReason.SUBSCRIPTION_UNKNOWN

    def test_admin_copy(self):
        """Test admins are pointed at seat management, not their administrator."""
        record = make_record(seated=("u1",))
        admin = User(id="admin-1", role=UserRole.ADMIN)
        crew = User(id="crew-1")

        admin_decision = decide(record, user=admin)
        crew_decision = decide(record, user=crew)

        assert admin_decision.title == "Admin Seat Required"
        assert crew_decision.title == "Contact Administrator"

    def test_cancelled_admin_copy(self):
        """Test cancelled companies get cancellation copy for admins."""
        admin = User(id="admin-1", role=UserRole.ADMIN)
        decision = decide(make_record(status=SubscriptionStatus.CANCELLED), user=admin)
        assert decision.title == "Subscription Cancelled"


class TestGraceDaysRemaining:
    """Tests for grace_days_remaining."""

    @pytest.mark.parametrize(
        "elapsed,expected",
        [
            (timedelta(0), 7),
            (timedelta(days=2, hours=23), 5),
            (timedelta(days=7), 0),
            (timedelta(days=30), 0),
            (-timedelta(days=1), 7),
        ],
    )
    def test_clamped(self, elapsed, expected):
        """Test remaining days are whole days and never negative."""
        assert grace_days_remaining(NOW - elapsed, NOW, 7) == expected
