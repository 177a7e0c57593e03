"""
Entitlement gate.

Pure mapping from an entitlement snapshot and a user to an access
decision. No I/O, no clock reads unless ``now`` is omitted.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from core.domain.value_objects import SubscriptionStatus, User
from subscriptions.domain.company import CompanyRecord
from subscriptions.domain.snapshot import EntitlementSnapshot

DEFAULT_GRACE_PERIOD_DAYS = 7


class LockReason(Enum):
    """Why a user is locked out."""

    SUBSCRIPTION_UNKNOWN = "subscription_unknown"
    SUBSCRIPTION_INACTIVE = "subscription_inactive"
    TRIAL_EXPIRED = "trial_expired"
    INVALID_SEAT_CONFIGURATION = "invalid_seat_configuration"
    NO_SEAT_ASSIGNED = "no_seat_assigned"

    def __str__(self) -> str:
        """Return reason as string."""
        return self.value


@dataclass(frozen=True)
class Decision:
    """Access decision for one user."""

    allowed: bool
    reason: Optional[LockReason] = None
    title: str = ""
    message: str = ""
    show_grace_banner: bool = False
    grace_days_remaining: Optional[int] = None

    @classmethod
    def allow(cls, grace_days_remaining: Optional[int] = None) -> "Decision":
        """Build an allowing decision, flagged for grace when days are given."""
        return cls(
            allowed=True,
            show_grace_banner=grace_days_remaining is not None,
            grace_days_remaining=grace_days_remaining,
        )

    @classmethod
    def lock(cls, reason: LockReason, user: User, record: Optional[CompanyRecord]) -> "Decision":
        """Build a locking decision with the user-facing copy for the reason."""
        title, message = lockout_copy(reason, user, record)
        return cls(allowed=False, reason=reason, title=title, message=message)


def lockout_copy(
    reason: LockReason, user: User, record: Optional[CompanyRecord]
) -> tuple[str, str]:
    """
    Title and message shown on the lock-out screen.

    Admins get copy pointing at the action they can take; everyone else is
    sent to their administrator.

    Args:
        reason: Lock reason
        user: User being locked out
        record: Company record, if known

    Returns:
        Tuple of (title, message)
    """
    if not user.is_admin:
        if reason == LockReason.NO_SEAT_ASSIGNED:
            return (
                "Contact Administrator",
                "You don't have a seat in your company's subscription. "
                "Contact your administrator to request access.",
            )
        return (
            "Contact Administrator",
            "Your company's subscription needs attention. "
            "Please contact your administrator.",
        )

    if reason == LockReason.NO_SEAT_ASSIGNED:
        return (
            "Admin Seat Required",
            "As an administrator, you need a seat to access the app. "
            "Manage your team's seats or upgrade your plan.",
        )
    if reason == LockReason.TRIAL_EXPIRED:
        return (
            "Trial Expired",
            "Your trial has ended. Choose a plan to continue.",
        )
    if reason == LockReason.SUBSCRIPTION_INACTIVE:
        if record is not None and record.subscription_status == SubscriptionStatus.CANCELLED:
            return (
                "Subscription Cancelled",
                "Your subscription has been cancelled. Choose a new plan to restore access.",
            )
        return (
            "Subscription Expired",
            "Your subscription has expired. Resubscribe to restore access.",
        )
    if reason == LockReason.INVALID_SEAT_CONFIGURATION:
        return (
            "No Available Seats",
            "Your plan's seats are over-allocated or missing. "
            "Remove seats or upgrade your plan to restore access.",
        )
    return (
        "Subscription Unavailable",
        "We couldn't load your company's subscription. Check your connection and try again.",
    )


def grace_days_remaining(
    grace_started_at: datetime, now: datetime, grace_period_days: int
) -> int:
    """
    Whole days left in the grace window, clamped to zero.

    Args:
        grace_started_at: When grace began
        now: Current time
        grace_period_days: Grace window length

    Returns:
        Remaining days
    """
    elapsed_days = max(0, (now - grace_started_at).days)
    return max(0, grace_period_days - elapsed_days)


class EntitlementGate:
    """Domain service deciding access."""

    @staticmethod
    def decide(
        snapshot: Optional[EntitlementSnapshot],
        user: User,
        now: Optional[datetime] = None,
        grace_period_days: int = DEFAULT_GRACE_PERIOD_DAYS,
        trial_expired: Optional[bool] = None,
    ) -> Decision:
        """
        Decide whether a user may use the app.

        Rules are checked in order; the first that matches wins:
        unknown subscription, inactive subscription, elapsed trial,
        invalid seat configuration, missing seat, grace, active/trial.

        Args:
            snapshot: Current entitlement snapshot
            user: User asking for access
            now: Current time (defaults to now, UTC)
            grace_period_days: Grace window length
            trial_expired: External trial-elapsed signal; derived from
                trial_ends_at when omitted

        Returns:
            Decision
        """
        record = snapshot.record if snapshot is not None else None
        if record is None:
            return Decision.lock(LockReason.SUBSCRIPTION_UNKNOWN, user, None)

        now = now or datetime.now(timezone.utc)
        status = record.subscription_status

        if status.is_inactive:
            return Decision.lock(LockReason.SUBSCRIPTION_INACTIVE, user, record)

        if status == SubscriptionStatus.TRIAL:
            if trial_expired is None:
                trial_expired = record.trial_ends_at is not None and record.trial_ends_at <= now
            if trial_expired:
                return Decision.lock(LockReason.TRIAL_EXPIRED, user, record)

        if record.max_seats <= 0 or record.is_over_capacity:
            return Decision.lock(LockReason.INVALID_SEAT_CONFIGURATION, user, record)

        # Seat absence overrides every otherwise-allowing status
        if not record.is_seated(user.id):
            return Decision.lock(LockReason.NO_SEAT_ASSIGNED, user, record)

        if status == SubscriptionStatus.GRACE:
            return Decision.allow(
                grace_days_remaining(record.grace_started_at, now, grace_period_days)
            )

        return Decision.allow()
