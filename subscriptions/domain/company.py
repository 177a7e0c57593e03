"""
Company subscription record.

This is the core domain entity mirrored from the billing backend.
It contains business logic and is independent of infrastructure.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import FrozenSet, Iterable, Optional, Tuple

from core.domain.value_objects import SubscriptionPlan, SubscriptionStatus


def ordered_unique(user_ids: Iterable[str]) -> Tuple[str, ...]:
    """Deduplicate user IDs, keeping first occurrence order."""
    return tuple(dict.fromkeys(user_ids))


@dataclass(frozen=True)
class CompanyRecord:
    """
    Company subscription record.

    Seated user IDs are kept in seating order, which is what makes
    "newest seated user" meaningful for downgrades. The capacity invariant
    is deliberately not enforced here: the backend is authoritative and
    may send an over-allocated record, which the store accepts and the
    gate locks out.
    """

    company_id: str
    subscription_status: SubscriptionStatus
    max_seats: int
    seated_user_ids: Tuple[str, ...] = ()
    subscription_plan: Optional[SubscriptionPlan] = None
    grace_started_at: Optional[datetime] = None
    admin_ids: FrozenSet[str] = field(default_factory=frozenset)
    trial_ends_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate company record."""
        if not self.company_id:
            raise ValueError("Company ID is required")
        if self.max_seats < 0:
            raise ValueError("Max seats cannot be negative")
        if (self.subscription_status == SubscriptionStatus.GRACE) != (
            self.grace_started_at is not None
        ):
            raise ValueError("grace_started_at must be set if and only if status is grace")
        object.__setattr__(self, "seated_user_ids", ordered_unique(self.seated_user_ids))
        object.__setattr__(self, "admin_ids", frozenset(self.admin_ids))

    @classmethod
    def create(
        cls,
        company_id: str,
        subscription_status: SubscriptionStatus,
        subscription_plan: Optional[SubscriptionPlan] = None,
        max_seats: Optional[int] = None,
        seated_user_ids: Iterable[str] = (),
        admin_ids: Iterable[str] = (),
        grace_started_at: Optional[datetime] = None,
        trial_ends_at: Optional[datetime] = None,
    ) -> "CompanyRecord":
        """
        Create a CompanyRecord.

        Args:
            company_id: Company identifier
            subscription_status: Current subscription status
            subscription_plan: Plan tier, if known
            max_seats: Seat count (defaults to the plan's included seats)
            seated_user_ids: Seated users in seating order
            admin_ids: Company administrators
            grace_started_at: Grace period start (required for grace status)
            trial_ends_at: Trial end, if on trial

        Returns:
            CompanyRecord instance
        """
        if max_seats is None:
            max_seats = subscription_plan.default_max_seats if subscription_plan else 0
        return cls(
            company_id=company_id,
            subscription_status=subscription_status,
            subscription_plan=subscription_plan,
            max_seats=max_seats,
            seated_user_ids=tuple(seated_user_ids),
            admin_ids=frozenset(admin_ids),
            grace_started_at=grace_started_at,
            trial_ends_at=trial_ends_at,
        )

    @property
    def seated_count(self) -> int:
        """Number of seated users."""
        return len(self.seated_user_ids)

    @property
    def available_seats(self) -> int:
        """Unassigned seats, never negative."""
        return max(0, self.max_seats - self.seated_count)

    @property
    def is_over_capacity(self) -> bool:
        """True when more users are seated than the plan allows."""
        return self.seated_count > self.max_seats

    def is_seated(self, user_id: str) -> bool:
        """Check whether a user holds a seat."""
        return user_id in self.seated_user_ids

    def is_admin(self, user_id: str) -> bool:
        """Check whether a user is a company administrator."""
        return user_id in self.admin_ids

    def seated_admin_ids(self) -> Tuple[str, ...]:
        """Seated users who are administrators, in seating order."""
        return tuple(uid for uid in self.seated_user_ids if uid in self.admin_ids)

    def newest_seated_non_admin(self) -> Optional[str]:
        """
        Most recently seated non-admin user.

        Returns:
            User ID or None if every seated user is an admin
        """
        for user_id in reversed(self.seated_user_ids):
            if user_id not in self.admin_ids:
                return user_id
        return None

    def with_seats(self, seated_user_ids: Iterable[str]) -> "CompanyRecord":
        """
        Create a new record with a replaced seated set.

        Args:
            seated_user_ids: New seated users in seating order

        Returns:
            New CompanyRecord instance
        """
        return replace(self, seated_user_ids=ordered_unique(seated_user_ids))
