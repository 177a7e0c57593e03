"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


class SubscriptionStatus(Enum):
    """Company subscription status as reported by the billing backend."""

    TRIAL = "trial"
    ACTIVE = "active"
    GRACE = "grace"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value

    @property
    def display_name(self) -> str:
        """Human-readable status name."""
        if self is SubscriptionStatus.GRACE:
            return "Grace Period"
        return self.value.capitalize()

    @property
    def is_inactive(self) -> bool:
        """True for statuses that never grant access."""
        return self in (SubscriptionStatus.EXPIRED, SubscriptionStatus.CANCELLED)


class SubscriptionPlan(Enum):
    """Subscription plan tiers."""

    STARTER = "starter"
    TEAM = "team"
    BUSINESS = "business"

    def __str__(self) -> str:
        """Return plan as string."""
        return self.value

    @property
    def default_max_seats(self) -> int:
        """Seats included with the plan unless the backend says otherwise."""
        return _PLAN_SEATS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SubscriptionPlan"]:
        """
        Parse a plan name leniently.

        Unknown names (including the backend's trial pseudo-plan) map to None.
        """
        if not value:
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None


_PLAN_SEATS = {
    SubscriptionPlan.STARTER: 3,
    SubscriptionPlan.TEAM: 5,
    SubscriptionPlan.BUSINESS: 10,
}


class UserRole(Enum):
    """Role of a user inside the company."""

    ADMIN = "admin"
    OFFICE_CREW = "officeCrew"
    FIELD_CREW = "fieldCrew"

    def __str__(self) -> str:
        """Return role as string."""
        return self.value


@dataclass(frozen=True)
class User(ValueObject):
    """The signed-in user as seen by the entitlement engine (read-only)."""

    id: str
    role: UserRole = UserRole.FIELD_CREW
    is_company_admin: bool = False

    def __post_init__(self):
        """Validate user."""
        if not self.id or not self.id.strip():
            raise ValueError("User ID cannot be empty")

    @property
    def is_admin(self) -> bool:
        """Whether the user may manage seats."""
        return self.is_company_admin or self.role == UserRole.ADMIN

    def __str__(self) -> str:
        """Return user ID."""
        return self.id
