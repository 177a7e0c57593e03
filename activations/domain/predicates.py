"""
Terminal and rejection predicates for polling sessions.
"""
from activations.domain.polling import Predicate
from core.domain.value_objects import SubscriptionStatus
from subscriptions.domain.company import CompanyRecord

CONFIRMED_STATUSES = (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL)


def payment_confirmed(record: CompanyRecord) -> bool:
    """Payment went through: the subscription is active or on trial."""
    return record.subscription_status in CONFIRMED_STATUSES


def seat_assigned(user_id: str) -> Predicate:
    """
    Build a predicate that holds once a user is seated.

    Args:
        user_id: User waiting for their seat

    Returns:
        Predicate
    """

    def predicate(record: CompanyRecord) -> bool:
        return record.is_seated(user_id)

    return predicate


def payment_rejected(record: CompanyRecord) -> bool:
    """The backend cancelled the subscription instead of activating it."""
    return record.subscription_status == SubscriptionStatus.CANCELLED
