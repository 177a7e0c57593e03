"""
Entitlement DTOs for API responses.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from subscriptions.domain.gate import Decision
from subscriptions.domain.snapshot import EntitlementSnapshot


@dataclass
class CompanySubscriptionDTO:
    """DTO for a company's subscription and seats."""

    company_id: str
    subscription_status: str
    subscription_plan: Optional[str]
    max_seats: int
    seated_user_ids: List[str]
    available_seats: int
    grace_started_at: Optional[datetime]
    trial_ends_at: Optional[datetime]
    confirmed: bool
    version: int


@dataclass
class AccessDecisionDTO:
    """DTO for an access decision."""

    allowed: bool
    reason: Optional[str]
    title: str
    message: str
    show_grace_banner: bool
    grace_days_remaining: Optional[int]


@dataclass
class EntitlementDTO:
    """DTO for the entitlement view of one user."""

    company: Optional[CompanySubscriptionDTO]
    decision: AccessDecisionDTO
    source: str
    stale: bool = False


def company_dto(snapshot: EntitlementSnapshot) -> Optional[CompanySubscriptionDTO]:
    """
    Build the company DTO from a snapshot.

    Args:
        snapshot: Store snapshot

    Returns:
        CompanySubscriptionDTO or None when nothing is loaded
    """
    record = snapshot.record
    if record is None:
        return None
    return CompanySubscriptionDTO(
        company_id=record.company_id,
        subscription_status=record.subscription_status.value,
        subscription_plan=record.subscription_plan.value if record.subscription_plan else None,
        max_seats=record.max_seats,
        seated_user_ids=list(record.seated_user_ids),
        available_seats=record.available_seats,
        grace_started_at=record.grace_started_at,
        trial_ends_at=record.trial_ends_at,
        confirmed=snapshot.confirmed,
        version=snapshot.version,
    )


def decision_dto(decision: Decision) -> AccessDecisionDTO:
    """
    Build the decision DTO.

    Args:
        decision: Gate decision

    Returns:
        AccessDecisionDTO
    """
    return AccessDecisionDTO(
        allowed=decision.allowed,
        reason=decision.reason.value if decision.reason else None,
        title=decision.title,
        message=decision.message,
        show_grace_banner=decision.show_grace_banner,
        grace_days_remaining=decision.grace_days_remaining,
    )
