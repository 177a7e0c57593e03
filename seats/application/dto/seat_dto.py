"""
Seat DTOs for API responses.
"""
from dataclasses import dataclass
from typing import Optional

from activations.application.dto.polling_dto import PollingStatusDTO
from subscriptions.application.dto.entitlement_dto import (
    AccessDecisionDTO,
    CompanySubscriptionDTO,
)


@dataclass
class SeatChangeResponseDTO:
    """DTO for a seat change response."""

    action: str
    target_user_id: Optional[str]
    company: CompanySubscriptionDTO
    decision: AccessDecisionDTO
    removal_candidate: Optional[str]
    confirmation: Optional[PollingStatusDTO]
    message: str

