"""
Polling DTOs for API responses.
"""
from dataclasses import dataclass
from typing import Optional

from activations.domain.polling import PollingStatus
from subscriptions.application.dto.entitlement_dto import AccessDecisionDTO


@dataclass
class PollingStatusDTO:
    """DTO for a polling session's final status."""

    state: str
    attempts: int
    max_attempts: int
    message: str
    error_code: Optional[str]

    @classmethod
    def from_status(cls, status: Optional[PollingStatus]) -> Optional["PollingStatusDTO"]:
        """Build from a domain status; None stays None."""
        if status is None:
            return None
        return cls(
            state=status.state.value,
            attempts=status.attempt,
            max_attempts=status.max_attempts,
            message=status.message,
            error_code=status.error_code,
        )


@dataclass
class PaymentOutcomeResponseDTO:
    """DTO for a payment outcome response."""

    outcome: str
    confirmation: Optional[PollingStatusDTO]
    decision: AccessDecisionDTO
    message: str
