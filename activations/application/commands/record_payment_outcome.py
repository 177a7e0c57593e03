"""
RecordPaymentOutcomeCommand.

Command carrying the payment processor's callback result.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class PaymentOutcome(Enum):
    """Result reported by the payment collaborator."""

    COMPLETED = "completed"
    CANCELED = "canceled"
    FAILED = "failed"

    def __str__(self) -> str:
        """Return outcome as string."""
        return self.value


@dataclass
class RecordPaymentOutcomeCommand:
    """Command to react to a payment outcome."""

    company_id: str
    outcome: PaymentOutcome
    reason: Optional[str] = None
    amount_due: Optional[Decimal] = None

    @property
    def is_free_checkout(self) -> bool:
        """True when a promotion covered the whole amount."""
        return self.amount_due is not None and self.amount_due <= 0
