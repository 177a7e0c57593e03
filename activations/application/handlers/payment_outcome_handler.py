"""
PaymentOutcomeHandler.

Handler for payment callbacks. Only a completed payment starts the
confirmation loop.
"""
import logging

from activations.application.commands.record_payment_outcome import (
    PaymentOutcome,
    RecordPaymentOutcomeCommand,
)
from activations.application.dto.polling_dto import (
    PaymentOutcomeResponseDTO,
    PollingStatusDTO,
)
from subscriptions.application.dto.entitlement_dto import decision_dto
from subscriptions.application.services.entitlement_session import EntitlementSession

logger = logging.getLogger(__name__)


class PaymentOutcomeHandler:
    """Handler for RecordPaymentOutcomeCommand."""

    def __init__(self, session: EntitlementSession):
        """Initialize handler with the paying user's entitlement session."""
        self.session = session

    async def handle(self, command: RecordPaymentOutcomeCommand) -> PaymentOutcomeResponseDTO:
        """
        Handle a payment outcome.

        Args:
            command: RecordPaymentOutcomeCommand

        Returns:
            PaymentOutcomeResponseDTO with the confirmation result
        """
        if command.company_id != self.session.company_id:
            raise ValueError("Command company does not match the session company")

        if command.outcome == PaymentOutcome.CANCELED:
            logger.info("Payment canceled by user for company %s", command.company_id)
            return self._response(command, None, "Payment was canceled. No changes were made.")

        if command.outcome == PaymentOutcome.FAILED:
            logger.warning(
                "Payment failed for company %s: %s", command.company_id, command.reason
            )
            return self._response(
                command, None, command.reason or "Payment failed. Please try again."
            )

        await self.session.hydrate_from_cache()

        if command.is_free_checkout and self.session.settings.free_checkout_skips_confirmation:
            polling_session = await self.session.skip_payment_confirmation()
        else:
            polling_session = self.session.start_payment_confirmation()

        status = await self.session.poller.wait(polling_session)
        return self._response(command, status, status.message if status else "")

    def _response(self, command, status, message: str) -> PaymentOutcomeResponseDTO:
        return PaymentOutcomeResponseDTO(
            outcome=command.outcome.value,
            confirmation=PollingStatusDTO.from_status(status),
            decision=decision_dto(self.session.decision()),
            message=message,
        )
