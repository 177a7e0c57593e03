"""
Seat command handlers.

Each handler loads the company if needed, performs the seat change through
the session's SeatAllocator and waits for any follow-up confirmation.
"""
import logging
from typing import Optional

from activations.application.dto.polling_dto import PollingStatusDTO
from activations.domain.polling import PollingState
from seats.application.commands.commit_seats import CommitSeatsCommand
from seats.application.commands.grant_seat import GrantSeatCommand
from seats.application.commands.revoke_seat import RevokeSeatCommand
from seats.application.dto.seat_dto import SeatChangeResponseDTO
from subscriptions.application.dto.entitlement_dto import company_dto, decision_dto
from subscriptions.application.services.entitlement_session import EntitlementSession

logger = logging.getLogger(__name__)


class _SeatHandler:
    """Shared plumbing for seat command handlers."""

    def __init__(self, session: EntitlementSession):
        """Initialize handler with the acting user's entitlement session."""
        self.session = session

    def _check_company(self, company_id: str) -> None:
        if company_id != self.session.company_id:
            raise ValueError("Command company does not match the session company")

    async def _confirmation(self) -> Optional[PollingStatusDTO]:
        if self.session.poller.state != PollingState.POLLING:
            return None
        return PollingStatusDTO.from_status(await self.session.poller.wait())

    async def _response(
        self, action: str, target_user_id: Optional[str], message: str
    ) -> SeatChangeResponseDTO:
        confirmation = await self._confirmation()
        return SeatChangeResponseDTO(
            action=action,
            target_user_id=target_user_id,
            company=company_dto(self.session.snapshot()),
            decision=decision_dto(self.session.decision()),
            removal_candidate=self.session.allocator.removal_candidate(),
            confirmation=confirmation,
            message=message,
        )


class GrantSeatHandler(_SeatHandler):
    """Handler for GrantSeatCommand."""

    async def handle(self, command: GrantSeatCommand) -> SeatChangeResponseDTO:
        """
        Handle grant seat command.

        Args:
            command: GrantSeatCommand

        Returns:
            SeatChangeResponseDTO

        Raises:
            NotAuthorizedError: If the acting user is not an admin
            CapacityExceededError: If no seat is available
            NetworkError: If the backend could not be reached
            BackendRejectedError: If the backend refused the change
        """
        self._check_company(command.company_id)
        await self.session.ensure_loaded()
        await self.session.grant_seat(command.target_user_id)
        return await self._response("grant", command.target_user_id, "Seat granted")


class RevokeSeatHandler(_SeatHandler):
    """Handler for RevokeSeatCommand."""

    async def handle(self, command: RevokeSeatCommand) -> SeatChangeResponseDTO:
        """
        Handle revoke seat command.

        Args:
            command: RevokeSeatCommand

        Returns:
            SeatChangeResponseDTO

        Raises:
            NotAuthorizedError: If the acting user is not an admin
            SelfLockViolationError: If the only seated admin targets themselves
            NetworkError: If the backend could not be reached
            BackendRejectedError: If the backend refused the change
        """
        self._check_company(command.company_id)
        await self.session.ensure_loaded()
        await self.session.revoke_seat(command.target_user_id)
        return await self._response("revoke", command.target_user_id, "Seat revoked")


class CommitSeatsHandler(_SeatHandler):
    """Handler for CommitSeatsCommand."""

    async def handle(self, command: CommitSeatsCommand) -> SeatChangeResponseDTO:
        """
        Handle commit seats command.

        Args:
            command: CommitSeatsCommand

        Returns:
            SeatChangeResponseDTO

        Raises:
            NotAuthorizedError: If the acting user is not an admin
            CapacityExceededError: If the set is larger than the plan
            NetworkError: If the backend could not be reached
            BackendRejectedError: If the backend refused the change
        """
        self._check_company(command.company_id)
        await self.session.ensure_loaded()
        record = await self.session.commit(command.seated_user_ids)
        logger.debug("Committed %d seats for company %s", record.seated_count, record.company_id)
        return await self._response("commit", None, "Seats saved")
