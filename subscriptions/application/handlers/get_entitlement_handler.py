"""
GetEntitlementHandler.

Handler for the entitlement query.
"""
import logging

from core.domain.exceptions import NetworkError
from subscriptions.application.dto.entitlement_dto import (
    EntitlementDTO,
    company_dto,
    decision_dto,
)
from subscriptions.application.queries.get_entitlement import GetEntitlementQuery
from subscriptions.application.services.entitlement_session import EntitlementSession

logger = logging.getLogger(__name__)


class GetEntitlementHandler:
    """Handler for GetEntitlementQuery."""

    def __init__(self, session: EntitlementSession):
        """Initialize handler with the user's entitlement session."""
        self.session = session

    async def handle(self, query: GetEntitlementQuery) -> EntitlementDTO:
        """
        Handle get entitlement query.

        Seeds the store from cache, then refreshes from the backend. When
        the backend is unreachable and a cached record exists, the cached
        record is served and flagged stale.

        Args:
            query: GetEntitlementQuery

        Returns:
            EntitlementDTO

        Raises:
            NetworkError: If the backend is unreachable and nothing is cached
            CompanyNotFoundError: If the backend does not know the company
        """
        if query.company_id != self.session.company_id:
            raise ValueError("Query company does not match the session company")

        await self.session.hydrate_from_cache()

        stale = False
        try:
            await self.session.refresh()
        except NetworkError as e:
            if not query.allow_stale or self.session.store.record is None:
                raise
            logger.warning(
                "Serving cached entitlement for company %s: %s", query.company_id, e.message
            )
            stale = True

        snapshot = self.session.snapshot()
        return EntitlementDTO(
            company=company_dto(snapshot),
            decision=decision_dto(self.session.decision()),
            source=snapshot.source.value,
            stale=stale,
        )
