"""
Remote sync port (interface).

This defines the contract for talking to the authoritative billing
backend. Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import List

from subscriptions.domain.company import CompanyRecord


class RemoteSync(ABC):
    """
    Abstract boundary to the billing backend.

    This is a port in hexagonal architecture. Both operations are
    idempotent at the backend: resubmitting the same full seated set is
    safe. Implementations raise NetworkError for transient failures,
    BackendRejectedError for authoritative refusals and
    CompanyNotFoundError when the company does not exist.
    """

    @abstractmethod
    async def refresh_company(self, company_id: str) -> CompanyRecord:
        """
        Fetch the authoritative company record.

        Args:
            company_id: Company identifier

        Returns:
            CompanyRecord as the backend sees it now
        """
        pass

    @abstractmethod
    async def update_seated_employees(
        self, company_id: str, seated_user_ids: List[str]
    ) -> CompanyRecord:
        """
        Replace the company's seated set.

        Args:
            company_id: Company identifier
            seated_user_ids: Complete seated set (not a delta)

        Returns:
            CompanyRecord after the update
        """
        pass
