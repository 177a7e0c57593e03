"""
GetEntitlementQuery.

Query to get the current access decision for the session's user.
"""
from dataclasses import dataclass


@dataclass
class GetEntitlementQuery:
    """Query to get entitlement state for a company."""

    company_id: str
    allow_stale: bool = True
