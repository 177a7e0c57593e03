"""
RevokeSeatCommand.

Command to take a seat away from a company member.
"""
from dataclasses import dataclass


@dataclass
class RevokeSeatCommand:
    """Command to revoke a seat."""

    company_id: str
    target_user_id: str
