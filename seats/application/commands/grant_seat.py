"""
GrantSeatCommand.

Command to give a company member a seat.
"""
from dataclasses import dataclass


@dataclass
class GrantSeatCommand:
    """Command to grant a seat."""

    company_id: str
    target_user_id: str
