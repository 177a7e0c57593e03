"""
CommitSeatsCommand.

Command to save a company's complete seated set.
"""
from dataclasses import dataclass, field
from typing import List


@dataclass
class CommitSeatsCommand:
    """Command to replace the seated set."""

    company_id: str
    seated_user_ids: List[str] = field(default_factory=list)
