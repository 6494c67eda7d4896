"""
Pydantic schemas for the repository's mutable state files.

The branch table and the index are the only state that changes after it is
written; each is persisted as one JSON document.
"""

from typing import Dict, Optional
from pydantic import BaseModel, Field


class BranchTableState(BaseModel):
    """Persisted form of the branch table."""

    current_branch: str = Field(description="Name of the checked-out branch")
    current_commit: str = Field(description="Commit id the current branch points to")
    branches: Dict[str, str] = Field(
        default_factory=dict, description="Branch name to commit id"
    )


class IndexState(BaseModel):
    """Persisted form of the staging area."""

    entries: Dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="Path to staged blob id; null marks a staged removal",
    )
