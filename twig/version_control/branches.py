"""
Branch table: named movable pointers into the commit graph.
"""

from typing import Dict, List

from twig.logging import get_twig_logger
from .errors import (
    BranchAlreadyExistsError,
    CannotRemoveCurrentBranchError,
    InconsistentHistoryError,
    NoSuchBranchError,
)
from .schemas import BranchTableState

log = get_twig_logger("branches")


class BranchTable:
    """
    Mapping of branch name to commit id plus the checked-out branch.

    The current commit is always read through the current branch, so the two
    can never disagree in memory.
    """

    def __init__(self, current_branch: str, refs: Dict[str, str]):
        if current_branch not in refs:
            raise InconsistentHistoryError(
                f"Current branch {current_branch!r} is missing from the branch table."
            )
        self.current_branch = current_branch
        self.refs: Dict[str, str] = dict(refs)

    @classmethod
    def create_initial(cls, branch_name: str, commit_id: str) -> "BranchTable":
        return cls(branch_name, {branch_name: commit_id})

    @classmethod
    def from_state(cls, state: BranchTableState) -> "BranchTable":
        table = cls(state.current_branch, state.branches)
        if table.current_commit != state.current_commit:
            raise InconsistentHistoryError(
                "Current commit does not match the current branch's commit."
            )
        return table

    def to_state(self) -> BranchTableState:
        return BranchTableState(
            current_branch=self.current_branch,
            current_commit=self.current_commit,
            branches=dict(sorted(self.refs.items())),
        )

    @property
    def current_commit(self) -> str:
        return self.refs[self.current_branch]

    def get(self, name: str) -> str:
        """
        Commit id a branch points to.

        Raises:
            NoSuchBranchError: If the branch does not exist
        """
        if name not in self.refs:
            raise NoSuchBranchError()
        return self.refs[name]

    def branches(self) -> List[str]:
        """All branch names in lexicographic order."""
        return sorted(self.refs)

    def advance_current(self, commit_id: str) -> None:
        """Move the current branch to commit_id."""
        self.refs[self.current_branch] = commit_id

    def create(self, name: str) -> None:
        """
        Create a branch at the current commit.

        Raises:
            BranchAlreadyExistsError: If the name is taken
        """
        if name in self.refs:
            raise BranchAlreadyExistsError()
        self.refs[name] = self.current_commit
        log.info(f"Created branch: {name} at {self.current_commit[:8]}")

    def remove(self, name: str) -> None:
        """
        Delete a branch pointer; the commits stay.

        Raises:
            CannotRemoveCurrentBranchError: If name is the current branch
            NoSuchBranchError: If the branch does not exist
        """
        if name == self.current_branch:
            raise CannotRemoveCurrentBranchError()
        if name not in self.refs:
            raise NoSuchBranchError()
        del self.refs[name]
        log.info(f"Removed branch: {name}")

    def switch(self, name: str) -> None:
        """Make name the current branch."""
        self.get(name)
        self.current_branch = name
