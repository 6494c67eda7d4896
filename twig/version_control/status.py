"""
Status computation: compares branch table, index, current commit and
working files.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from .branches import BranchTable
from .objects import Commit
from .staging import StagingArea
from .worktree import WorkingTree


class ChangeType(str, Enum):
    """Kind of unstaged change to a tracked file."""

    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass
class StatusReport:
    """Snapshot of repository status."""

    current_branch: str
    branches: List[str]
    staged: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    unstaged: List[Tuple[str, ChangeType]] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)

    def is_clean(self) -> bool:
        """True when nothing is staged, modified or untracked."""
        return not (self.staged or self.removed or self.unstaged or self.untracked)

    def format(self) -> str:
        """Render the report as the five-section status text."""
        branch_lines = [f"*{self.current_branch}"] + [
            name for name in self.branches if name != self.current_branch
        ]
        sections = [
            ("Branches", branch_lines),
            ("Staged Files", self.staged),
            ("Removed Files", self.removed),
            (
                "Modifications Not Staged For Commit",
                [f"{path} ({change.value})" for path, change in self.unstaged],
            ),
            ("Untracked Files", self.untracked),
        ]
        output = []
        for title, lines in sections:
            output.append(f"=== {title} ===")
            output.extend(lines)
            output.append("")
        return "\n".join(output) + "\n"


def compute_status(
    branches: BranchTable, index: StagingArea, head: Commit, worktree: WorkingTree
) -> StatusReport:
    """
    Compute the status of the repository.

    Args:
        branches: Branch table
        index: Staging area
        head: Current commit
        worktree: Working files

    Returns:
        StatusReport with every list sorted
    """
    working_files = set(worktree.files())

    # Expected blob per path: the staged one if any, else the committed one.
    expected = dict(head.tree)
    expected.update(index.entries)

    unstaged: List[Tuple[str, ChangeType]] = []
    for path, blob_id in sorted(expected.items()):
        if blob_id is None:
            continue
        if path not in working_files:
            unstaged.append((path, ChangeType.DELETED))
        elif worktree.blob_id(path) != blob_id:
            unstaged.append((path, ChangeType.MODIFIED))

    untracked = sorted(
        path for path in working_files if path not in head.tree and path not in index.entries
    )

    return StatusReport(
        current_branch=branches.current_branch,
        branches=branches.branches(),
        staged=index.staged(),
        removed=index.removed(),
        unstaged=unstaged,
        untracked=untracked,
    )
