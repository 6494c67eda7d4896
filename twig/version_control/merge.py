"""
Three-way merge of two branches.

The merge base is the split point found by CommitGraph.split_point. Each path
is reconciled from its versions in the split point (L), the current commit (C)
and the other branch's commit (O). Planning is side-effect free; the plan is
applied to the work tree and index only once every check has passed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from twig.logging import get_twig_logger
from .branches import BranchTable
from .errors import (
    AlreadyAncestorError,
    InconsistentHistoryError,
    SameBranchError,
    UncommittedChangesError,
)
from .graph import CommitGraph
from .objects import Blob, Commit, ObjectKind
from .staging import StagingArea
from .storage import ObjectStore
from .worktree import WorkingTree

log = get_twig_logger("merge")

CONFLICT_HEAD = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_FOOTER = b">>>>>>>\n"


class MergeAction(str, Enum):
    """What the merge does to one path."""

    TAKE_OTHER = "take_other"
    REMOVE = "remove"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class FileAction:
    """Planned change to one path, with the blob ids it was derived from."""

    path: str
    action: MergeAction
    current: Optional[str]
    other: Optional[str]


@dataclass
class MergePlan:
    """Ordered list of per-path actions for one merge."""

    actions: List[FileAction] = field(default_factory=list)

    @property
    def conflicts(self) -> List[str]:
        return [a.path for a in self.actions if a.action == MergeAction.CONFLICT]


@dataclass
class MergeResult:
    """
    Outcome of a merge.

    Attributes:
        commit_id: New merge commit, or the other tip after a fast-forward
        conflicted_paths: Paths written with conflict markers
        fast_forward: True if the merge was resolved by checking out the
            other branch
    """

    commit_id: str
    conflicted_paths: List[str] = field(default_factory=list)
    fast_forward: bool = False

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicted_paths)


def conflict_content(current: Optional[bytes], other: Optional[bytes]) -> bytes:
    """Concatenate both sides between conflict markers; a missing side is empty."""
    return b"".join(
        [CONFLICT_HEAD, current or b"", CONFLICT_SEPARATOR, other or b"", CONFLICT_FOOTER]
    )


def plan_merge(split: Commit, current: Commit, other: Commit) -> MergePlan:
    """
    Decide the action for every path of the split point and every path
    new in the other branch.

    Paths that need no change (C kept) produce no action.

    Args:
        split: Split point commit (L)
        current: Current branch tip (C)
        other: Other branch tip (O)

    Returns:
        MergePlan with actions sorted by path
    """
    actions: List[FileAction] = []

    def add(path: str, action: MergeAction) -> None:
        actions.append(FileAction(path, action, current.tree.get(path), other.tree.get(path)))

    for path, base in split.tree.items():
        c = current.tree.get(path)
        o = other.tree.get(path)

        if c is not None and o is not None:
            if c == o or o == base:
                continue
            if c == base:
                add(path, MergeAction.TAKE_OTHER)
            else:
                add(path, MergeAction.CONFLICT)
        elif c is None and o is not None:
            # Deleted here; conflict only if modified there
            if o != base:
                add(path, MergeAction.CONFLICT)
        elif c is not None and o is None:
            if c == base:
                add(path, MergeAction.REMOVE)
            else:
                add(path, MergeAction.CONFLICT)

    for path, o in other.tree.items():
        if path in split.tree:
            continue
        c = current.tree.get(path)
        if c is None:
            add(path, MergeAction.TAKE_OTHER)
        elif c != o:
            add(path, MergeAction.CONFLICT)

    actions.sort(key=lambda a: a.path)
    return MergePlan(actions)


class MergeEngine:
    """
    Merge another branch into the current branch.

    Mutates the given BranchTable and StagingArea in memory; the caller
    persists them.
    """

    def __init__(self, graph: CommitGraph, objects: ObjectStore, worktree: WorkingTree):
        self.graph = graph
        self.objects = objects
        self.worktree = worktree

    def merge(self, branches: BranchTable, index: StagingArea, branch_name: str) -> MergeResult:
        """
        Merge branch_name into the current branch.

        Args:
            branches: Branch table (updated in place)
            index: Staging area, must be empty (cleared on return)
            branch_name: Branch to merge in

        Returns:
            MergeResult

        Raises:
            UncommittedChangesError: If the index is not empty
            SameBranchError: If branch_name is the current branch
            NoSuchBranchError: If branch_name does not exist
            UntrackedFileConflictError: If an untracked file would be overwritten
            AlreadyAncestorError: If the other tip is already in current history
            InconsistentHistoryError: If the tips share no ancestor
        """
        if not index.is_empty():
            raise UncommittedChangesError()
        if branch_name == branches.current_branch:
            raise SameBranchError()
        other_id = branches.get(branch_name)
        current_id = branches.current_commit

        current = self.graph.get(current_id)
        other = self.graph.get(other_id)
        self.worktree.check_untracked(other.tree, set(other.tree) - set(current.tree))

        split_id = self.graph.split_point(current_id, other_id)
        if split_id is None:
            raise InconsistentHistoryError(
                f"No split point between {current_id[:8]} and {other_id[:8]}."
            )
        if split_id == other_id:
            raise AlreadyAncestorError()

        if split_id == current_id:
            self.worktree.switch(other, current)
            index.clear()
            branches.switch(branch_name)
            log.info("Fast-forwarded to {}", branch_name, commit_id=other_id)
            return MergeResult(commit_id=other_id, fast_forward=True)

        plan = plan_merge(self.graph.get(split_id), current, other)
        self._apply(plan, index)

        message = f"Merged {branch_name} into {branches.current_branch}."
        commit = self.graph.create(message, current_id, other_id, edits=index.fold())
        branches.advance_current(commit.commit_id)

        if plan.conflicts:
            log.info(
                "Merge of {} left conflicts",
                branch_name,
                conflicts=plan.conflicts,
                commit_id=commit.commit_id,
            )
        return MergeResult(commit_id=commit.commit_id, conflicted_paths=plan.conflicts)

    def _read(self, blob_id: Optional[str]) -> Optional[bytes]:
        if blob_id is None:
            return None
        return self.objects.get(ObjectKind.BLOB, blob_id)

    def _apply(self, plan: MergePlan, index: StagingArea) -> None:
        for item in plan.actions:
            if item.action == MergeAction.TAKE_OTHER:
                self.worktree.restore(item.path, item.other)
                index.entries[item.path] = item.other
            elif item.action == MergeAction.REMOVE:
                index.stage_removal(item.path)
                if self.worktree.blob_id(item.path) == item.current:
                    self.worktree.delete(item.path)
            else:
                content = conflict_content(self._read(item.current), self._read(item.other))
                self.worktree.write(item.path, content)
                index.stage_blob(Blob(item.path, content), self.objects)
            log.debug("{}: {}", item.action.value, item.path, path=item.path)
