"""
Version-control engine.

Provides git-like operations on a single working directory: staging,
committing, branching, checkout, reset and three-way merge.
"""

from .errors import (
    VersionControlError,
    NotInitializedError,
    AlreadyInitializedError,
    FileNotFoundInWorkTreeError,
    CommitNotFoundError,
    PathNotInCommitError,
    NothingToRemoveError,
    NoChangesToCommitError,
    EmptyCommitMessageError,
    UntrackedFileConflictError,
    BranchAlreadyExistsError,
    NoSuchBranchError,
    CannotRemoveCurrentBranchError,
    SameBranchError,
    UncommittedChangesError,
    AlreadyAncestorError,
    NoMatchingCommitError,
    ObjectNotFoundError,
    InconsistentHistoryError,
)

from .objects import (
    Blob,
    Commit,
    ObjectKind,
    compute_object_id,
    apply_edits,
)

from .storage import ObjectStore, RepositoryStorage
from .graph import CommitGraph
from .staging import StagingArea, REMOVED
from .branches import BranchTable
from .worktree import WorkingTree
from .status import StatusReport, ChangeType, compute_status
from .merge import (
    MergeEngine,
    MergeResult,
    MergePlan,
    MergeAction,
    FileAction,
    plan_merge,
    conflict_content,
)
from .repository import Repository

__all__ = [
    # Errors
    "VersionControlError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "FileNotFoundInWorkTreeError",
    "CommitNotFoundError",
    "PathNotInCommitError",
    "NothingToRemoveError",
    "NoChangesToCommitError",
    "EmptyCommitMessageError",
    "UntrackedFileConflictError",
    "BranchAlreadyExistsError",
    "NoSuchBranchError",
    "CannotRemoveCurrentBranchError",
    "SameBranchError",
    "UncommittedChangesError",
    "AlreadyAncestorError",
    "NoMatchingCommitError",
    "ObjectNotFoundError",
    "InconsistentHistoryError",
    # Objects
    "Blob",
    "Commit",
    "ObjectKind",
    "compute_object_id",
    "apply_edits",
    # Storage
    "ObjectStore",
    "RepositoryStorage",
    # Engine
    "CommitGraph",
    "StagingArea",
    "REMOVED",
    "BranchTable",
    "WorkingTree",
    "StatusReport",
    "ChangeType",
    "compute_status",
    "MergeEngine",
    "MergeResult",
    "MergePlan",
    "MergeAction",
    "FileAction",
    "plan_merge",
    "conflict_content",
    # Facade
    "Repository",
]
