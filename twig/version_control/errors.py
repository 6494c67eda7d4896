"""
Error taxonomy for the version-control engine.

Every error except InconsistentHistoryError is an expected condition the user
can recover from. Commands raise them before any persisted state is touched.
"""


class VersionControlError(Exception):
    """Base exception for version control errors."""

    message = "Version control error."

    def __init__(self, message: str = ""):
        super().__init__(message or self.message)


class NotInitializedError(VersionControlError):
    message = "Not in an initialized twig directory."


class AlreadyInitializedError(VersionControlError):
    message = "A twig version-control system already exists in the current directory."


class FileNotFoundInWorkTreeError(VersionControlError):
    message = "File does not exist."


class CommitNotFoundError(VersionControlError):
    message = "No commit with that id exists."


class PathNotInCommitError(VersionControlError):
    message = "File does not exist in that commit."


class NothingToRemoveError(VersionControlError):
    message = "No reason to remove the file."


class NoChangesToCommitError(VersionControlError):
    message = "No changes added to the commit."


class EmptyCommitMessageError(VersionControlError):
    message = "Please enter a commit message."


class UntrackedFileConflictError(VersionControlError):
    message = (
        "There is an untracked file in the way; delete it, or add and commit it first."
    )


class BranchAlreadyExistsError(VersionControlError):
    message = "A branch with that name already exists."


class NoSuchBranchError(VersionControlError):
    message = "A branch with that name does not exist."


class CannotRemoveCurrentBranchError(VersionControlError):
    message = "Cannot remove the current branch."


class SameBranchError(VersionControlError):
    message = "Cannot merge a branch with itself."


class UncommittedChangesError(VersionControlError):
    message = "You have uncommitted changes."


class AlreadyAncestorError(VersionControlError):
    message = "Given branch is an ancestor of the current branch."


class NoMatchingCommitError(VersionControlError):
    message = "Found no commit with that message."


class ObjectNotFoundError(VersionControlError):
    message = "Object not found in the object store."


class InconsistentHistoryError(VersionControlError):
    """
    Raised when persisted history violates an engine invariant.

    Unlike the other errors this is not a user mistake: it signals a corrupted
    repository (no split point between two tips, or a branch table whose
    current commit disagrees with its current branch).
    """

    message = "Repository history is inconsistent."
