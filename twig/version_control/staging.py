"""
Staging area (index) for the next commit.

The index records pending changes on top of the current commit's tree: a
staged blob id for additions and modifications, or a tombstone for removals.
"""

from typing import Dict, List, Optional

from twig.logging import get_twig_logger
from .errors import NothingToRemoveError
from .objects import Blob, Commit, ObjectKind, TreeEdit
from .schemas import IndexState
from .storage import ObjectStore
from .worktree import WorkingTree

log = get_twig_logger("index")

# Tombstone value for a staged removal
REMOVED = None


class StagingArea:
    """Mutable table of path -> staged blob id (or REMOVED)."""

    def __init__(self, entries: Optional[Dict[str, Optional[str]]] = None):
        self.entries: Dict[str, Optional[str]] = dict(entries or {})

    @classmethod
    def from_state(cls, state: IndexState) -> "StagingArea":
        return cls(state.entries)

    def to_state(self) -> IndexState:
        return IndexState(entries=dict(sorted(self.entries.items())))

    def is_empty(self) -> bool:
        return not self.entries

    def clear(self) -> None:
        self.entries.clear()

    def staged(self) -> List[str]:
        """Paths staged for addition or modification, sorted."""
        return sorted(p for p, blob_id in self.entries.items() if blob_id is not REMOVED)

    def removed(self) -> List[str]:
        """Paths staged for removal, sorted."""
        return sorted(p for p, blob_id in self.entries.items() if blob_id is REMOVED)

    def stage_blob(self, blob: Blob, objects: ObjectStore) -> str:
        """Write blob to the store and record it for its path."""
        blob_id = objects.put(ObjectKind.BLOB, blob.content, label=blob.path)
        self.entries[blob.path] = blob_id
        return blob_id

    def stage_removal(self, path: str) -> None:
        self.entries[path] = REMOVED

    def stage(self, path: str, worktree: WorkingTree, head: Commit, objects: ObjectStore) -> None:
        """
        Stage the working copy of path.

        If the working copy matches the version in head, any pending entry
        for path is dropped instead.

        Raises:
            FileNotFoundInWorkTreeError: If the working file does not exist
        """
        blob = worktree.blob(path)
        if head.tree.get(path) == blob.blob_id:
            self.entries.pop(path, None)
            log.debug("{} matches the current commit; unstaged", path, path=path)
            return

        self.stage_blob(blob, objects)
        log.debug("Staged {}", path, path=path, blob_id=blob.blob_id)

    def unstage_as_removed(self, path: str, worktree: WorkingTree, head: Commit) -> None:
        """
        Stage path for removal or drop it from the index.

        A path tracked by head gets a tombstone, and its working copy is
        deleted only if it still matches the committed blob. A path that is
        only staged is simply unstaged.

        Raises:
            NothingToRemoveError: If path is neither staged nor tracked
        """
        committed_id = head.tree.get(path)
        if committed_id is None and path not in self.entries:
            raise NothingToRemoveError()

        if committed_id is None:
            del self.entries[path]
            log.debug("Unstaged {}", path, path=path)
            return

        self.stage_removal(path)
        if worktree.blob_id(path) == committed_id:
            worktree.delete(path)
        log.debug("Staged removal of {}", path, path=path)

    def edits(self) -> List[TreeEdit]:
        """Pending changes as (path, blob id or None) edits, sorted by path."""
        return sorted(self.entries.items())

    def fold(self) -> List[TreeEdit]:
        """Return the pending edits and clear the index."""
        edits = self.edits()
        self.clear()
        return edits
