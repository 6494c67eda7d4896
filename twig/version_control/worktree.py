"""
Working-tree access and reconciliation.

Compares and overwrites files in the live directory against commit trees,
refusing to clobber files the repository does not track.
"""

from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from twig.logging import get_twig_logger
from .errors import FileNotFoundInWorkTreeError, UntrackedFileConflictError
from .objects import Blob, Commit, ObjectKind
from .storage import ObjectStore

log = get_twig_logger("worktree")


class WorkingTree:
    """
    The user's files under the repository root.

    Paths are POSIX-style and relative to the root. The repository metadata
    directory is never listed or touched.
    """

    def __init__(self, root: Path, objects: ObjectStore, repo_dir_name: str = ".twig"):
        self.root = root
        self.objects = objects
        self.repo_dir_name = repo_dir_name

    def _full_path(self, path: str) -> Path:
        return self.root / path

    def files(self) -> List[str]:
        """All working files, sorted."""
        result = []
        for entry in self.root.rglob("*"):
            relative = entry.relative_to(self.root)
            if relative.parts[0] == self.repo_dir_name or not entry.is_file():
                continue
            result.append(relative.as_posix())
        return sorted(result)

    def exists(self, path: str) -> bool:
        return self._full_path(path).is_file()

    def read(self, path: str) -> bytes:
        full_path = self._full_path(path)
        if not full_path.is_file():
            raise FileNotFoundInWorkTreeError()
        return full_path.read_bytes()

    def blob(self, path: str) -> Blob:
        return Blob(path=path, content=self.read(path))

    def blob_id(self, path: str) -> Optional[str]:
        """Blob id of the working file, or None if it does not exist."""
        if not self.exists(path):
            return None
        return self.blob(path).blob_id

    def write(self, path: str, content: bytes) -> None:
        full_path = self._full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)

    def delete(self, path: str) -> None:
        self._full_path(path).unlink(missing_ok=True)

    def restore(self, path: str, blob_id: str) -> None:
        """Overwrite the working file with a stored blob."""
        self.write(path, self.objects.get(ObjectKind.BLOB, blob_id))

    def check_untracked(self, incoming: Mapping[str, str], paths: Iterable[str]) -> None:
        """
        Refuse to overwrite untracked working files.

        Args:
            incoming: Tree providing the content about to be written
            paths: Paths the caller does not track and is about to write

        Raises:
            UntrackedFileConflictError: If one of paths exists on disk with
                content other than incoming[path]
        """
        for path in sorted(paths):
            if self.exists(path) and self.blob_id(path) != incoming[path]:
                log.info("Untracked file in the way: {}", path, path=path)
                raise UntrackedFileConflictError()

    def switch(self, to: Commit, from_: Commit) -> None:
        """
        Replace the files of from_ with the files of to.

        The untracked-file check completes before anything is deleted or
        written.

        Raises:
            UntrackedFileConflictError: If an untracked file would be overwritten
        """
        incoming = set(to.tree) - set(from_.tree)
        outgoing = set(from_.tree) - set(to.tree)

        self.check_untracked(to.tree, incoming)

        for path in sorted(outgoing):
            self.delete(path)
        for path, blob_id in to.tree.items():
            self.restore(path, blob_id)

        log.debug(
            "Switched work tree to {}",
            to.commit_id[:8],
            written=len(to.tree),
            deleted=len(outgoing),
        )
