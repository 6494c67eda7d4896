"""
Storage backend for version control.

Handles persistence of immutable objects and of the mutable state files
(branch table and index) to disk.
"""

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from twig.logging import get_twig_logger
from .errors import CommitNotFoundError, ObjectNotFoundError
from .objects import ObjectKind, compute_object_id
from .schemas import BranchTableState, IndexState

log = get_twig_logger("object_store")


@contextmanager
def atomic_write(filepath: Path) -> Iterator:
    """
    Context manager for atomic file write operations (overwrite mode).

    Writes to a temporary file in the same directory, then renames it over
    the target so readers see either the old or the new content.

    Args:
        filepath: Target file path

    Yields:
        Binary file object for writing
    """
    temp_fd, temp_path = tempfile.mkstemp(
        dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
    )

    try:
        with os.fdopen(temp_fd, "wb") as f:
            yield f

        os.replace(temp_path, filepath)

    except Exception:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise


class ObjectStore:
    """
    Append-only content-addressed store for blobs and commits.

    Objects live under:
    - objects/
      - blobs/{id[:2]}/{id[2:]}
      - commits/{id[:2]}/{id[2:]}
    """

    def __init__(self, objects_dir: Path):
        self.objects_dir = objects_dir

    def _kind_dir(self, kind: ObjectKind) -> Path:
        return self.objects_dir / f"{kind.value}s"

    def _object_path(self, kind: ObjectKind, object_id: str) -> Path:
        return self._kind_dir(kind) / object_id[:2] / object_id[2:]

    def ensure_directories(self) -> None:
        for kind in ObjectKind:
            self._kind_dir(kind).mkdir(parents=True, exist_ok=True)

    def put(self, kind: ObjectKind, data: bytes, label: str = "") -> str:
        """
        Store an object, returning its id.

        Writing the same object twice is a no-op after the first write.

        Args:
            kind: Object type tag
            data: Object bytes
            label: Context label mixed into the digest (file path for blobs)

        Returns:
            Object id
        """
        object_id = compute_object_id(kind, data, label=label)
        path = self._object_path(kind, object_id)
        if path.exists():
            return object_id

        path.parent.mkdir(parents=True, exist_ok=True)
        with atomic_write(path) as f:
            f.write(data)
        log.debug(
            "Stored {} {}", kind.value, object_id[:8], kind=kind.value, size=len(data)
        )
        return object_id

    def get(self, kind: ObjectKind, object_id: str) -> bytes:
        """
        Read an object.

        Raises:
            ObjectNotFoundError: If no such object exists
        """
        path = self._object_path(kind, object_id)
        if len(object_id) < 3 or not path.is_file():
            raise ObjectNotFoundError(f"No {kind.value} with id {object_id}.")
        return path.read_bytes()

    def contains(self, kind: ObjectKind, object_id: str) -> bool:
        return len(object_id) > 2 and self._object_path(kind, object_id).is_file()

    def ids(self, kind: ObjectKind) -> List[str]:
        """List every stored id of a kind, sorted."""
        kind_dir = self._kind_dir(kind)
        if not kind_dir.exists():
            return []
        return sorted(
            f"{bucket.name}{entry.name}"
            for bucket in kind_dir.iterdir()
            if bucket.is_dir()
            for entry in bucket.iterdir()
            if entry.is_file() and not entry.name.startswith(".")
        )

    def resolve_prefix(self, kind: ObjectKind, prefix: str) -> str:
        """
        Expand an abbreviated id to the full id.

        Raises:
            CommitNotFoundError: If the prefix matches no object or more than one
        """
        if self.contains(kind, prefix):
            return prefix
        if len(prefix) < 2:
            raise CommitNotFoundError()

        bucket = self._kind_dir(kind) / prefix[:2]
        matches: List[str] = []
        if bucket.is_dir():
            matches = [
                f"{prefix[:2]}{entry.name}"
                for entry in bucket.iterdir()
                if entry.name.startswith(prefix[2:]) and not entry.name.startswith(".")
            ]
        if len(matches) != 1:
            raise CommitNotFoundError()
        return matches[0]


class RepositoryStorage:
    """
    File-based storage for one repository.

    Layout:
    - .twig/
      - objects/      (see ObjectStore)
      - branches      (BranchTableState JSON)
      - index         (IndexState JSON)
    """

    def __init__(self, repo_dir: Path):
        """
        Initialize storage.

        Args:
            repo_dir: Repository metadata directory (e.g. <root>/.twig)
        """
        self.repo_dir = repo_dir
        self.branches_file = self.repo_dir / "branches"
        self.index_file = self.repo_dir / "index"
        self.objects = ObjectStore(self.repo_dir / "objects")

    def exists(self) -> bool:
        return self.branches_file.is_file()

    def create_layout(self) -> None:
        self.repo_dir.mkdir(parents=True, exist_ok=True)
        self.objects.ensure_directories()

    def load_branch_table(self) -> BranchTableState:
        return BranchTableState.model_validate_json(self.branches_file.read_bytes())

    def save_branch_table(self, state: BranchTableState) -> None:
        with atomic_write(self.branches_file) as f:
            f.write(state.model_dump_json(indent=2).encode())

    def load_index(self) -> IndexState:
        if not self.index_file.exists():
            return IndexState()
        return IndexState.model_validate_json(self.index_file.read_bytes())

    def save_index(self, state: IndexState) -> None:
        with atomic_write(self.index_file) as f:
            f.write(state.model_dump_json(indent=2).encode())
