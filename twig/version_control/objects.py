"""
Immutable objects stored in the repository.

Blobs hold one version of one file; commits snapshot a tree of blobs and link
to their parents. Both are identified by a SHA-256 digest over their content
plus a type tag, so a blob and a commit can never share an id.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import hashlib
import json

# (path, blob id) sets a path; (path, None) removes it.
TreeEdit = Tuple[str, Optional[str]]


class ObjectKind(str, Enum):
    """Type tag mixed into every object digest."""

    BLOB = "blob"
    COMMIT = "commit"


def compute_object_id(kind: ObjectKind, data: bytes, label: str = "") -> str:
    """
    Compute the content address of an object.

    Args:
        kind: Object type tag
        data: Raw object bytes
        label: Context label (the file path for blobs)

    Returns:
        Hex SHA-256 digest
    """
    digest = hashlib.sha256()
    digest.update(kind.value.encode())
    digest.update(b"\0")
    digest.update(label.encode())
    digest.update(b"\0")
    digest.update(data)
    return digest.hexdigest()


def now_timestamp() -> str:
    """Current UTC time as ISO-8601 at second resolution."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def apply_edits(tree: Mapping[str, str], edits: Iterable[TreeEdit]) -> Dict[str, str]:
    """Return a new tree with edits applied; the input tree is not modified."""
    result = dict(tree)
    for path, blob_id in edits:
        if blob_id is None:
            result.pop(path, None)
        else:
            result[path] = blob_id
    return result


@dataclass(frozen=True)
class Blob:
    """Content of one file at one point in time."""

    path: str
    content: bytes

    @cached_property
    def blob_id(self) -> str:
        return compute_object_id(ObjectKind.BLOB, self.content, label=self.path)


@dataclass(frozen=True)
class Commit:
    """
    Snapshot node in the history DAG.

    A root commit has no parents, a normal commit has `parent`, and a merge
    commit also has `second_parent`. The tree is exposed read-only.

    Attributes:
        message: Commit message
        timestamp: ISO-8601 UTC creation time
        tree: Mapping from tracked path to blob id
        parent: First parent commit id
        second_parent: Merged-in parent commit id
    """

    message: str
    timestamp: str
    tree: Mapping[str, str] = field(default_factory=dict)
    parent: Optional[str] = None
    second_parent: Optional[str] = None

    def __post_init__(self) -> None:
        frozen_tree = MappingProxyType(dict(sorted(self.tree.items())))
        object.__setattr__(self, "tree", frozen_tree)

    def __hash__(self) -> int:
        return hash(self.commit_id)

    @property
    def parents(self) -> List[str]:
        """Parent ids, first parent first."""
        return [p for p in (self.parent, self.second_parent) if p is not None]

    @property
    def is_merge(self) -> bool:
        return self.second_parent is not None

    @cached_property
    def commit_id(self) -> str:
        return compute_object_id(ObjectKind.COMMIT, self.to_json().encode())

    def child(
        self,
        message: str,
        edits: Iterable[TreeEdit] = (),
        second_parent: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> "Commit":
        """
        Create a commit whose tree starts from this commit's tree.

        Args:
            message: Commit message
            edits: (path, blob id or None) changes applied on top of this tree
            second_parent: Other parent for merge commits
            timestamp: Creation time (default: now)

        Returns:
            New Commit with this commit as first parent
        """
        return Commit(
            message=message,
            timestamp=timestamp or now_timestamp(),
            tree=apply_edits(self.tree, edits),
            parent=self.commit_id,
            second_parent=second_parent,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert commit to dictionary for serialization."""
        return {
            "message": self.message,
            "timestamp": self.timestamp,
            "parents": self.parents,
            "tree": dict(self.tree),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commit":
        """Create commit from dictionary."""
        parents = list(data.get("parents", []))
        return cls(
            message=data["message"],
            timestamp=data["timestamp"],
            tree=data.get("tree", {}),
            parent=parents[0] if parents else None,
            second_parent=parents[1] if len(parents) > 1 else None,
        )

    def to_json(self) -> str:
        """Canonical JSON form; the commit id is the digest of this string."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_json(cls, json_str: str) -> "Commit":
        """Create commit from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def format_date(self) -> str:
        return datetime.fromisoformat(self.timestamp).strftime("%a %b %d %H:%M:%S %Y %z")

    def format_log(self) -> str:
        """Render the commit as a log entry."""
        lines = ["===", f"commit {self.commit_id}"]
        if self.parent is not None and self.second_parent is not None:
            lines.append(f"Merge: {self.parent[:7]} {self.second_parent[:7]}")
        lines.append(f"Date: {self.format_date()}")
        lines.append(self.message)
        return "\n".join(lines) + "\n"
