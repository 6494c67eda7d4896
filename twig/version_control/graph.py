"""
Commit graph and ancestry queries.

Commits are kept in the object store and referenced by id only; parent links
are plain ids, so walking the graph is a sequence of store lookups.
"""

from collections import deque
from typing import Deque, Iterable, Iterator, List, Optional, Set

from twig.logging import get_twig_logger
from .errors import CommitNotFoundError, NoMatchingCommitError, ObjectNotFoundError
from .objects import Commit, ObjectKind, TreeEdit
from .storage import ObjectStore

log = get_twig_logger("graph")


class CommitGraph:
    """
    Read and extend the commit DAG stored in an ObjectStore.

    Provides:
    - Commit creation and lookup
    - Breadth-first ancestor traversal
    - Split point (merge base) search
    - History queries for log, global-log and find
    """

    def __init__(self, objects: ObjectStore):
        self.objects = objects

    def get(self, commit_id: str) -> Commit:
        """
        Load a commit by its full id.

        Raises:
            CommitNotFoundError: If no such commit exists
        """
        try:
            data = self.objects.get(ObjectKind.COMMIT, commit_id)
        except ObjectNotFoundError:
            raise CommitNotFoundError() from None
        return Commit.from_json(data.decode())

    def resolve(self, commit_ref: str) -> Commit:
        """Load a commit by its full or abbreviated id."""
        return self.get(self.objects.resolve_prefix(ObjectKind.COMMIT, commit_ref))

    def store(self, commit: Commit) -> str:
        commit_id = self.objects.put(ObjectKind.COMMIT, commit.to_json().encode())
        log.info(
            "Committed {}: {}",
            commit_id[:8],
            commit.message,
            commit_id=commit_id,
            parents=commit.parents,
        )
        return commit_id

    def create(
        self,
        message: str,
        parent_id: str,
        second_parent_id: Optional[str] = None,
        edits: Iterable[TreeEdit] = (),
        timestamp: Optional[str] = None,
    ) -> Commit:
        """
        Create and store a commit on top of parent_id.

        The new tree is the parent's tree with edits applied; the second
        parent only contributes merge metadata.

        Args:
            message: Commit message
            parent_id: First parent
            second_parent_id: Merged-in parent, for merge commits
            edits: Staged (path, blob id or None) changes
            timestamp: Creation time (default: now)

        Returns:
            The stored commit
        """
        parent = self.get(parent_id)
        commit = parent.child(
            message, edits, second_parent=second_parent_id, timestamp=timestamp
        )
        self.store(commit)
        return commit

    def ancestors(self, commit_id: str) -> Iterator[str]:
        """
        Lazily yield commit_id and its ancestors breadth-first.

        Each commit's first parent is visited before its second parent and
        every id is yielded once.
        """
        seen: Set[str] = {commit_id}
        queue: Deque[str] = deque([commit_id])
        while queue:
            current = queue.popleft()
            yield current
            for parent in self.get(current).parents:
                if parent not in seen:
                    seen.add(parent)
                    queue.append(parent)

    def _ancestor_closure(self, commit_id: str) -> Set[str]:
        """All commits reachable through parent links from commit_id (exclusive)."""
        closure = set(self.ancestors(commit_id))
        closure.discard(commit_id)
        return closure

    def split_point(self, a: str, b: str) -> Optional[str]:
        """
        Find the common ancestor used as merge base for a and b.

        Builds the ancestor closure of a, then explores from b breadth-first,
        level by level, and returns the first commit that is a itself or in
        that closure. The search is asymmetric: split_point(a, b) and
        split_point(b, a) may differ when there are several merge bases.

        Returns:
            The split point id, or None if a and b share no ancestor
        """
        closure_of_a = self._ancestor_closure(a)

        seen: Set[str] = set()
        level: List[str] = [b]
        while level:
            next_level: List[str] = []
            for commit_id in level:
                if commit_id == a or commit_id in closure_of_a:
                    log.debug(
                        "Split point of {} and {} is {}",
                        a[:8],
                        b[:8],
                        commit_id[:8],
                        split_point=commit_id,
                    )
                    return commit_id
                for parent in self.get(commit_id).parents:
                    if parent not in seen:
                        seen.add(parent)
                        next_level.append(parent)
            level = next_level

        return None

    def first_parent_history(self, commit_id: str) -> List[Commit]:
        """Commits from commit_id back to the root following first parents."""
        history: List[Commit] = []
        current: Optional[str] = commit_id
        while current is not None:
            commit = self.get(current)
            history.append(commit)
            current = commit.parent
        return history

    def all_commits(self) -> List[Commit]:
        """Every commit ever made, in id order."""
        return [self.get(commit_id) for commit_id in self.objects.ids(ObjectKind.COMMIT)]

    def find_by_message(self, substring: str) -> List[str]:
        """
        Ids of all commits whose message contains substring.

        Raises:
            NoMatchingCommitError: If no commit matches
        """
        matches = [
            commit.commit_id for commit in self.all_commits() if substring in commit.message
        ]
        if not matches:
            raise NoMatchingCommitError()
        return matches
