"""
Repository facade: one method per user command.

Every command loads the branch table and the index, runs all of its checks,
mutates the loaded state in memory and finally persists each file with a
single atomic replace. A command that raises leaves the repository as it was.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

from twig.config import RepositoryConfig, config
from twig.logging import get_twig_logger, track_operation
from .branches import BranchTable
from .errors import (
    AlreadyInitializedError,
    EmptyCommitMessageError,
    FileNotFoundInWorkTreeError,
    NoChangesToCommitError,
    NotInitializedError,
    PathNotInCommitError,
    SameBranchError,
)
from .graph import CommitGraph
from .merge import MergeEngine, MergeResult
from .objects import Commit, now_timestamp
from .staging import StagingArea
from .status import StatusReport, compute_status
from .storage import RepositoryStorage
from .worktree import WorkingTree

log = get_twig_logger("repository")

PathLike = Union[str, Path]


class Repository:
    """
    A working directory under version control.

    Provides operations for:
    - Staging and committing files
    - Restoring files and whole commits
    - Branching and merging
    - Inspecting history and status

    Example:
        >>> repo = Repository.init(Path("project"))
        >>> repo.add("a.txt")
        >>> commit_id = repo.commit("Add a.txt")
    """

    def __init__(self, root: PathLike, repo_config: Optional[RepositoryConfig] = None):
        """
        Bind to a work tree without checking that a repository exists.

        Args:
            root: Work tree root directory
            repo_config: Repository settings (default: global config)
        """
        self.root = Path(root).resolve()
        self.config = repo_config or config.repository
        self.storage = RepositoryStorage(self.root / self.config.dir_name)
        self.objects = self.storage.objects
        self.graph = CommitGraph(self.objects)
        self.worktree = WorkingTree(self.root, self.objects, self.config.dir_name)
        self.merge_engine = MergeEngine(self.graph, self.objects, self.worktree)

    @classmethod
    def init(
        cls, root: PathLike, repo_config: Optional[RepositoryConfig] = None
    ) -> "Repository":
        """
        Create a repository with a root commit and the default branch.

        Raises:
            AlreadyInitializedError: If root already holds a repository
        """
        repo = cls(root, repo_config)
        if repo.storage.exists():
            raise AlreadyInitializedError()

        repo.storage.create_layout()
        initial = Commit(message=repo.config.initial_message, timestamp=now_timestamp())
        commit_id = repo.graph.store(initial)

        repo._persist(BranchTable.create_initial(repo.config.default_branch, commit_id), StagingArea())
        log.info(f"Initialized repository in {repo.storage.repo_dir}")
        return repo

    @classmethod
    def open(
        cls, root: PathLike, repo_config: Optional[RepositoryConfig] = None
    ) -> "Repository":
        """
        Open an existing repository.

        Raises:
            NotInitializedError: If root holds no repository
        """
        repo = cls(root, repo_config)
        if not repo.storage.exists():
            raise NotInitializedError()
        return repo

    def _load(self) -> Tuple[BranchTable, StagingArea]:
        if not self.storage.exists():
            raise NotInitializedError()
        branches = BranchTable.from_state(self.storage.load_branch_table())
        index = StagingArea.from_state(self.storage.load_index())
        return branches, index

    def _persist(
        self, branches: Optional[BranchTable] = None, index: Optional[StagingArea] = None
    ) -> None:
        if branches is not None:
            self.storage.save_branch_table(branches.to_state())
        if index is not None:
            self.storage.save_index(index.to_state())

    def _relative(self, path: PathLike) -> str:
        """
        Normalise a user path to a POSIX path relative to the work tree.

        Raises:
            FileNotFoundInWorkTreeError: If the path leaves the work tree or
                points into the metadata directory
        """
        try:
            relative = (self.root / path).resolve().relative_to(self.root)
        except ValueError:
            raise FileNotFoundInWorkTreeError() from None
        if not relative.parts or relative.parts[0] == self.config.dir_name:
            raise FileNotFoundInWorkTreeError()
        return relative.as_posix()

    def head(self) -> Commit:
        """The current commit."""
        branches, _ = self._load()
        return self.graph.get(branches.current_commit)

    @property
    def current_branch(self) -> str:
        branches, _ = self._load()
        return branches.current_branch

    @track_operation("add")
    def add(self, path: PathLike) -> None:
        """
        Stage a working file.

        Raises:
            FileNotFoundInWorkTreeError: If the file does not exist
        """
        branches, index = self._load()
        head = self.graph.get(branches.current_commit)
        index.stage(self._relative(path), self.worktree, head, self.objects)
        self._persist(index=index)

    @track_operation("commit")
    def commit(self, message: str, timestamp: Optional[str] = None) -> str:
        """
        Commit the staged changes on the current branch.

        Args:
            message: Commit message
            timestamp: Commit time (default: now)

        Returns:
            New commit id

        Raises:
            EmptyCommitMessageError: If message is blank
            NoChangesToCommitError: If nothing is staged
        """
        if not message.strip():
            raise EmptyCommitMessageError()
        branches, index = self._load()
        if index.is_empty():
            raise NoChangesToCommitError()

        commit = self.graph.create(
            message, branches.current_commit, edits=index.fold(), timestamp=timestamp
        )
        branches.advance_current(commit.commit_id)
        self._persist(branches, index)
        return commit.commit_id

    @track_operation("rm")
    def rm(self, path: PathLike) -> None:
        """
        Unstage a file, or stage a tracked file for removal.

        Raises:
            NothingToRemoveError: If the file is neither staged nor tracked
        """
        branches, index = self._load()
        head = self.graph.get(branches.current_commit)
        index.unstage_as_removed(self._relative(path), self.worktree, head)
        self._persist(index=index)

    @track_operation("checkout_file")
    def checkout_file(self, path: PathLike, commit_id: Optional[str] = None) -> None:
        """
        Restore a file from a commit (default: the current commit).

        The index is not changed.

        Raises:
            CommitNotFoundError: If commit_id names no commit
            PathNotInCommitError: If the commit does not track the file
        """
        branches, _ = self._load()
        commit = self.graph.resolve(commit_id or branches.current_commit)
        relative = self._relative(path)
        if relative not in commit.tree:
            raise PathNotInCommitError()
        self.worktree.restore(relative, commit.tree[relative])

    @track_operation("checkout_branch")
    def checkout_branch(self, name: str) -> None:
        """
        Switch the work tree and the current branch to another branch.

        Raises:
            NoSuchBranchError: If the branch does not exist
            SameBranchError: If it is already the current branch
            UntrackedFileConflictError: If an untracked file would be overwritten
        """
        branches, index = self._load()
        target = self.graph.get(branches.get(name))
        if name == branches.current_branch:
            raise SameBranchError("No need to checkout the current branch.")

        self.worktree.switch(target, self.graph.get(branches.current_commit))
        index.clear()
        branches.switch(name)
        self._persist(branches, index)

    def log(self) -> List[Commit]:
        """History of the current branch, newest first, following first parents."""
        branches, _ = self._load()
        return self.graph.first_parent_history(branches.current_commit)

    def global_log(self) -> List[Commit]:
        """Every commit ever made, in no particular order."""
        self._load()
        return self.graph.all_commits()

    def find(self, message: str) -> List[str]:
        """
        Ids of commits whose message contains message.

        Raises:
            NoMatchingCommitError: If none match
        """
        self._load()
        return self.graph.find_by_message(message)

    @track_operation("branch")
    def branch(self, name: str) -> None:
        """
        Create a branch at the current commit.

        Raises:
            BranchAlreadyExistsError: If the name is taken
        """
        branches, _ = self._load()
        branches.create(name)
        self._persist(branches)

    @track_operation("rm_branch")
    def rm_branch(self, name: str) -> None:
        """
        Delete a branch pointer.

        Raises:
            CannotRemoveCurrentBranchError: If name is the current branch
            NoSuchBranchError: If the branch does not exist
        """
        branches, _ = self._load()
        branches.remove(name)
        self._persist(branches)

    def status(self) -> StatusReport:
        branches, index = self._load()
        head = self.graph.get(branches.current_commit)
        return compute_status(branches, index, head, self.worktree)

    @track_operation("reset")
    def reset(self, commit_id: str) -> str:
        """
        Check out every file of a commit and move the current branch to it.

        Args:
            commit_id: Full or abbreviated commit id

        Returns:
            Full id of the commit reset to

        Raises:
            CommitNotFoundError: If no commit matches
            UntrackedFileConflictError: If an untracked file would be overwritten
        """
        branches, index = self._load()
        target = self.graph.resolve(commit_id)
        self.worktree.switch(target, self.graph.get(branches.current_commit))
        branches.advance_current(target.commit_id)
        index.clear()
        self._persist(branches, index)
        return target.commit_id

    @track_operation("merge")
    def merge(self, branch_name: str) -> MergeResult:
        """
        Merge a branch into the current branch.

        Returns:
            MergeResult; check has_conflicts for the conflict flag

        Raises:
            UncommittedChangesError, SameBranchError, NoSuchBranchError,
            UntrackedFileConflictError, AlreadyAncestorError,
            InconsistentHistoryError
        """
        branches, index = self._load()
        result = self.merge_engine.merge(branches, index, branch_name)
        self._persist(branches, index)
        return result
