"""
Integration tests for branch workflows and merges.

Each test drives a real repository in a temporary work tree through several
commands and checks files, history and the branch table.
"""

import pytest

from twig.version_control import (
    AlreadyAncestorError,
    NoSuchBranchError,
    Repository,
    SameBranchError,
    UncommittedChangesError,
    UntrackedFileConflictError,
)


def write(repo: Repository, path: str, text: str) -> None:
    (repo.root / path).write_text(text)


def read(repo: Repository, path: str) -> str:
    return (repo.root / path).read_text()


def commit_file(repo: Repository, path: str, text: str, message: str) -> str:
    write(repo, path, text)
    repo.add(path)
    return repo.commit(message)


def branch_refs(repo: Repository) -> dict:
    return dict(repo.storage.load_branch_table().branches)


def assert_branch_invariant(repo: Repository) -> None:
    state = repo.storage.load_branch_table()
    assert state.current_commit == state.branches[state.current_branch]


def test_checkout_restores_branch_content(repo: Repository) -> None:
    """Test switching back to master reverts a.txt and leaves status clean."""
    commit_file(repo, "a.txt", "A", "first")
    repo.branch("feat")
    repo.checkout_branch("feat")
    commit_file(repo, "a.txt", "B", "second")

    repo.checkout_branch("master")

    status = repo.status()
    assert status.unstaged == []
    assert status.is_clean()
    assert read(repo, "a.txt") == "A"
    assert_branch_invariant(repo)


class TestConflictingMerge:
    """Both branches change the same file."""

    @pytest.fixture
    def diverged(self, repo: Repository) -> Repository:
        commit_file(repo, "a.txt", "base\n", "base")
        repo.branch("other")
        commit_file(repo, "a.txt", "C content\n", "current change")
        repo.checkout_branch("other")
        commit_file(repo, "a.txt", "O content\n", "other change")
        repo.checkout_branch("master")
        return repo

    def test_conflict_markers(self, diverged: Repository) -> None:
        """Test the merged file holds both versions between markers."""
        result = diverged.merge("other")

        assert result.has_conflicts
        assert result.conflicted_paths == ["a.txt"]
        assert (diverged.root / "a.txt").read_bytes() == (
            b"<<<<<<< HEAD\nC content\n=======\nO content\n>>>>>>>\n"
        )

    def test_merge_commit_still_created(self, diverged: Repository) -> None:
        """Test that a conflicted merge still records a two-parent commit."""
        master_tip = branch_refs(diverged)["master"]
        other_tip = branch_refs(diverged)["other"]

        result = diverged.merge("other")

        head = diverged.head()
        assert head.commit_id == result.commit_id
        assert head.parents == [master_tip, other_tip]
        assert head.message == "Merged other into master."
        assert branch_refs(diverged)["other"] == other_tip
        assert diverged.status().is_clean()
        assert_branch_invariant(diverged)

    def test_checkout_of_merge_result(self, diverged: Repository) -> None:
        """Test that the conflict-marked content is what was committed."""
        diverged.merge("other")
        write(diverged, "a.txt", "scratch")
        diverged.checkout_file("a.txt")
        assert read(diverged, "a.txt").startswith("<<<<<<< HEAD\n")


def test_clean_three_way_merge(repo: Repository) -> None:
    """Test take-other, keep-current and removal in one merge."""
    commit_file(repo, "a.txt", "a", "base a")
    commit_file(repo, "c.txt", "c", "base c")
    repo.branch("feat")
    commit_file(repo, "a.txt", "a2", "edit a")

    repo.checkout_branch("feat")
    write(repo, "b.txt", "b")
    repo.add("b.txt")
    repo.rm("c.txt")
    repo.commit("add b drop c")
    repo.checkout_branch("master")
    assert not (repo.root / "b.txt").exists()

    result = repo.merge("feat")

    assert not result.has_conflicts
    assert not result.fast_forward
    assert read(repo, "a.txt") == "a2"
    assert read(repo, "b.txt") == "b"
    assert not (repo.root / "c.txt").exists()
    assert sorted(repo.head().tree) == ["a.txt", "b.txt"]
    assert repo.head().is_merge
    assert repo.status().is_clean()


def test_deleted_versus_modified_conflict(repo: Repository) -> None:
    """Test a file removed here but changed on the other branch."""
    commit_file(repo, "a.txt", "base\n", "base")
    repo.branch("feat")
    repo.rm("a.txt")
    repo.commit("drop a")
    repo.checkout_branch("feat")
    commit_file(repo, "a.txt", "changed\n", "change a")
    repo.checkout_branch("master")

    result = repo.merge("feat")

    assert result.conflicted_paths == ["a.txt"]
    assert read(repo, "a.txt") == "<<<<<<< HEAD\n=======\nchanged\n>>>>>>>\n"


def test_fast_forward(repo: Repository) -> None:
    """Test that merging a descendant checks it out without a new commit."""
    commit_file(repo, "a.txt", "A", "first")
    repo.branch("feat")
    repo.checkout_branch("feat")
    feat_tip = commit_file(repo, "b.txt", "B", "feature")
    repo.checkout_branch("master")
    commits_before = len(repo.global_log())

    result = repo.merge("feat")

    assert result.fast_forward
    assert result.commit_id == feat_tip
    assert len(repo.global_log()) == commits_before
    assert branch_refs(repo)["feat"] == feat_tip
    assert repo.head().commit_id == feat_tip
    assert read(repo, "b.txt") == "B"
    assert_branch_invariant(repo)


def test_already_ancestor(repo: Repository) -> None:
    """Test merging a branch that is behind the current one."""
    commit_file(repo, "a.txt", "A", "first")
    repo.branch("old")
    commit_file(repo, "a.txt", "A2", "second")
    refs_before = branch_refs(repo)

    with pytest.raises(AlreadyAncestorError):
        repo.merge("old")

    assert branch_refs(repo) == refs_before
    assert read(repo, "a.txt") == "A2"


def test_merge_after_previous_merge(repo: Repository) -> None:
    """Test that a second merge uses the previous merge as its base."""
    commit_file(repo, "a.txt", "a", "base")
    repo.branch("feat")
    repo.checkout_branch("feat")
    commit_file(repo, "f.txt", "f1", "feat one")
    repo.checkout_branch("master")
    commit_file(repo, "m.txt", "m1", "master one")
    repo.merge("feat")

    repo.checkout_branch("feat")
    commit_file(repo, "f.txt", "f2", "feat two")
    repo.checkout_branch("master")

    result = repo.merge("feat")

    assert not result.has_conflicts
    assert read(repo, "f.txt") == "f2"
    assert read(repo, "m.txt") == "m1"


class TestMergePreconditions:
    """Failed merges leave the repository untouched."""

    def snapshot(self, repo: Repository) -> tuple:
        return (
            repo.storage.branches_file.read_bytes(),
            repo.storage.index_file.read_bytes(),
        )

    def test_uncommitted_changes(self, repo: Repository) -> None:
        """Test that a dirty index blocks merging."""
        repo.branch("feat")
        write(repo, "a.txt", "A")
        repo.add("a.txt")
        before = self.snapshot(repo)
        with pytest.raises(UncommittedChangesError):
            repo.merge("feat")
        assert self.snapshot(repo) == before

    def test_same_branch(self, repo: Repository) -> None:
        """Test merging the current branch into itself."""
        with pytest.raises(SameBranchError):
            repo.merge("master")

    def test_missing_branch(self, repo: Repository) -> None:
        """Test merging a branch that does not exist."""
        with pytest.raises(NoSuchBranchError):
            repo.merge("ghost")

    def test_untracked_file_in_the_way(self, repo: Repository) -> None:
        """Test that an untracked file the merge would overwrite blocks it."""
        commit_file(repo, "a.txt", "A", "base")
        repo.branch("feat")
        repo.checkout_branch("feat")
        commit_file(repo, "b.txt", "theirs", "feat adds b")
        repo.checkout_branch("master")
        commit_file(repo, "a.txt", "A2", "master edits a")
        write(repo, "b.txt", "mine")
        before = self.snapshot(repo)

        with pytest.raises(UntrackedFileConflictError):
            repo.merge("feat")

        assert self.snapshot(repo) == before
        assert read(repo, "b.txt") == "mine"
        assert read(repo, "a.txt") == "A2"
