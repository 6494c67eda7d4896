"""Shared fixtures for twig tests."""

from pathlib import Path

import pytest

from twig.config import RepositoryConfig
from twig.version_control import Repository


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Empty work tree directory."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def repo(work_dir: Path) -> Repository:
    """Freshly initialized repository on branch master."""
    return Repository.init(work_dir, RepositoryConfig())
