"""Shared fixtures for the gitty test suite."""

import shutil
import sys
from pathlib import Path

import pytest

# Add the python directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "python"))

from gitty import Repository  # noqa: E402

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)


@pytest.fixture(autouse=True)
def isolated_git_env(monkeypatch, tmp_path):
    """Keep the developer's git configuration out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    for variable in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE", "GIT_CONFIG_GLOBAL"):
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture
def repo_dir(tmp_path) -> Path:
    return tmp_path / "project"


@pytest.fixture
def repo(repo_dir) -> Repository:
    """An initialized, empty repository."""
    repository = Repository(repo_dir)
    repository.init()
    return repository


def write_file(repository, name: str, content: str) -> Path:
    path = repository.path / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def committed_repo(repo) -> Repository:
    """A repository with one commit containing ``a.txt``."""
    write_file(repo, "a.txt", "base\n")
    repo.add(["a.txt"])
    repo.commit("Initial commit")
    return repo
