"""
Repository handle for gitty.

This module provides the Repository class, which exposes repository level
operations as plain method calls returning parsed results.
"""

import os
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from loguru import logger

from . import operations
from .command import GitRunner
from .config import GitConfig
from .exceptions import GitCommandError
from .models import BranchList, CommandResult, CommitResult, GitCommand, LogEntry, Status
from .parsers import parse_branches, parse_commit, parse_log, parse_remotes, parse_status
from .utils import (
    ensure_path,
    first_error,
    is_git_repository,
    performance_monitor,
    require_branch_name,
    require_paths,
)

PathArg = Union[str, os.PathLike]

# older git reports an unborn HEAD as a bad default revision
_NO_COMMITS_RE = re.compile(
    r"does not have any commits yet|bad default revision 'HEAD'", re.IGNORECASE
)


def is_empty_history(error: Optional[BaseException]) -> bool:
    """Whether ``git log`` failed only because the branch has no commits."""
    return isinstance(error, GitCommandError) and bool(
        _NO_COMMITS_RE.search(error.stderr or "")
    )


class Repository:
    """
    A git working directory.

    ``path`` and ``name`` are fixed when the handle is created. Every
    operation runs git in ``path``, raises a GitException subclass on
    failure and leaves the handle usable for further calls.

    Example:
        >>> repo = Repository("./project")
        >>> repo.init()
        >>> repo.add(["README.md"])
        >>> repo.commit("Initial commit")
        >>> [entry.message for entry in repo.log()]
        ['Initial commit']
    """

    def __init__(
        self,
        path: PathArg,
        config: Optional[GitConfig] = None,
        runner: Optional[GitRunner] = None,
    ):
        """
        Initialize the repository handle.

        Args:
            path: Directory of the repository (need not exist yet).
            config: Invocation settings; defaults to ``GitConfig()``.
            runner: Command runner to use; built from ``config`` if omitted.
        """
        self._path = ensure_path(path)
        self._name = self._path.name or str(self._path)
        self._runner = runner or GitRunner(config)
        self.remote = RemoteManager(self)

        logger.debug(f"Initialized Repository {self._name!r} at {self._path}")

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> GitConfig:
        return self._runner.config

    @property
    def is_repository(self) -> bool:
        """Whether ``path`` currently contains a git control directory."""
        return is_git_repository(self._path)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self._path)!r})"

    def _run(self, command: GitCommand) -> CommandResult:
        result = self._runner.run(command)
        result.raise_for_error()
        return result

    @performance_monitor("init")
    def init(self, flags: Sequence[str] = ()) -> None:
        """
        Initialize the directory as a git repository.

        Args:
            flags: Extra ``git init`` switches, e.g. ``["--initial-branch=main"]``.
        """
        logger.info(f"Initializing repository in {self._path}")
        self._path.mkdir(parents=True, exist_ok=True)
        self._run(operations.init(self._path, flags))
        logger.success(f"Initialized repository {self._name!r}")

    @performance_monitor("log")
    def log(self, max_count: Optional[int] = None) -> List[LogEntry]:
        """
        Return the commit history of the current branch, most recent first.

        A branch without commits yields an empty list.
        """
        logger.info(
            "Reading commit log" + (f" (limit {max_count})" if max_count else "")
        )
        result = self._runner.run(operations.log(self._path, max_count))
        if is_empty_history(result.error):
            logger.debug("Current branch has no commits yet")
            return []
        result.raise_for_error()
        return parse_log(result.stdout)

    @performance_monitor("status")
    def status(self) -> Status:
        """
        Return staged, unstaged, conflicted and untracked paths.

        Runs ``git status`` and then the untracked-file listing. Both always
        run; if both fail, the ``git status`` error is raised.
        """
        logger.info(f"Getting status of {self._name!r}")
        status_result = self._runner.run(operations.status(self._path))
        untracked_result = self._runner.run(operations.untracked(self._path))

        if not (status_result and untracked_result):
            raise first_error(status_result.error, untracked_result.error)
        return parse_status(status_result.stdout, untracked_result.stdout)

    @performance_monitor("add")
    def add(self, paths: Iterable[PathArg]) -> None:
        """Stage the given paths for commit."""
        path_list = require_paths(paths)
        logger.info(f"Adding {len(path_list)} paths to staging area")
        self._run(operations.add(self._path, path_list))

    @performance_monitor("remove")
    def remove(self, paths: Iterable[PathArg]) -> None:
        """Remove the given paths from the index, keeping the files on disk."""
        path_list = require_paths(paths)
        logger.info(f"Removing {len(path_list)} paths from the index")
        self._run(operations.remove(self._path, path_list))

    @performance_monitor("unstage")
    def unstage(self, paths: Iterable[PathArg]) -> None:
        """Drop staged changes for the given paths (``git reset HEAD``)."""
        path_list = require_paths(paths)
        logger.info(f"Unstaging {len(path_list)} paths")
        self._run(operations.unstage(self._path, path_list))

    @performance_monitor("commit")
    def commit(self, message: str) -> Optional[CommitResult]:
        """
        Commit the staged changes.

        Returns:
            Optional[CommitResult]: The new commit, or None if git printed
            nothing recognizable.

        Raises:
            GitNothingToCommit: If nothing is staged.
        """
        logger.info(
            f"Committing changes: {message[:50]}{'...' if len(message) > 50 else ''}"
        )
        result = self._run(operations.commit(self._path, message))
        commit = parse_commit(result.stdout)
        if commit is not None:
            logger.success(f"Created commit {commit.commit} on {commit.branch}")
        return commit

    @performance_monitor("branches")
    def branches(self) -> BranchList:
        """Return the current branch and the other local branches."""
        logger.debug("Listing local branches")
        result = self._run(operations.branches(self._path))
        return parse_branches(result.stdout)

    @performance_monitor("branch")
    def branch(self, name: str) -> None:
        """
        Create a branch at HEAD without switching to it.

        Raises:
            GitBranchError: If ``name`` is not a valid branch name.
        """
        require_branch_name(name)
        logger.info(f"Creating branch '{name}'")
        self._run(operations.create_branch(self._path, name))

    @performance_monitor("checkout")
    def checkout(self, name: str) -> BranchList:
        """
        Switch to a branch and return the refreshed branch list.

        The branch list is only read once the checkout has succeeded.
        """
        require_branch_name(name)
        logger.info(f"Switching to branch '{name}'")
        self._run(operations.checkout(self._path, name))
        return self.branches()

    @performance_monitor("merge")
    def merge(self, name: str) -> None:
        """
        Merge a branch into the current branch.

        Raises:
            GitMergeConflict: If the merge stops on conflicts.
        """
        require_branch_name(name)
        logger.info(f"Merging branch '{name}' into current branch")
        self._run(operations.merge(self._path, name))
        logger.success(f"Merged '{name}'")


class RemoteManager:
    """Remote operations of a Repository, available as ``repo.remote``."""

    def __init__(self, repository: Repository):
        self._repository = repository

    @property
    def repository(self) -> Repository:
        return self._repository

    @performance_monitor("remote add")
    def add(self, name: str, url: str) -> None:
        """Add a remote."""
        logger.info(f"Adding remote '{name}' with URL '{url}'")
        self._repository._run(operations.remote_add(self._repository.path, name, url))

    @performance_monitor("remote set-url")
    def set_url(self, name: str, url: str) -> None:
        """Change the URL of an existing remote."""
        logger.info(f"Setting URL of remote '{name}' to '{url}'")
        self._repository._run(
            operations.remote_set_url(self._repository.path, name, url)
        )

    @performance_monitor("remote remove")
    def remove(self, name: str) -> None:
        """Remove a remote."""
        logger.info(f"Removing remote '{name}'")
        self._repository._run(operations.remote_remove(self._repository.path, name))

    @performance_monitor("remote list")
    def list(self) -> Dict[str, str]:
        """Return ``{name: url}`` for every configured remote."""
        logger.debug("Listing remotes")
        result = self._repository._run(operations.remote_list(self._repository.path))
        return parse_remotes(result.stdout)


__all__ = ["Repository", "RemoteManager", "is_empty_history"]
