#!/usr/bin/env python3
"""
Asynchronous repository handle with async/await operations.

Mirrors Repository method for method. Read-only invocations that do not
depend on each other run concurrently.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger

from . import operations
from .command import GitRunner
from .config import GitConfig
from .models import BranchList, CommandResult, CommitResult, GitCommand, LogEntry, Status
from .parsers import parse_branches, parse_commit, parse_log, parse_remotes, parse_status
from .repository import PathArg, is_empty_history
from .utils import (
    async_performance_monitor,
    ensure_path,
    first_error,
    is_git_repository,
    require_branch_name,
    require_paths,
)


class AsyncRepository:
    """
    Coroutine-based counterpart of Repository.

    Example:
        >>> async with AsyncRepository("./project") as repo:
        ...     status = await repo.status()
    """

    def __init__(
        self,
        path: PathArg,
        config: Optional[GitConfig] = None,
        runner: Optional[GitRunner] = None,
    ):
        self._path = ensure_path(path)
        self._name = self._path.name or str(self._path)
        self._runner = runner or GitRunner(config)
        self.remote = AsyncRemoteManager(self)

    async def __aenter__(self) -> AsyncRepository:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        # Every call waits for its own process; nothing is left to clean up.
        return None

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
        return is_git_repository(self._path)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self._path)!r})"

    async def _run(self, command: GitCommand) -> CommandResult:
        result = await self._runner.run_async(command)
        result.raise_for_error()
        return result

    @async_performance_monitor("init")
    async def init(self, flags: Sequence[str] = ()) -> None:
        logger.info(f"Initializing repository in {self._path}")
        self._path.mkdir(parents=True, exist_ok=True)
        await self._run(operations.init(self._path, flags))
        logger.success(f"Initialized repository {self._name!r}")

    @async_performance_monitor("log")
    async def log(self, max_count: Optional[int] = None) -> List[LogEntry]:
        logger.info(
            "Reading commit log" + (f" (limit {max_count})" if max_count else "")
        )
        result = await self._runner.run_async(operations.log(self._path, max_count))
        if is_empty_history(result.error):
            return []
        result.raise_for_error()
        return parse_log(result.stdout)

    @async_performance_monitor("status")
    async def status(self) -> Status:
        """
        Return the working tree status.

        ``git status`` and the untracked-file listing run concurrently; if
        both fail, the ``git status`` error is raised.
        """
        logger.info(f"Getting status of {self._name!r}")
        status_result, untracked_result = await asyncio.gather(
            self._runner.run_async(operations.status(self._path)),
            self._runner.run_async(operations.untracked(self._path)),
        )

        if not (status_result and untracked_result):
            raise first_error(status_result.error, untracked_result.error)
        return parse_status(status_result.stdout, untracked_result.stdout)

    @async_performance_monitor("add")
    async def add(self, paths: Iterable[PathArg]) -> None:
        path_list = require_paths(paths)
        logger.info(f"Adding {len(path_list)} paths to staging area")
        await self._run(operations.add(self._path, path_list))

    @async_performance_monitor("remove")
    async def remove(self, paths: Iterable[PathArg]) -> None:
        path_list = require_paths(paths)
        logger.info(f"Removing {len(path_list)} paths from the index")
        await self._run(operations.remove(self._path, path_list))

    @async_performance_monitor("unstage")
    async def unstage(self, paths: Iterable[PathArg]) -> None:
        path_list = require_paths(paths)
        logger.info(f"Unstaging {len(path_list)} paths")
        await self._run(operations.unstage(self._path, path_list))

    @async_performance_monitor("commit")
    async def commit(self, message: str) -> Optional[CommitResult]:
        logger.info(
            f"Committing changes: {message[:50]}{'...' if len(message) > 50 else ''}"
        )
        result = await self._run(operations.commit(self._path, message))
        commit = parse_commit(result.stdout)
        if commit is not None:
            logger.success(f"Created commit {commit.commit} on {commit.branch}")
        return commit

    @async_performance_monitor("branches")
    async def branches(self) -> BranchList:
        result = await self._run(operations.branches(self._path))
        return parse_branches(result.stdout)

    @async_performance_monitor("branch")
    async def branch(self, name: str) -> None:
        require_branch_name(name)
        logger.info(f"Creating branch '{name}'")
        await self._run(operations.create_branch(self._path, name))

    @async_performance_monitor("checkout")
    async def checkout(self, name: str) -> BranchList:
        """Switch to a branch, then read the branch list."""
        require_branch_name(name)
        logger.info(f"Switching to branch '{name}'")
        await self._run(operations.checkout(self._path, name))
        return await self.branches()

    @async_performance_monitor("merge")
    async def merge(self, name: str) -> None:
        require_branch_name(name)
        logger.info(f"Merging branch '{name}' into current branch")
        await self._run(operations.merge(self._path, name))
        logger.success(f"Merged '{name}'")


class AsyncRemoteManager:
    """Remote operations of an AsyncRepository, available as ``repo.remote``."""

    def __init__(self, repository: AsyncRepository):
        self._repository = repository

    @property
    def repository(self) -> AsyncRepository:
        return self._repository

    async def add(self, name: str, url: str) -> None:
        logger.info(f"Adding remote '{name}' with URL '{url}'")
        await self._repository._run(
            operations.remote_add(self._repository.path, name, url)
        )

    async def set_url(self, name: str, url: str) -> None:
        logger.info(f"Setting URL of remote '{name}' to '{url}'")
        await self._repository._run(
            operations.remote_set_url(self._repository.path, name, url)
        )

    async def remove(self, name: str) -> None:
        logger.info(f"Removing remote '{name}'")
        await self._repository._run(
            operations.remote_remove(self._repository.path, name)
        )

    async def list(self) -> Dict[str, str]:
        result = await self._repository._run(
            operations.remote_list(self._repository.path)
        )
        return parse_remotes(result.stdout)


__all__ = ["AsyncRepository", "AsyncRemoteManager"]
