#!/usr/bin/env python3
"""
Helpers shared by the synchronous and asynchronous repository handles.
"""

from __future__ import annotations

import os
import re
import time
from functools import wraps
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar, Union

from loguru import logger

from .exceptions import GitBranchError

F = TypeVar("F", bound=Callable[..., Any])
AsyncF = TypeVar("AsyncF", bound=Callable[..., Awaitable[Any]])


def ensure_path(path: Union[str, os.PathLike]) -> Path:
    """
    Normalize a repository location without touching the filesystem.

    ``~`` is expanded and redundant separators and ``..`` segments are
    collapsed, but symlinks are left alone.
    """
    return Path(os.path.normpath(os.path.expanduser(os.fspath(path))))


def is_git_repository(repo_path: Path) -> bool:
    """
    Check whether a directory holds a git control directory.

    Args:
        repo_path: Path to check.

    Returns:
        bool: True for a ``.git`` directory, or a ``.git`` file pointing at
        one (worktrees and submodules).
    """
    git_path = repo_path / ".git"
    if git_path.is_dir():
        return True

    if git_path.is_file():
        try:
            return git_path.read_text().strip().startswith("gitdir:")
        except (OSError, UnicodeDecodeError):
            return False

    return False


_INVALID_REF_PATTERNS = [
    re.compile(pattern)
    for pattern in (
        r"\.\.",
        r"@\{",
        r"^[.\-/]",
        r"\.$",
        r"/$",
        r"//",
        r"\.lock$",
        r"/\.",
        r"[\x00-\x1f\x7f~^:?*\[\\]",
        r"\s",
    )
]


def validate_git_reference(ref: str) -> bool:
    """
    Validate a branch name against git's reference naming rules.

    Names that start with ``-`` are rejected as well, so a name can never
    be read as an option.
    """
    if not ref or not isinstance(ref, str) or ref == "@":
        return False
    return not any(pattern.search(ref) for pattern in _INVALID_REF_PATTERNS)


def require_branch_name(name: str) -> str:
    """Return ``name`` or raise GitBranchError if git would reject it."""
    if not validate_git_reference(name):
        logger.error(f"Invalid branch name: {name!r}")
        raise GitBranchError(f"Invalid branch name: {name!r}", branch_name=name)
    return name


def require_paths(paths: Iterable[Union[str, os.PathLike]]) -> list[str]:
    """Materialize a path list, rejecting an empty one."""
    if isinstance(paths, (str, os.PathLike)):
        paths = [paths]
    path_list = [os.fspath(path) for path in paths]
    if not path_list:
        raise ValueError("At least one path is required")
    return path_list


def performance_monitor(operation: str) -> Callable[[F], F]:
    """
    Decorator that logs start, completion and duration of a repository
    operation.

    Args:
        operation: Name of the operation for log messages.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.time()
            logger.debug(f"Starting {operation}")
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.debug(
                    f"Failed {operation} after {time.time() - start_time:.3f}s: "
                    f"{type(e).__name__}"
                )
                raise
            logger.debug(f"Completed {operation} in {time.time() - start_time:.3f}s")
            return result

        return wrapper  # type: ignore

    return decorator


def async_performance_monitor(operation: str) -> Callable[[AsyncF], AsyncF]:
    """Async counterpart of performance_monitor."""

    def decorator(func: AsyncF) -> AsyncF:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.time()
            logger.debug(f"Starting async {operation}")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.debug(
                    f"Failed async {operation} after {time.time() - start_time:.3f}s: "
                    f"{type(e).__name__}"
                )
                raise
            logger.debug(
                f"Completed async {operation} in {time.time() - start_time:.3f}s"
            )
            return result

        return wrapper  # type: ignore

    return decorator


def first_error(*errors: Optional[BaseException]) -> Optional[BaseException]:
    """Return the first non-None error, in argument order."""
    return next((error for error in errors if error is not None), None)


__all__ = [
    "ensure_path",
    "is_git_repository",
    "validate_git_reference",
    "require_branch_name",
    "require_paths",
    "performance_monitor",
    "async_performance_monitor",
    "first_error",
]
