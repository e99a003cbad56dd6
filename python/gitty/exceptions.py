#!/usr/bin/env python3
"""
Exception types for gitty.

Separates "git could not be run" (launch failures, timeouts) from "git ran
and reported an error" (non-zero exit), and refines the latter into the
failure categories callers usually want to handle.
"""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Any, Optional, List, Dict
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class GitErrorContext:
    """
    Where and how a failing git process was started.

    ``additional_data`` collects the keyword details each exception adds
    (return code, stderr, timeout, branch name) so one flat mapping can
    be logged for any failure.
    """

    timestamp: float = field(default_factory=time.time)
    working_directory: Optional[Path] = None
    repository_path: Optional[Path] = None
    command: List[str] = field(default_factory=list)
    additional_data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly mapping with paths rendered as strings."""
        data: Dict[str, Any] = {"timestamp": self.timestamp}
        for name in ("working_directory", "repository_path"):
            path = getattr(self, name)
            data[name] = str(path) if path is not None else None
        data["command"] = list(self.command)
        data["additional_data"] = self.additional_data
        return data


class GitException(Exception):
    """
    Root of every error gitty raises or stores on a CommandResult.

    ``error_code`` is a stable upper-case identifier (``GIT_TIMEOUT``,
    ``GIT_REFERENCE_ERROR``...) for callers that branch on the kind of
    failure. Keyword arguments not consumed by a subclass are kept in
    ``extra_context`` and merged into the context's ``additional_data``.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        context: Optional[GitErrorContext] = None,
        original_error: Optional[Exception] = None,
        **extra_context: Any,
    ):
        super().__init__(message)
        self.error_code = error_code or self.__class__.__name__.upper()
        self.context = context or GitErrorContext()
        self.original_error = original_error
        self.extra_context = extra_context
        self.context.additional_data.update(extra_context)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the failure, including the OS error behind a launch failure."""
        original = self.original_error
        return {
            "error_type": type(self).__name__,
            "message": str(self),
            "error_code": self.error_code,
            "context": self.context.to_dict(),
            "original_error": None if original is None else str(original),
            "extra_context": self.extra_context,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={str(self)!r}, error_code={self.error_code!r})"


class GitLaunchError(GitException):
    """Raised when the git executable could not be started at all."""

    def __init__(self, message: str, command: List[str], **kwargs: Any):
        self.command = command
        super().__init__(
            message, error_code="GIT_LAUNCH_FAILED", command=command, **kwargs
        )


class GitTimeoutError(GitException):
    """Raised when a git process outlives the configured timeout and is killed."""

    def __init__(self, command: List[str], timeout: float, **kwargs: Any):
        self.command = command
        self.timeout = timeout
        super().__init__(
            f"Git command timed out after {timeout}s: {' '.join(command)}",
            error_code="GIT_TIMEOUT",
            command=command,
            timeout=timeout,
            **kwargs,
        )


class GitCommandError(GitException):
    """git ran but exited non-zero; carries the exit code and both output streams."""

    def __init__(
        self,
        command: List[str],
        return_code: int,
        stderr: str,
        stdout: Optional[str] = None,
        *,
        error_code: str = "GIT_COMMAND_FAILED",
        duration: Optional[float] = None,
        **kwargs: Any,
    ):
        self.command = command
        self.return_code = return_code
        self.stderr = stderr
        self.stdout = stdout
        self.duration = duration

        command_str = " ".join(command)
        enhanced_message = (
            f"Git command failed: {command_str} (Return code: {return_code})"
        )
        detail = (stderr or stdout or "").strip()
        if detail:
            enhanced_message += f": {detail}"

        super().__init__(
            enhanced_message,
            error_code=error_code,
            command=command,
            return_code=return_code,
            stderr=stderr,
            stdout=stdout,
            duration=duration,
            **kwargs,
        )


class GitRepositoryNotFound(GitCommandError):
    """Raised when git reports that the working directory is not a repository."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, error_code="GIT_REPOSITORY_NOT_FOUND", **kwargs)


class GitBranchError(GitException):
    """A branch name was rejected before any git process was started."""

    def __init__(
        self,
        message: str,
        branch_name: Optional[str] = None,
        **kwargs: Any,
    ):
        self.branch_name = branch_name

        super().__init__(
            message,
            error_code="GIT_BRANCH_ERROR",
            branch_name=branch_name,
            **kwargs,
        )


class GitReferenceError(GitCommandError):
    """Git rejected a branch or revision name (missing, duplicate or malformed)."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, error_code="GIT_REFERENCE_ERROR", **kwargs)


class GitMergeConflict(GitCommandError):
    """A merge stopped on conflicts; ``conflicted_files`` lists the paths."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, error_code="GIT_MERGE_CONFLICT", **kwargs)
        self.conflicted_files = _conflicted_files(f"{self.stdout or ''}\n{self.stderr}")


class GitNothingToCommit(GitCommandError):
    """Raised when a commit is attempted with nothing staged."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, error_code="GIT_NOTHING_TO_COMMIT", **kwargs)


class GitRemoteError(GitCommandError):
    """git rejected a remote name (unknown or already configured)."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, error_code="GIT_REMOTE_ERROR", **kwargs)


class GitConfigError(GitException):
    """A GitConfig value or file could not be validated."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs: Any,
    ):
        self.config_key = config_key

        super().__init__(
            message,
            error_code="GIT_CONFIG_ERROR",
            config_key=config_key,
            **kwargs,
        )


_CONFLICT_RE = re.compile(
    r"^CONFLICT \([^)]*\): Merge conflict in (?P<path>.+)$", re.MULTILINE
)

# Checked in order; the first matching pattern decides the exception type.
_ERROR_PATTERNS = (
    (re.compile(r"not a git repository", re.IGNORECASE), GitRepositoryNotFound),
    (re.compile(r"^CONFLICT ", re.MULTILINE), GitMergeConflict),
    (
        re.compile(r"nothing to commit|no changes added to commit", re.IGNORECASE),
        GitNothingToCommit,
    ),
    (
        re.compile(
            r"did not match any file\(s\) known to git"
            r"|a branch named .* already exists"
            r"|is not a valid branch name"
            r"|not something we can merge"
            r"|invalid reference",
            re.IGNORECASE,
        ),
        GitReferenceError,
    ),
    (
        re.compile(r"no such remote|remote .* already exists", re.IGNORECASE),
        GitRemoteError,
    ),
)


def _conflicted_files(output: str) -> List[str]:
    return [match.group("path").strip() for match in _CONFLICT_RE.finditer(output)]


def classify_command_error(
    command: List[str],
    return_code: int,
    stdout: str,
    stderr: str,
    **kwargs: Any,
) -> GitCommandError:
    """
    Build the most specific GitCommandError for a failed invocation.

    Git reports some failures (merge conflicts, nothing to commit) on
    stdout, so both streams are inspected. The raw text is kept verbatim
    on the returned exception.
    """
    combined = f"{stdout}\n{stderr}"
    for pattern, error_class in _ERROR_PATTERNS:
        if pattern.search(combined):
            return error_class(command, return_code, stderr, stdout, **kwargs)
    return GitCommandError(command, return_code, stderr, stdout, **kwargs)


def create_git_error_context(
    working_dir: Optional[Path] = None,
    repo_path: Optional[Path] = None,
    command: Optional[List[str]] = None,
    **extra: Any,
) -> GitErrorContext:
    """Create a Git error context for a failed invocation."""
    return GitErrorContext(
        working_directory=working_dir or Path.cwd(),
        repository_path=repo_path,
        command=list(command or []),
        additional_data=extra,
    )


__all__ = [
    "GitException",
    "GitErrorContext",
    "create_git_error_context",
    "classify_command_error",
    "GitLaunchError",
    "GitTimeoutError",
    "GitCommandError",
    "GitRepositoryNotFound",
    "GitBranchError",
    "GitReferenceError",
    "GitMergeConflict",
    "GitNothingToCommit",
    "GitRemoteError",
    "GitConfigError",
]
