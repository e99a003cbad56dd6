"""
gitty: structured access to common git operations.

Runs the git executable as a subprocess and parses its text output into
typed results.

Features:
- Repository operations: init, status, log
- Change management: add, remove, unstage, commit
- Branch management: list, create, checkout, merge
- Remote management: add, set-url, remove, list
- Async variants of every operation
- Typed exceptions for launch failures, timeouts and git errors

License:
    GPL-3.0-or-later
"""

from .async_repository import AsyncRemoteManager, AsyncRepository
from .command import GitRunner
from .config import GitConfig
from .exceptions import (
    GitBranchError,
    GitCommandError,
    GitConfigError,
    GitException,
    GitLaunchError,
    GitMergeConflict,
    GitNothingToCommit,
    GitReferenceError,
    GitRemoteError,
    GitRepositoryNotFound,
    GitTimeoutError,
)
from .models import (
    BranchList,
    CommandResult,
    CommitResult,
    FileChange,
    GitCommand,
    LogEntry,
    Operation,
    Status,
)
from .parsers import PARSERS, parse_output
from .repository import RemoteManager, Repository

__version__ = "1.0.0"
__license__ = "GPL-3.0-or-later"

__all__ = [
    "Repository",
    "RemoteManager",
    "AsyncRepository",
    "AsyncRemoteManager",
    "GitRunner",
    "GitConfig",
    "GitCommand",
    "CommandResult",
    "Operation",
    "LogEntry",
    "FileChange",
    "Status",
    "CommitResult",
    "BranchList",
    "PARSERS",
    "parse_output",
    "GitException",
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
