"""Data models for gitty: commands, subprocess results and parsed output."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .exceptions import GitException


class Operation(StrEnum):
    """Operations whose output is parsed into a structured result."""

    LOG = "log"
    STATUS = "status"
    COMMIT = "commit"
    BRANCH = "branch"
    REMOTES = "remotes"


@dataclass(frozen=True, slots=True)
class GitCommand:
    """
    One invocation of the git executable.

    ``subcommand`` holds the verb tokens (``("remote", "add")``), ``flags``
    the fixed switches and ``args`` the caller-supplied operands. They are
    kept apart only for logging; the process receives them as one argv
    array and no shell is involved.
    """

    working_directory: Path
    subcommand: Tuple[str, ...]
    flags: Tuple[str, ...] = ()
    args: Tuple[str, ...] = ()

    def argv(self, executable: str = "git", global_options: Sequence[str] = ()) -> list[str]:
        """Build the full argument array for this invocation."""
        return [executable, *global_options, *self.subcommand, *self.flags, *self.args]

    def __str__(self) -> str:
        return " ".join(["git", *self.subcommand, *self.flags, *self.args])


@dataclass(slots=True)
class CommandResult:
    """Outcome of a single git process: ``(error, stdout, stderr)``."""

    command: list[str]
    return_code: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0
    error: Optional[GitException] = None

    def __bool__(self) -> bool:
        """Return whether the invocation succeeded."""
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the stored error, if any."""
        if self.error is not None:
            raise self.error


_AUTHOR_RE = re.compile(r"^(?P<name>.*?)\s*<(?P<email>[^<>]*)>\s*$")
# git's default %ad format, e.g. "Mon Oct 19 10:00:00 2026 +0200"
_GIT_DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


@dataclass(frozen=True, slots=True)
class LogEntry:
    """A single commit as reported by ``git log``."""

    commit: str
    author: str
    date: str
    message: str

    @property
    def author_name(self) -> str:
        match = _AUTHOR_RE.match(self.author)
        return match.group("name") if match else self.author

    @property
    def author_email(self) -> Optional[str]:
        match = _AUTHOR_RE.match(self.author)
        return match.group("email") if match else None

    @property
    def timestamp(self) -> Optional[datetime]:
        """The commit date as an aware datetime, or None if git used another format."""
        try:
            return datetime.strptime(self.date, _GIT_DATE_FORMAT)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class FileChange:
    """A path listed in a status section, with git's label for the change."""

    path: str
    state: str
    original_path: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Status:
    """Working tree state grouped the way ``git status`` groups it."""

    branch: Optional[str] = None
    staged: Tuple[FileChange, ...] = ()
    unstaged: Tuple[FileChange, ...] = ()
    untracked: Tuple[FileChange, ...] = ()
    conflicted: Tuple[FileChange, ...] = ()

    @property
    def staged_paths(self) -> list[str]:
        return [change.path for change in self.staged]

    @property
    def unstaged_paths(self) -> list[str]:
        return [change.path for change in self.unstaged]

    @property
    def untracked_paths(self) -> list[str]:
        return [change.path for change in self.untracked]

    @property
    def conflicted_paths(self) -> list[str]:
        return [change.path for change in self.conflicted]

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked or self.conflicted)


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Acknowledgement printed by ``git commit``."""

    branch: str
    commit: str
    summary: str
    root_commit: bool = False
    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0


@dataclass(frozen=True, slots=True)
class BranchList:
    """Local branches, split into the checked-out one and the rest."""

    current: Optional[str] = None
    others: Tuple[str, ...] = field(default_factory=tuple)
    detached: Optional[str] = None

    @property
    def all(self) -> list[str]:
        """Every branch name, current first."""
        return ([self.current] if self.current else []) + list(self.others)


__all__ = [
    "Operation",
    "GitCommand",
    "CommandResult",
    "LogEntry",
    "FileChange",
    "Status",
    "CommitResult",
    "BranchList",
]
