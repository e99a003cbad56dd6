"""
Output parsers for gitty.

Each parser is a pure function from the raw text of one git subcommand to a
structured result. None of them run git. Input that cannot be classified
is skipped with a warning; parsers never raise on malformed output.
"""

import re
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from loguru import logger

from .models import BranchList, CommitResult, FileChange, LogEntry, Operation, Status

# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

LOG_RECORD_SEPARATOR = ","
LOG_FORMAT = (
    '{"commit": "%H","author": "%an <%ae>","date": "%ad","message": "%s"}'
    + LOG_RECORD_SEPARATOR
)

# Fields are delimited by the literal keys of LOG_FORMAT rather than decoded
# as JSON, so quotes or backslashes inside free text come back unchanged.
# A record ends where the next record begins or at the end of the output;
# record starts are anchored on a full SHA-1/SHA-256 hash so free text that
# imitates a record opener stays inside the message.
_COMMIT_HASH = r"[0-9a-f]{40}(?:[0-9a-f]{24})?"
_LOG_RECORD_RE = re.compile(
    r'\{"commit": "(?P<commit>' + _COMMIT_HASH + r')",'
    r'"author": "(?P<author>.*?)",'
    r'"date": "(?P<date>.*?)",'
    r'"message": "(?P<message>.*?)"\}'
    r'(?=,?\s*(?:\{"commit": "' + _COMMIT_HASH + r'",|\Z))',
    re.DOTALL,
)


def parse_log(text: str) -> List[LogEntry]:
    """
    Parse ``git log --pretty=format:LOG_FORMAT`` output.

    Args:
        text: Raw stdout, one record per commit, each followed by a comma.

    Returns:
        List[LogEntry]: Commits in output order (most recent first).
    """
    body = text.strip()
    if body.endswith(LOG_RECORD_SEPARATOR):
        body = body[: -len(LOG_RECORD_SEPARATOR)]
    if not body:
        return []

    entries: List[LogEntry] = []
    position = 0
    for match in _LOG_RECORD_RE.finditer(body):
        skipped = body[position : match.start()].strip().strip(LOG_RECORD_SEPARATOR).strip()
        if skipped:
            logger.warning(f"Skipping unrecognized log output: {skipped[:80]!r}")
        entries.append(
            LogEntry(
                commit=match.group("commit"),
                author=match.group("author"),
                date=match.group("date"),
                message=match.group("message"),
            )
        )
        position = match.end()

    trailing = body[position:].strip().strip(LOG_RECORD_SEPARATOR).strip()
    if trailing:
        logger.warning(f"Skipping unrecognized log output: {trailing[:80]!r}")

    return entries


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------

_STAGED = "staged"
_UNSTAGED = "unstaged"
_CONFLICTED = "conflicted"
_IGNORED_SECTION = "ignored"

_SECTION_HEADINGS = {
    "Changes to be committed:": _STAGED,
    "Changes not staged for commit:": _UNSTAGED,
    "Unmerged paths:": _CONFLICTED,
    # listed separately via ls-files
    "Untracked files:": _IGNORED_SECTION,
    "Ignored files:": _IGNORED_SECTION,
}

_CHANGE_STATES = (
    "new file",
    "modified",
    "deleted",
    "renamed",
    "copied",
    "typechange",
    "unknown",
    "unmerged",
    "both modified",
    "both added",
    "both deleted",
    "added by us",
    "added by them",
    "deleted by us",
    "deleted by them",
)
_ENTRY_RE = re.compile(
    r"^(?P<state>" + "|".join(re.escape(state) for state in _CHANGE_STATES) + r"):\s+(?P<path>.+)$"
)
_SUBMODULE_SUFFIX_RE = re.compile(
    r"\s+\((?:new commits|modified content|untracked content)(?:, [^)]*)?\)$"
)
_BRANCH_HEADER_RE = re.compile(r"^On branch (?P<branch>\S+)")

_C_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    '"': 0x22,
    "\\": 0x5C,
}


def unquote_path(path: str) -> str:
    """
    Undo git's C-style quoting of unusual path names.

    ``"caf\\303\\251.txt"`` becomes ``café.txt``. Unquoted paths are
    returned unchanged.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    inner = path[1:-1]
    raw = bytearray()
    index = 0
    while index < len(inner):
        char = inner[index]
        if char != "\\" or index + 1 >= len(inner):
            raw.extend(char.encode("utf-8"))
            index += 1
            continue
        escaped = inner[index + 1]
        octal = inner[index + 1 : index + 4]
        if len(octal) == 3 and all(digit in "01234567" for digit in octal):
            raw.append(int(octal, 8) & 0xFF)
            index += 4
        elif escaped in _C_ESCAPES:
            raw.append(_C_ESCAPES[escaped])
            index += 2
        else:
            raw.extend(escaped.encode("utf-8"))
            index += 2
    return raw.decode("utf-8", errors="replace")


def _parse_status_entry(line: str) -> Optional[FileChange]:
    match = _ENTRY_RE.match(line)
    if not match:
        return None

    state = match.group("state")
    path = _SUBMODULE_SUFFIX_RE.sub("", match.group("path").rstrip())
    if state in ("renamed", "copied") and " -> " in path:
        original, _, new = path.partition(" -> ")
        return FileChange(unquote_path(new), state, unquote_path(original))
    return FileChange(unquote_path(path), state)


def parse_status(status_text: str, untracked_text: str = "") -> Status:
    """
    Combine ``git status`` text with an untracked-file listing.

    Args:
        status_text: Default human-readable output of ``git status``.
        untracked_text: Output of ``git ls-files --others --exclude-standard``.

    Returns:
        Status: Paths grouped by the section they were listed under.
    """
    branch: Optional[str] = None
    sections: Dict[str, List[FileChange]] = {
        _STAGED: [],
        _UNSTAGED: [],
        _CONFLICTED: [],
    }
    section: Optional[str] = None

    for line in status_text.splitlines():
        if not line.strip():
            continue

        if not line[0].isspace():
            stripped = line.strip()
            if stripped in _SECTION_HEADINGS:
                section = _SECTION_HEADINGS[stripped]
                continue
            header = _BRANCH_HEADER_RE.match(stripped)
            if header:
                branch = header.group("branch")
            # any other unindented line ends the current section
            section = None
            continue

        if not line.startswith("\t") or section is None or section == _IGNORED_SECTION:
            # hints such as '  (use "git add <file>..." ...)'
            continue

        change = _parse_status_entry(line[1:])
        if change is None:
            logger.warning(f"Unrecognized status entry: {line.strip()!r}")
            continue
        sections[section].append(change)

    untracked = tuple(
        FileChange(unquote_path(line.strip()), "untracked")
        for line in untracked_text.splitlines()
        if line.strip()
    )

    return Status(
        branch=branch,
        staged=tuple(sections[_STAGED]),
        unstaged=tuple(sections[_UNSTAGED]),
        untracked=untracked,
        conflicted=tuple(sections[_CONFLICTED]),
    )


# ---------------------------------------------------------------------------
# commit
# ---------------------------------------------------------------------------

_COMMIT_HEADER_RE = re.compile(
    r"^\[(?P<branch>.+?) (?:\((?P<root>root-commit)\) )?(?P<commit>[0-9a-f]{4,64})\] ?(?P<summary>.*)$"
)
_COMMIT_STATS_RE = re.compile(
    r"^\s*(?P<files>\d+) files? changed"
    r"(?:, (?P<insertions>\d+) insertions?\(\+\))?"
    r"(?:, (?P<deletions>\d+) deletions?\(-\))?"
)


def parse_commit(text: str) -> Optional[CommitResult]:
    """
    Parse the acknowledgement printed by ``git commit``.

    Returns:
        Optional[CommitResult]: None when the text is empty or does not
        start with a ``[branch hash] summary`` header.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return None

    header = _COMMIT_HEADER_RE.match(lines[0].strip())
    if not header:
        logger.warning(f"Unrecognized commit output: {lines[0].strip()!r}")
        return None

    files_changed = insertions = deletions = 0
    for line in lines[1:]:
        stats = _COMMIT_STATS_RE.match(line)
        if stats:
            files_changed = int(stats.group("files"))
            insertions = int(stats.group("insertions") or 0)
            deletions = int(stats.group("deletions") or 0)
            break

    return CommitResult(
        branch=header.group("branch"),
        commit=header.group("commit"),
        summary=header.group("summary"),
        root_commit=header.group("root") is not None,
        files_changed=files_changed,
        insertions=insertions,
        deletions=deletions,
    )


# ---------------------------------------------------------------------------
# branch
# ---------------------------------------------------------------------------

_DETACHED_RE = re.compile(r"^\((?P<description>(?:HEAD detached|no branch)[^)]*)\)$")


def parse_branches(text: str) -> BranchList:
    """
    Parse ``git branch`` output.

    The line starting with ``*`` is the current branch. A detached HEAD is
    reported through ``detached`` and leaves ``current`` empty. Branches
    checked out in another worktree (``+``) are listed with the others.
    """
    current: Optional[str] = None
    detached: Optional[str] = None
    others: List[str] = []

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue

        marker, name = "", stripped
        if stripped[0] in "*+" and (len(stripped) == 1 or stripped[1] == " "):
            marker, name = stripped[0], stripped[1:].strip()
        if not name:
            continue

        if marker == "*":
            detached_match = _DETACHED_RE.match(name)
            if detached_match:
                detached = detached_match.group("description")
            elif current is None:
                current = name
            else:
                logger.warning(f"Multiple current branches listed, keeping {current!r}")
                others.append(name)
        else:
            others.append(name)

    return BranchList(current=current, others=tuple(others), detached=detached)


# ---------------------------------------------------------------------------
# remotes
# ---------------------------------------------------------------------------

_REMOTE_SUFFIX_RE = re.compile(r"\s+\((?:fetch|push)\)$")


def parse_remotes(text: str) -> Dict[str, str]:
    """
    Parse ``git remote -v`` output into ``{name: url}``.

    git lists each remote twice (fetch, then push); the first URL seen for
    a name is kept.
    """
    remotes: Dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = line.strip().split(None, 1)
        if len(parts) != 2:
            logger.warning(f"Unrecognized remote entry: {line.strip()!r}")
            continue
        name, url = parts[0], _REMOTE_SUFFIX_RE.sub("", parts[1].strip())
        remotes.setdefault(name, url)
    return remotes


# ---------------------------------------------------------------------------
# registry
# ---------------------------------------------------------------------------

PARSERS: Mapping[Operation, Callable[..., Any]] = MappingProxyType(
    {
        Operation.LOG: parse_log,
        Operation.STATUS: parse_status,
        Operation.COMMIT: parse_commit,
        Operation.BRANCH: parse_branches,
        Operation.REMOTES: parse_remotes,
    }
)


def parse_output(operation: Operation, *texts: str) -> Any:
    """Parse raw output with the parser registered for ``operation``."""
    return PARSERS[Operation(operation)](*texts)


__all__ = [
    "LOG_FORMAT",
    "PARSERS",
    "parse_output",
    "parse_log",
    "parse_status",
    "parse_commit",
    "parse_branches",
    "parse_remotes",
    "unquote_path",
]
