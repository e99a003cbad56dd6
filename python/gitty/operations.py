"""
Invocation templates for every repository operation.

Each function returns the GitCommand an operation issues. Both the
synchronous and the asynchronous repository build their invocations here,
so the two always run identical git commands.
"""

from pathlib import Path
from typing import Optional, Sequence

from .models import GitCommand
from .parsers import LOG_FORMAT


def init(path: Path, flags: Sequence[str] = ()) -> GitCommand:
    return GitCommand(path, ("init",), tuple(flags))


def log(path: Path, max_count: Optional[int] = None) -> GitCommand:
    flags = [f"--pretty=format:{LOG_FORMAT}"]
    if max_count is not None:
        flags.append(f"--max-count={int(max_count)}")
    return GitCommand(path, ("log",), tuple(flags))


def status(path: Path) -> GitCommand:
    return GitCommand(path, ("status",))


def untracked(path: Path) -> GitCommand:
    return GitCommand(path, ("ls-files",), ("--others", "--exclude-standard"))


def add(path: Path, paths: Sequence[str]) -> GitCommand:
    return GitCommand(path, ("add",), (), ("--", *paths))


def remove(path: Path, paths: Sequence[str]) -> GitCommand:
    # --cached keeps the working tree copy
    return GitCommand(path, ("rm",), ("--cached",), ("--", *paths))


def unstage(path: Path, paths: Sequence[str]) -> GitCommand:
    return GitCommand(path, ("reset",), ("-q", "HEAD"), ("--", *paths))


def commit(path: Path, message: str) -> GitCommand:
    return GitCommand(path, ("commit",), ("-m",), (message,))


def branches(path: Path) -> GitCommand:
    return GitCommand(path, ("branch",), ("--no-color",))


def create_branch(path: Path, name: str) -> GitCommand:
    return GitCommand(path, ("branch",), (), (name,))


def checkout(path: Path, name: str) -> GitCommand:
    # "--" pins the name to a branch, never a pathspec
    return GitCommand(path, ("checkout",), (), (name, "--"))


def merge(path: Path, name: str) -> GitCommand:
    return GitCommand(path, ("merge",), ("--no-edit",), (name,))


def remote_add(path: Path, name: str, url: str) -> GitCommand:
    return GitCommand(path, ("remote", "add"), (), (name, url))


def remote_set_url(path: Path, name: str, url: str) -> GitCommand:
    return GitCommand(path, ("remote", "set-url"), (), (name, url))


def remote_remove(path: Path, name: str) -> GitCommand:
    return GitCommand(path, ("remote", "remove"), (), (name,))


def remote_list(path: Path) -> GitCommand:
    return GitCommand(path, ("remote",), ("-v",))
