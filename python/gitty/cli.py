"""
Command-line interface for gitty.

This module maps argparse subcommands onto Repository operations and
renders their results as text or JSON.
"""

import argparse
import dataclasses
import json
from typing import Any, Optional

from .config import GitConfig
from .models import BranchList, CommitResult, LogEntry, Status
from .repository import Repository


def _repository(args) -> Repository:
    return Repository(args.repo_dir, config=args.config)


def cli_init(args) -> None:
    """Initialize a repository from the command line."""
    flags = ["--bare"] if args.bare else []
    if args.initial_branch:
        flags.append(f"--initial-branch={args.initial_branch}")
    _repository(args).init(flags)


def cli_status(args) -> Status:
    """Show status from the command line."""
    return _repository(args).status()


def cli_log(args) -> list[LogEntry]:
    """Show the commit log from the command line."""
    return _repository(args).log(args.max_count)


def cli_add(args) -> None:
    """Stage paths from the command line."""
    _repository(args).add(args.paths)


def cli_remove(args) -> None:
    """Remove paths from the index from the command line."""
    _repository(args).remove(args.paths)


def cli_unstage(args) -> None:
    """Unstage paths from the command line."""
    _repository(args).unstage(args.paths)


def cli_commit(args) -> Optional[CommitResult]:
    """Commit staged changes from the command line."""
    return _repository(args).commit(args.message)


def cli_branches(args) -> BranchList:
    """List branches from the command line."""
    return _repository(args).branches()


def cli_branch(args) -> None:
    """Create a branch from the command line."""
    _repository(args).branch(args.branch_name)


def cli_checkout(args) -> BranchList:
    """Switch branches from the command line."""
    return _repository(args).checkout(args.branch_name)


def cli_merge(args) -> None:
    """Merge a branch from the command line."""
    _repository(args).merge(args.branch_name)


def cli_remote_add(args) -> None:
    """Add a remote from the command line."""
    _repository(args).remote.add(args.remote_name, args.remote_url)


def cli_remote_set_url(args) -> None:
    """Change a remote URL from the command line."""
    _repository(args).remote.set_url(args.remote_name, args.remote_url)


def cli_remote_remove(args) -> None:
    """Remove a remote from the command line."""
    _repository(args).remote.remove(args.remote_name)


def cli_remotes(args) -> dict[str, str]:
    """List remotes from the command line."""
    return _repository(args).remote.list()


def to_jsonable(result: Any) -> Any:
    """Convert an operation result into JSON-serializable data."""
    if dataclasses.is_dataclass(result) and not isinstance(result, type):
        return dataclasses.asdict(result)
    if isinstance(result, list):
        return [to_jsonable(item) for item in result]
    return result


def format_result(result: Any) -> str:
    """Render an operation result the way git itself would show it, roughly."""
    if result is None:
        return ""

    if isinstance(result, Status):
        lines = [f"On branch {result.branch}" if result.branch else "Not on a branch"]
        for title, changes in (
            ("Staged", result.staged),
            ("Not staged", result.unstaged),
            ("Conflicted", result.conflicted),
            ("Untracked", result.untracked),
        ):
            if changes:
                lines.append(f"{title}:")
                lines.extend(f"  {change.state}: {change.path}" for change in changes)
        if result.is_clean:
            lines.append("Working tree clean")
        return "\n".join(lines)

    if isinstance(result, BranchList):
        lines = []
        if result.detached:
            lines.append(f"* ({result.detached})")
        elif result.current:
            lines.append(f"* {result.current}")
        lines.extend(f"  {name}" for name in result.others)
        return "\n".join(lines)

    if isinstance(result, CommitResult):
        return f"[{result.branch} {result.commit}] {result.summary}"

    if isinstance(result, list):
        return "\n".join(
            f"{entry.commit[:12]} {entry.date} {entry.author_name}: {entry.message}"
            for entry in result
        )

    if isinstance(result, dict):
        return "\n".join(f"{name}\t{url}" for name, url in result.items())

    return str(result)


def render(result: Any, as_json: bool = False) -> str:
    """Render ``result`` as text or JSON."""
    if as_json:
        payload = to_jsonable(result)
        return json.dumps(
            {"success": True} if payload is None else payload, indent=2, default=str
        )
    return format_result(result)


def setup_parser() -> argparse.ArgumentParser:
    """
    Set up the argument parser for the command line interface.

    Returns:
        argparse.ArgumentParser: Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="gitty",
        description="Structured access to common git operations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a repository and make the first commit:
  gitty init -d ./my_repo
  gitty add -d ./my_repo README.md
  gitty commit -d ./my_repo -m "Initial commit"

  # Inspect it as JSON:
  gitty --json status -d ./my_repo
  gitty --json log -d ./my_repo -n 5
        """,
    )
    parser.add_argument(
        "--json", action="store_true", help="Print results as JSON"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--config", dest="config_file", help="Path to a JSON configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Operation to run")

    def add_repo_dir(subparser):
        subparser.add_argument(
            "--repo-dir", "-d",
            default=".",
            help="Directory of the repository (default: current directory)",
        )

    parser_init = subparsers.add_parser("init", help="Initialize a repository")
    add_repo_dir(parser_init)
    parser_init.add_argument(
        "--bare", action="store_true", help="Create a bare repository")
    parser_init.add_argument(
        "--initial-branch", "-b", help="Name of the initial branch")
    parser_init.set_defaults(func=cli_init)

    parser_status = subparsers.add_parser("status", help="Show working tree status")
    add_repo_dir(parser_status)
    parser_status.set_defaults(func=cli_status)

    parser_log = subparsers.add_parser("log", help="Show commit history")
    add_repo_dir(parser_log)
    parser_log.add_argument(
        "-n", "--max-count", type=int, help="Number of commits to show")
    parser_log.set_defaults(func=cli_log)

    parser_add = subparsers.add_parser("add", help="Stage paths for commit")
    add_repo_dir(parser_add)
    parser_add.add_argument("paths", nargs="+", help="Paths to stage")
    parser_add.set_defaults(func=cli_add)

    parser_rm = subparsers.add_parser(
        "rm", help="Remove paths from the index, keeping the files")
    add_repo_dir(parser_rm)
    parser_rm.add_argument("paths", nargs="+", help="Paths to remove")
    parser_rm.set_defaults(func=cli_remove)

    parser_unstage = subparsers.add_parser("unstage", help="Unstage paths")
    add_repo_dir(parser_unstage)
    parser_unstage.add_argument("paths", nargs="+", help="Paths to unstage")
    parser_unstage.set_defaults(func=cli_unstage)

    parser_commit = subparsers.add_parser("commit", help="Commit staged changes")
    add_repo_dir(parser_commit)
    parser_commit.add_argument(
        "-m", "--message", required=True, help="Commit message")
    parser_commit.set_defaults(func=cli_commit)

    parser_branches = subparsers.add_parser("branches", help="List local branches")
    add_repo_dir(parser_branches)
    parser_branches.set_defaults(func=cli_branches)

    parser_branch = subparsers.add_parser("branch", help="Create a branch")
    add_repo_dir(parser_branch)
    parser_branch.add_argument("branch_name", help="Name of the new branch")
    parser_branch.set_defaults(func=cli_branch)

    parser_checkout = subparsers.add_parser("checkout", help="Switch branches")
    add_repo_dir(parser_checkout)
    parser_checkout.add_argument("branch_name", help="Branch to switch to")
    parser_checkout.set_defaults(func=cli_checkout)

    parser_merge = subparsers.add_parser(
        "merge", help="Merge a branch into the current branch")
    add_repo_dir(parser_merge)
    parser_merge.add_argument("branch_name", help="Branch to merge")
    parser_merge.set_defaults(func=cli_merge)

    parser_remote_add = subparsers.add_parser("remote-add", help="Add a remote")
    add_repo_dir(parser_remote_add)
    parser_remote_add.add_argument("remote_name", help="Name of the remote")
    parser_remote_add.add_argument("remote_url", help="URL of the remote")
    parser_remote_add.set_defaults(func=cli_remote_add)

    parser_remote_set_url = subparsers.add_parser(
        "remote-set-url", help="Change the URL of a remote")
    add_repo_dir(parser_remote_set_url)
    parser_remote_set_url.add_argument("remote_name", help="Name of the remote")
    parser_remote_set_url.add_argument("remote_url", help="New URL")
    parser_remote_set_url.set_defaults(func=cli_remote_set_url)

    parser_remote_rm = subparsers.add_parser("remote-rm", help="Remove a remote")
    add_repo_dir(parser_remote_rm)
    parser_remote_rm.add_argument("remote_name", help="Name of the remote")
    parser_remote_rm.set_defaults(func=cli_remote_remove)

    parser_remotes = subparsers.add_parser("remotes", help="List remotes")
    add_repo_dir(parser_remotes)
    parser_remotes.set_defaults(func=cli_remotes)

    return parser


def load_config(args) -> GitConfig:
    """Resolve configuration: a config file wins over the environment."""
    if args.config_file:
        return GitConfig.load(args.config_file)
    return GitConfig.from_env()
