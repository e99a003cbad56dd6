"""Tests for the command-line interface."""

import json

import pytest

from conftest import requires_git
from gitty import BranchList, CommitResult, FileChange, LogEntry, Status
from gitty.__main__ import main
from gitty.cli import format_result, render, setup_parser


@pytest.fixture(autouse=True)
def quiet_logging(mocker):
    """Leave the global loguru configuration alone while testing main()."""
    return mocker.patch("gitty.__main__.configure_logging")


class TestParser:
    def test_repo_dir_defaults_to_current_directory(self):
        args = setup_parser().parse_args(["status"])

        assert args.repo_dir == "."
        assert args.json is False

    def test_log_options(self):
        args = setup_parser().parse_args(["--json", "log", "-d", "/tmp/x", "-n", "5"])

        assert args.json is True
        assert args.repo_dir == "/tmp/x"
        assert args.max_count == 5

    def test_commit_requires_message(self):
        with pytest.raises(SystemExit):
            setup_parser().parse_args(["commit"])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: gitty" in capsys.readouterr().out


class TestRendering:
    def test_status_text(self):
        status = Status(
            branch="main",
            staged=(FileChange("a.txt", "new file"),),
            untracked=(FileChange("b.txt", "untracked"),),
        )

        text = format_result(status)

        assert text.splitlines() == [
            "On branch main",
            "Staged:",
            "  new file: a.txt",
            "Untracked:",
            "  untracked: b.txt",
        ]

    def test_branches_text(self):
        assert format_result(BranchList(current="main", others=("dev",))) == "* main\n  dev"

    def test_commit_text(self):
        assert format_result(CommitResult("main", "1a2b3c4", "Msg")) == "[main 1a2b3c4] Msg"

    def test_json(self):
        entries = [LogEntry("abc", "A <a@x>", "D", "m")]

        assert json.loads(render(entries, as_json=True)) == [
            {"commit": "abc", "author": "A <a@x>", "date": "D", "message": "m"}
        ]
        assert json.loads(render(None, as_json=True)) == {"success": True}
        assert json.loads(render({"origin": "u"}, as_json=True)) == {"origin": "u"}

    def test_nothing_to_print(self):
        assert render(None) == ""


class TestMain:
    def test_config_error(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "absent.json"), "status"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_invalid_branch_name(self, tmp_path, capsys):
        assert main(["branch", "-d", str(tmp_path), "bad..name"]) == 1
        assert "Invalid branch name" in capsys.readouterr().err

    def test_verbose_enables_debug_logging(self, tmp_path, quiet_logging):
        main(["-v", "branch", "-d", str(tmp_path), "bad..name"])

        quiet_logging.assert_called_once_with("DEBUG")


@requires_git
class TestMainIntegration:
    def test_workflow(self, tmp_path, capsys):
        repo_dir = str(tmp_path / "project")

        assert main(["init", "-d", repo_dir]) == 0
        (tmp_path / "project" / "a.txt").write_text("hello\n")
        assert main(["add", "-d", repo_dir, "a.txt"]) == 0
        assert main(["commit", "-d", repo_dir, "-m", "First commit"]) == 0
        capsys.readouterr()

        assert main(["--json", "log", "-d", repo_dir]) == 0
        entries = json.loads(capsys.readouterr().out)
        assert [entry["message"] for entry in entries] == ["First commit"]

        assert main(["--json", "status", "-d", repo_dir]) == 0
        status = json.loads(capsys.readouterr().out)
        assert status["staged"] == [] and status["untracked"] == []

    def test_git_error_as_json(self, tmp_path, capsys):
        repo_dir = str(tmp_path / "project")
        main(["init", "-d", repo_dir])
        capsys.readouterr()

        assert main(["--json", "remote-rm", "-d", repo_dir, "origin"]) == 1
        error = json.loads(capsys.readouterr().out)
        assert error["error_type"] == "GitRemoteError"
        assert error["error_code"] == "GIT_REMOTE_ERROR"
