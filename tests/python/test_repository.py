"""Tests for the synchronous Repository handle."""

from unittest.mock import MagicMock

import pytest

from conftest import requires_git, write_file
from gitty import (
    BranchList,
    CommandResult,
    GitBranchError,
    GitCommandError,
    GitMergeConflict,
    GitNothingToCommit,
    GitReferenceError,
    GitRemoteError,
    GitRunner,
    Repository,
)
from gitty.exceptions import classify_command_error


def ok(stdout="", stderr=""):
    return CommandResult(command=["git"], return_code=0, stdout=stdout, stderr=stderr)


def failed(stderr, stdout="", return_code=128):
    return CommandResult(
        command=["git"],
        return_code=return_code,
        stdout=stdout,
        stderr=stderr,
        error=classify_command_error(["git"], return_code, stdout, stderr),
    )


@pytest.fixture
def mock_runner():
    runner = MagicMock(spec=GitRunner)
    runner.run.return_value = ok()
    return runner


@pytest.fixture
def mocked_repo(tmp_path, mock_runner):
    return Repository(tmp_path / "project", runner=mock_runner)


def issued(runner):
    """Subcommand, flags and args of every command the runner received."""
    return [
        (call.args[0].subcommand, call.args[0].flags, call.args[0].args)
        for call in runner.run.call_args_list
    ]


class TestRepositoryHandle:
    def test_path_and_name(self, tmp_path):
        repo = Repository(str(tmp_path / "a" / ".." / "project"))

        assert repo.path == tmp_path / "project"
        assert repo.name == "project"
        assert repo.remote.repository is repo
        assert "project" in repr(repo)

    def test_is_repository_is_evaluated_live(self, tmp_path):
        repo = Repository(tmp_path / "project")
        assert repo.is_repository is False

        (tmp_path / "project" / ".git").mkdir(parents=True)

        assert repo.is_repository is True

    def test_gitdir_file_counts_as_repository(self, tmp_path):
        (tmp_path / ".git").write_text("gitdir: /elsewhere/.git/worktrees/x\n")

        assert Repository(tmp_path).is_repository is True


class TestRepositoryCommands:
    """Invocations issued by each operation, with a mocked runner."""

    def test_log_format_and_limit(self, mocked_repo, mock_runner):
        mocked_repo.log(max_count=3)

        (subcommand, flags, args), = issued(mock_runner)
        assert subcommand == ("log",)
        assert flags[0].startswith('--pretty=format:{"commit": "%H"')
        assert flags[1] == "--max-count=3"
        assert args == ()

    @pytest.mark.parametrize(
        "stderr",
        [
            "fatal: your current branch 'main' does not have any commits yet\n",
            "fatal: bad default revision 'HEAD'\n",
        ],
    )
    def test_log_of_empty_history_is_empty(self, mocked_repo, mock_runner, stderr):
        mock_runner.run.return_value = failed(stderr)

        assert mocked_repo.log() == []

    def test_log_other_failures_raise(self, mocked_repo, mock_runner):
        mock_runner.run.return_value = failed("fatal: not a git repository\n")

        with pytest.raises(GitCommandError):
            mocked_repo.log()

    def test_paths_are_separated_from_options(self, mocked_repo, mock_runner):
        mocked_repo.add(["-rf", "b.txt"])
        mocked_repo.remove(["c.txt"])
        mocked_repo.unstage(["d.txt"])

        assert issued(mock_runner) == [
            (("add",), (), ("--", "-rf", "b.txt")),
            (("rm",), ("--cached",), ("--", "c.txt")),
            (("reset",), ("-q", "HEAD"), ("--", "d.txt")),
        ]

    def test_single_path_string_is_accepted(self, mocked_repo, mock_runner):
        mocked_repo.add("README.md")

        assert issued(mock_runner)[0][2] == ("--", "README.md")

    @pytest.mark.parametrize("method", ["add", "remove", "unstage"])
    def test_empty_path_list_is_rejected(self, mocked_repo, mock_runner, method):
        with pytest.raises(ValueError):
            getattr(mocked_repo, method)([])

        mock_runner.run.assert_not_called()

    def test_commit_message_is_one_argument(self, mocked_repo, mock_runner):
        mock_runner.run.return_value = ok("[main 1a2b3c4] multi word; message\n")

        result = mocked_repo.commit("multi word; message")

        assert issued(mock_runner) == [(("commit",), ("-m",), ("multi word; message",))]
        assert result.commit == "1a2b3c4"

    def test_commit_with_unrecognized_output(self, mocked_repo, mock_runner):
        mock_runner.run.return_value = ok("")

        assert mocked_repo.commit("msg") is None

    def test_status_runs_both_commands(self, mocked_repo, mock_runner):
        mock_runner.run.side_effect = [
            ok("On branch main\nChanges to be committed:\n\tnew file:   a.txt\n"),
            ok("b.txt\n"),
        ]

        status = mocked_repo.status()

        assert [command[0] for command in issued(mock_runner)] == [("status",), ("ls-files",)]
        assert status.branch == "main"
        assert status.staged_paths == ["a.txt"]
        assert status.untracked_paths == ["b.txt"]

    def test_status_raises_first_error(self, mocked_repo, mock_runner):
        mock_runner.run.side_effect = [
            failed("fatal: status broke\n"),
            failed("fatal: ls-files broke\n"),
        ]

        with pytest.raises(GitCommandError, match="status broke"):
            mocked_repo.status()

        assert mock_runner.run.call_count == 2

    def test_status_raises_listing_error(self, mocked_repo, mock_runner):
        mock_runner.run.side_effect = [ok("On branch main\n"), failed("fatal: ls-files broke\n")]

        with pytest.raises(GitCommandError, match="ls-files broke"):
            mocked_repo.status()

    @pytest.mark.parametrize("name", ["", "-b", "a..b", "with space", "end.lock", "x~1", "@"])
    def test_invalid_branch_names_never_reach_git(self, mocked_repo, mock_runner, name):
        for operation in (mocked_repo.branch, mocked_repo.checkout, mocked_repo.merge):
            with pytest.raises(GitBranchError):
                operation(name)

        mock_runner.run.assert_not_called()

    def test_checkout_reads_branches_after_switching(self, mocked_repo, mock_runner):
        mock_runner.run.side_effect = [ok(stderr="Switched to branch 'B'\n"), ok("  main\n* B\n")]

        branches = mocked_repo.checkout("B")

        assert branches == BranchList(current="B", others=("main",))
        assert issued(mock_runner) == [
            (("checkout",), (), ("B", "--")),
            (("branch",), ("--no-color",), ()),
        ]

    def test_failed_checkout_does_not_list_branches(self, mocked_repo, mock_runner):
        mock_runner.run.return_value = failed("fatal: invalid reference: B\n", return_code=1)

        with pytest.raises(GitReferenceError):
            mocked_repo.checkout("B")

        assert mock_runner.run.call_count == 1

    def test_merge(self, mocked_repo, mock_runner):
        mocked_repo.merge("feature/x")

        assert issued(mock_runner) == [(("merge",), ("--no-edit",), ("feature/x",))]

    def test_remote_commands(self, mocked_repo, mock_runner):
        mocked_repo.remote.add("origin", "https://example.com/a.git")
        mocked_repo.remote.set_url("origin", "https://example.com/b.git")
        mocked_repo.remote.remove("origin")

        assert issued(mock_runner) == [
            (("remote", "add"), (), ("origin", "https://example.com/a.git")),
            (("remote", "set-url"), (), ("origin", "https://example.com/b.git")),
            (("remote", "remove"), (), ("origin",)),
        ]

    def test_every_command_runs_in_the_repository(self, mocked_repo, mock_runner):
        mocked_repo.branches()
        mocked_repo.remote.list()

        for call in mock_runner.run.call_args_list:
            assert call.args[0].working_directory == mocked_repo.path


@requires_git
class TestRepositoryIntegration:
    def test_init_creates_repository(self, repo_dir):
        repo = Repository(repo_dir)

        repo.init()

        assert repo_dir.is_dir()
        assert repo.is_repository
        assert repo.log() == []
        assert repo.status().is_clean

    def test_commit_round_trip(self, repo):
        message = 'Add "quoted" {braces}, back\\slash and more'
        write_file(repo, "a.txt", "hello\n")
        repo.add(["a.txt"])

        result = repo.commit(message)
        entries = repo.log()

        assert result is not None
        assert result.root_commit
        assert result.summary == message
        assert len(entries) == 1
        assert entries[0].message == message
        assert entries[0].commit.startswith(result.commit)
        assert entries[0].author == "Test User <test@example.com>"
        assert entries[0].timestamp is not None

    def test_message_shaped_like_a_record_boundary(self, committed_repo):
        """Test that a subject imitating the log record framing round-trips."""
        message = 'x"},{"commit": "y'
        write_file(committed_repo, "a.txt", "changed\n")
        committed_repo.add(["a.txt"])
        committed_repo.commit(message)

        assert [entry.message for entry in committed_repo.log()] == [
            message,
            "Initial commit",
        ]

    def test_log_order_and_limit(self, committed_repo):
        for index in range(2):
            write_file(committed_repo, "a.txt", f"change {index}\n")
            committed_repo.add(["a.txt"])
            committed_repo.commit(f"Change {index}")

        assert [e.message for e in committed_repo.log()] == [
            "Change 1",
            "Change 0",
            "Initial commit",
        ]
        assert len(committed_repo.log(max_count=2)) == 2

    def test_status_classification(self, committed_repo):
        write_file(committed_repo, "a.txt", "edited\n")
        write_file(committed_repo, "staged.txt", "new\n")
        write_file(committed_repo, "dir/loose file.txt", "untracked\n")
        committed_repo.add(["staged.txt"])

        status = committed_repo.status()

        assert status.staged_paths == ["staged.txt"]
        assert status.staged[0].state == "new file"
        assert status.unstaged_paths == ["a.txt"]
        assert status.unstaged[0].state == "modified"
        assert status.untracked_paths == ["dir/loose file.txt"]
        assert status.conflicted == ()
        assert status.branch == committed_repo.branches().current

    def test_unstage_and_remove(self, committed_repo):
        write_file(committed_repo, "a.txt", "edited\n")
        committed_repo.add(["a.txt"])
        committed_repo.unstage(["a.txt"])

        assert committed_repo.status().unstaged_paths == ["a.txt"]

        committed_repo.remove(["a.txt"])
        status = committed_repo.status()

        assert status.staged[0].state == "deleted"
        assert status.untracked_paths == ["a.txt"]
        assert (committed_repo.path / "a.txt").exists()

    def test_nothing_to_commit(self, committed_repo):
        with pytest.raises(GitNothingToCommit):
            committed_repo.commit("Empty")

        assert len(committed_repo.log()) == 1

    def test_branch_and_checkout(self, committed_repo):
        original = committed_repo.branches().current

        committed_repo.branch("B")
        assert committed_repo.branches() == BranchList(current=original, others=("B",))

        branches = committed_repo.checkout("B")

        assert branches.current == "B"
        assert original in branches.others
        assert committed_repo.branches().current == "B"

    def test_checkout_of_missing_branch(self, committed_repo):
        original = committed_repo.branches().current

        with pytest.raises(GitCommandError):
            committed_repo.checkout("missing")

        assert committed_repo.branches().current == original

    def test_duplicate_branch(self, committed_repo):
        committed_repo.branch("B")

        with pytest.raises(GitReferenceError):
            committed_repo.branch("B")

    def test_fast_forward_merge(self, committed_repo):
        original = committed_repo.branches().current
        committed_repo.branch("feature")
        committed_repo.checkout("feature")
        write_file(committed_repo, "b.txt", "feature\n")
        committed_repo.add(["b.txt"])
        committed_repo.commit("Feature work")
        committed_repo.checkout(original)

        committed_repo.merge("feature")

        assert committed_repo.log()[0].message == "Feature work"

    def test_merge_conflict(self, committed_repo):
        original = committed_repo.branches().current
        committed_repo.branch("feature")
        committed_repo.checkout("feature")
        write_file(committed_repo, "a.txt", "feature side\n")
        committed_repo.add(["a.txt"])
        committed_repo.commit("Feature edit")
        committed_repo.checkout(original)
        write_file(committed_repo, "a.txt", "main side\n")
        committed_repo.add(["a.txt"])
        committed_repo.commit("Main edit")

        with pytest.raises(GitMergeConflict) as exc_info:
            committed_repo.merge("feature")

        assert exc_info.value.conflicted_files == ["a.txt"]
        assert committed_repo.status().conflicted_paths == ["a.txt"]

    def test_remotes(self, repo):
        assert repo.remote.list() == {}

        repo.remote.add("origin", "https://example.com/a.git")
        assert repo.remote.list() == {"origin": "https://example.com/a.git"}

        repo.remote.set_url("origin", "https://example.com/b.git")
        assert repo.remote.list() == {"origin": "https://example.com/b.git"}

        repo.remote.remove("origin")
        assert repo.remote.list() == {}

    def test_remove_missing_remote(self, repo):
        with pytest.raises(GitRemoteError):
            repo.remote.remove("origin")

    def test_handle_survives_failures(self, committed_repo):
        with pytest.raises(GitCommandError):
            committed_repo.add(["does-not-exist.txt"])

        assert len(committed_repo.log()) == 1

    def test_operations_outside_a_repository(self, repo_dir):
        repo_dir.mkdir()
        repo = Repository(repo_dir)

        with pytest.raises(GitCommandError) as exc_info:
            repo.status()

        assert exc_info.value.error_code == "GIT_REPOSITORY_NOT_FOUND"
