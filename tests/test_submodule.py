"""Tests for git submodule helpers."""

from pathlib import Path
from unittest.mock import patch

import pytest

from nightly_bench.process import CmdResult
from nightly_bench.submodule import get_git_commit, update_submodules
from utils.exceptions import CommandError, SubmoduleError


def _result(exit_code: int = 0, stdout: str = "") -> CmdResult:
    return CmdResult(exit_code=exit_code, elapsed_seconds=0.1, command_str="git", stdout=stdout, stderr="")


@pytest.fixture
def git_on_path():
    with patch("nightly_bench.submodule.which_or_raise", return_value="/usr/bin/git") as mock_which:
        yield mock_which


@pytest.mark.usefixtures("git_on_path")
class TestUpdateSubmodules:
    def test_runs_git_submodule_update(self, tmp_path: Path) -> None:
        with patch("nightly_bench.submodule.run_cmd", return_value=_result()) as mock_run:
            update_submodules(tmp_path)
        mock_run.assert_called_once_with(["git", "-C", str(tmp_path), "submodule", "update", "--init"])

    def test_recursive(self, tmp_path: Path) -> None:
        with patch("nightly_bench.submodule.run_cmd", return_value=_result()) as mock_run:
            update_submodules(tmp_path, recursive=True)
        assert mock_run.call_args.args[0][-1] == "--recursive"

    def test_retries_then_succeeds(self, tmp_path: Path) -> None:
        side_effects = [CommandError("network down", exit_code=128), _result()]
        with patch("nightly_bench.submodule.run_cmd", side_effect=side_effects) as mock_run, patch(
            "utils.retry.time.sleep"
        ) as mock_sleep:
            update_submodules(tmp_path, max_attempts=3)
        assert mock_run.call_count == 2
        mock_sleep.assert_called_once()

    def test_exhausted_attempts_raise(self, tmp_path: Path) -> None:
        error = CommandError("fatal: unable to access", exit_code=128, stderr="fatal: repo gone")
        with patch("nightly_bench.submodule.run_cmd", side_effect=error) as mock_run, patch(
            "utils.retry.time.sleep"
        ):
            with pytest.raises(SubmoduleError, match="repo gone"):
                update_submodules(tmp_path, max_attempts=2)
        assert mock_run.call_count == 2

    def test_exhausted_attempts_keep_exit_code(self, tmp_path: Path) -> None:
        error = CommandError("Command failed with exit code 128", exit_code=128)
        with patch("nightly_bench.submodule.run_cmd", side_effect=error), patch("utils.retry.time.sleep"):
            with pytest.raises(SubmoduleError) as exc_info:
                update_submodules(tmp_path, max_attempts=1)
        assert exc_info.value.exit_code == 128


class TestUpdateSubmodulesWithoutGit:
    def test_missing_git_is_not_retried(self, tmp_path: Path) -> None:
        missing = CommandError("Executable 'git' not found on PATH. Tried fallbacks: []")
        with patch("nightly_bench.submodule.which_or_raise", side_effect=missing) as mock_which, patch(
            "nightly_bench.submodule.run_cmd"
        ) as mock_run, patch("utils.retry.time.sleep") as mock_sleep:
            with pytest.raises(SubmoduleError, match="not found"):
                update_submodules(tmp_path, max_attempts=3)
        mock_which.assert_called_once_with("git")
        mock_run.assert_not_called()
        mock_sleep.assert_not_called()


class TestGetGitCommit:
    def test_returns_sha(self, tmp_path: Path) -> None:
        sha = "0123456789abcdef0123456789abcdef01234567"
        with patch("nightly_bench.submodule.run_cmd", return_value=_result(stdout=sha + "\n")):
            assert get_git_commit(tmp_path) == sha

    def test_not_a_repo(self, tmp_path: Path) -> None:
        with patch("nightly_bench.submodule.run_cmd", return_value=_result(exit_code=128)):
            assert get_git_commit(tmp_path) is None

    def test_git_missing(self, tmp_path: Path) -> None:
        with patch("nightly_bench.submodule.run_cmd", side_effect=CommandError("Command not found: git")):
            assert get_git_commit(tmp_path) is None
