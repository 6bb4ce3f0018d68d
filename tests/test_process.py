"""Tests for command execution helpers."""

import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from nightly_bench.process import CmdResult, run_cmd, toolchain_env, which_or_raise
from utils.exceptions import CommandError


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    proc = MagicMock()
    proc.returncode = returncode
    proc.stdout = stdout
    proc.stderr = stderr
    return proc


class TestRunCmd:
    def test_success(self) -> None:
        result = run_cmd([sys.executable, "-c", "print('hello')"])
        assert isinstance(result, CmdResult)
        assert result.ok is True
        assert result.stdout.strip() == "hello"
        assert result.elapsed_seconds >= 0

    def test_failure_raises_when_checked(self) -> None:
        with pytest.raises(CommandError) as exc_info:
            run_cmd([sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"])
        assert exc_info.value.exit_code == 3
        assert exc_info.value.stderr == "bad"

    def test_failure_returned_when_unchecked(self) -> None:
        result = run_cmd([sys.executable, "-c", "import sys; sys.exit(2)"], check=False)
        assert result.ok is False
        assert result.exit_code == 2

    def test_missing_binary(self) -> None:
        with pytest.raises(CommandError, match="not found"):
            run_cmd(["definitely-not-a-real-binary-xyz"])

    def test_env_is_merged(self) -> None:
        result = run_cmd(
            [sys.executable, "-c", "import os; print(os.environ['NIGHTLY_TEST_VAR'], 'PATH' in os.environ)"],
            env={"NIGHTLY_TEST_VAR": "merged"},
        )
        assert result.stdout.split() == ["merged", "True"]

    def test_cwd(self, tmp_path: Path) -> None:
        result = run_cmd([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_timeout(self) -> None:
        with patch(
            "nightly_bench.process.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="sleep", timeout=1),
        ):
            with pytest.raises(CommandError, match="timed out"):
                run_cmd(["sleep", "10"], timeout_seconds=1)

    def test_no_shell_and_stringified_args(self, tmp_path: Path) -> None:
        with patch("nightly_bench.process.subprocess.run", return_value=_completed()) as mock_run:
            run_cmd(["git", "-C", tmp_path, "status"])
        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "-C", str(tmp_path), "status"]
        assert "shell" not in kwargs
        assert kwargs["timeout"] is None

    def test_capture_disabled(self) -> None:
        with patch("nightly_bench.process.subprocess.run", return_value=_completed(stdout=None)) as mock_run:
            result = run_cmd(["cargo", "bench"], capture=False)
        assert mock_run.call_args.kwargs["capture_output"] is False
        assert result.stdout == ""


class TestToolchainEnv:
    def test_prepends_bin_dir(self, tmp_path: Path) -> None:
        env = toolchain_env(tmp_path, base={"PATH": os.pathsep.join(["/usr/bin", "/bin"])})
        assert env["PATH"].split(os.pathsep) == [str(tmp_path), "/usr/bin", "/bin"]

    def test_does_not_duplicate(self, tmp_path: Path) -> None:
        base = {"PATH": os.pathsep.join(["/usr/bin", str(tmp_path)])}
        env = toolchain_env(tmp_path, base=base)
        assert env["PATH"].split(os.pathsep) == [str(tmp_path), "/usr/bin"]

    def test_none_leaves_path(self) -> None:
        assert toolchain_env(None, base={"PATH": "/bin"}) == {"PATH": "/bin"}

    def test_missing_path(self, tmp_path: Path) -> None:
        assert toolchain_env(tmp_path, base={})["PATH"] == str(tmp_path)


class TestWhichOrRaise:
    def test_finds_on_path(self, tmp_path: Path) -> None:
        tool = tmp_path / "mytool"
        tool.write_text("#!/bin/sh\n")
        tool.chmod(0o755)
        assert which_or_raise("mytool", path=str(tmp_path)) == str(tool)

    def test_uses_fallback(self, tmp_path: Path) -> None:
        tool = tmp_path / "cargo"
        tool.write_text("#!/bin/sh\n")
        tool.chmod(0o755)
        assert which_or_raise("cargo", fallbacks=[str(tool)], path=str(tmp_path / "empty")) == str(tool)

    def test_raises_when_missing(self, tmp_path: Path) -> None:
        with pytest.raises(CommandError, match="not found on PATH"):
            which_or_raise("cargo", fallbacks=[str(tmp_path / "nope")], path=str(tmp_path))
