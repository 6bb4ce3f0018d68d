"""
Benchmark Runner

Invokes the external benchmark command (``cargo bench`` by default) with the
toolchain on PATH. A single website can be benchmarked by forwarding its
name to the bench harness after ``--``.

Usage:
    from nightly_bench.benchmark import BenchmarkRunner

    runner = BenchmarkRunner(repo_root=Path("."), command=["cargo", "bench"])
    run = runner.run(website="example.com")
    print(f"{run.command_str} took {run.duration_seconds:.0f}s")
"""

import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from utils.exceptions import BenchmarkError, CommandError

from ..process import run_cmd, toolchain_env, which_or_raise

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ["cargo", "bench"]


@dataclass
class BenchmarkRun:
    """Record of one invocation of the benchmark command."""

    command: List[str]
    exit_code: int
    duration_seconds: float
    started_at: datetime = field(default_factory=datetime.now)
    website: Optional[str] = None

    @property
    def command_str(self) -> str:
        return " ".join(self.command)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": self.command_str,
            "exit_code": self.exit_code,
            "duration_seconds": round(self.duration_seconds, 3),
            "started_at": self.started_at.isoformat(),
            "website": self.website,
        }


class BenchmarkRunner:
    """Runs the external benchmark command for a checkout."""

    def __init__(
        self,
        repo_root: Path = Path("."),
        command: Optional[List[str]] = None,
        toolchain_bin_dir: Optional[Path] = None,
        timeout_seconds: float = 0,
    ):
        self.repo_root = Path(repo_root)
        self.command = list(command or DEFAULT_COMMAND)
        self.toolchain_bin_dir = toolchain_bin_dir
        self.timeout_seconds = timeout_seconds

    def build_command(self, website: Optional[str] = None) -> List[str]:
        """Return the full command line, with the website filter if given."""
        cmd = list(self.command)
        if website:
            if "--" not in cmd:
                cmd.append("--")
            cmd.append(website)
        return cmd

    def run(self, website: Optional[str] = None) -> BenchmarkRun:
        """
        Run the benchmark command in the repository root.

        Args:
            website: Only benchmark this website of the suite.

        Returns:
            BenchmarkRun with exit code and wall-clock duration.

        Raises:
            BenchmarkError: If the command cannot be started or fails.
        """
        cmd = self.build_command(website)
        env = toolchain_env(self.toolchain_bin_dir)
        started_at = datetime.now()
        t0 = time.time()

        try:
            if os.sep not in cmd[0]:
                cmd[0] = which_or_raise(cmd[0], path=env.get("PATH"))
            result = run_cmd(
                cmd,
                cwd=self.repo_root,
                env=env,
                timeout_seconds=self.timeout_seconds,
                capture=False,
            )
        except CommandError as e:
            raise BenchmarkError(f"Benchmark run failed: {e}", exit_code=e.exit_code) from e

        run = BenchmarkRun(
            command=cmd,
            exit_code=result.exit_code,
            duration_seconds=time.time() - t0,
            started_at=started_at,
            website=website,
        )
        logger.info(f"Benchmark finished in {run.duration_seconds:.1f}s")
        return run
