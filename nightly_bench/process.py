"""
Command execution helpers.

Runs external commands (git, the benchmark runner) without ``shell=True``
and turns non-zero exits into CommandError so callers stop at the first
failing step.
"""

import logging
import os
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from utils.exceptions import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    """Outcome of a finished external command."""

    exit_code: int
    elapsed_seconds: float
    command_str: str
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def which_or_raise(bin_name: str, fallbacks: Optional[List[str]] = None, path: Optional[str] = None) -> str:
    """Locate an executable and return its absolute path.

    Args:
        bin_name: Executable name to look up.
        fallbacks: Explicit paths tried when the name is not on PATH.
        path: PATH string to search instead of the process PATH.

    Raises:
        CommandError: If no candidate is found.
    """
    found = shutil.which(bin_name, path=path)
    if found:
        return found

    for candidate in fallbacks or []:
        p = Path(candidate).expanduser()
        if p.exists() and os.access(str(p), os.X_OK):
            return str(p)

    raise CommandError(
        f"Executable '{bin_name}' not found on PATH. Tried fallbacks: {fallbacks or []}"
    )


def toolchain_env(bin_dir: Optional[Path], base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Return an environment with ``bin_dir`` at the front of PATH."""
    env = dict(os.environ if base is None else base)
    if bin_dir is None:
        return env
    current = env.get("PATH", "")
    parts = [p for p in current.split(os.pathsep) if p and p != str(bin_dir)]
    env["PATH"] = os.pathsep.join([str(bin_dir)] + parts)
    return env


def run_cmd(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
    timeout_seconds: float = 0,
    check: bool = True,
    capture: bool = True,
) -> CmdResult:
    """Run a subprocess and return its result.

    ``env`` is merged onto the current process environment. With
    ``capture=False`` the child inherits stdout/stderr, which is what the
    benchmark runner wants for its progress output.

    Raises:
        CommandError: If the binary cannot be started, the command times
            out, or ``check`` is set and it exits non-zero.
    """
    cmd = [str(c) for c in cmd]
    command_str = " ".join(cmd)

    merged_env = None
    if env is not None:
        merged_env = os.environ.copy()
        merged_env.update(env)

    logger.info(f"$ {command_str}" + (f" (cwd={cwd})" if cwd else ""))
    t0 = time.time()
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
            text=True,
            capture_output=capture,
            timeout=timeout_seconds if timeout_seconds and timeout_seconds > 0 else None,
        )
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {cmd[0]}") from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"Command timed out after {timeout_seconds}s: {command_str}") from e
    elapsed = time.time() - t0

    result = CmdResult(
        exit_code=proc.returncode,
        elapsed_seconds=elapsed,
        command_str=command_str,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )
    logger.debug(f"{command_str} exited {result.exit_code} in {elapsed:.1f}s")

    if check and not result.ok:
        raise CommandError(
            f"Command failed with exit code {result.exit_code}: {command_str}",
            exit_code=result.exit_code,
            stderr=result.stderr,
        )
    return result
