"""
Git submodule helpers.

The benchmark suite lives in a git submodule which has to be checked out
before every nightly run.
"""

import logging
from pathlib import Path
from typing import Optional

from utils.exceptions import CommandError, SubmoduleError
from utils.retry import NonRetryableError, retry_with_backoff

from .process import CmdResult, run_cmd, which_or_raise

logger = logging.getLogger(__name__)


def _git_submodule_update(cmd: list) -> CmdResult:
    # Missing git is fatal, only the fetch itself is retried.
    try:
        which_or_raise("git")
    except CommandError as e:
        raise NonRetryableError(str(e)) from e
    return run_cmd(cmd)


def update_submodules(
    repo_root: Path,
    recursive: bool = False,
    max_attempts: int = 3,
    initial_delay: float = 2.0,
) -> None:
    """Run ``git submodule update --init`` in ``repo_root``.

    Failures are retried with exponential backoff since the fetch goes over
    the network.

    Raises:
        SubmoduleError: If git is missing or every attempt fails.
    """
    cmd = ["git", "-C", str(repo_root), "submodule", "update", "--init"]
    if recursive:
        cmd.append("--recursive")

    try:
        retry_with_backoff(
            _git_submodule_update,
            args=(cmd,),
            max_attempts=max_attempts,
            initial_delay=initial_delay,
            retryable_exceptions=(CommandError,),
        )
    except NonRetryableError as e:
        raise SubmoduleError(f"Could not update submodules in {repo_root}: {e}") from e
    except CommandError as e:
        detail = e.stderr.strip()
        raise SubmoduleError(
            f"Could not update submodules in {repo_root}: {e}" + (f"\n{detail}" if detail else ""),
            exit_code=e.exit_code,
        ) from e
    logger.info(f"Submodules up to date in {repo_root}")


def get_git_commit(repo_root: Path) -> Optional[str]:
    """Return the HEAD commit SHA of ``repo_root``.

    Returns None if repo_root is not a git repo or git is unavailable.
    """
    try:
        res = run_cmd(["git", "-C", str(repo_root), "rev-parse", "HEAD"], check=False, timeout_seconds=20)
    except CommandError:
        return None
    sha = res.stdout.strip()
    return sha if res.ok and sha else None
