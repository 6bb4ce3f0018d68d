"""
Centralized configuration for nightly-bench.

Loads environment variables from .env and provides resolved paths and settings.
"""

import os
import shlex
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_path_var(var_name: str, default: str | None = None) -> Path | None:
    """Retrieve a path from environment variables, resolving to absolute."""
    value = os.getenv(var_name, default)
    if not value:
        return None
    return Path(value).expanduser().resolve()


# -- Paths -------------------------------------------------------------------


STATE_DIR = Path(os.getenv("NIGHTLY_BENCH_STATE_DIR", str(Path.home() / ".nightly_bench")))
LOG_DIR = STATE_DIR / "logs"

# Toolchain bin directory prepended to PATH for the benchmark runner
TOOLCHAIN_BIN_DIR = get_path_var("NIGHTLY_BENCH_TOOLCHAIN_BIN", "~/.cargo/bin")

# -- Settings -----------------------------------------------------------------

BENCH_COMMAND = shlex.split(os.getenv("NIGHTLY_BENCH_COMMAND", "cargo bench"))
PUBLISH_MODE = os.getenv("NIGHTLY_BENCH_PUBLISH_MODE", "redirect")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")


def validate_config() -> None:
    """Validate that critical paths exist or can be created."""
    for path_var in [STATE_DIR, LOG_DIR]:
        if not path_var.exists():
            try:
                path_var.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                print(f"Warning: Could not create {path_var}: {e}")
