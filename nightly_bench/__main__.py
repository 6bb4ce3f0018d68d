"""
Entry point for running nightly-bench as a module.

Usage:
    python -m nightly_bench run
    python -m nightly_bench publish --report-dir target/criterion
    python -m nightly_bench suite
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
