"""
Benchmark suite checkout.

The suite directory holds one subdirectory per website. Stray files next
to them are ignored.
"""

import logging
from pathlib import Path
from typing import List

from utils.exceptions import SuiteError

logger = logging.getLogger(__name__)


def list_websites(suite_dir: Path) -> List[str]:
    """Return the sorted website names in ``suite_dir``.

    Raises:
        SuiteError: If the suite directory is missing or not a directory.
    """
    suite_dir = Path(suite_dir)
    if not suite_dir.exists():
        raise SuiteError(
            f"Suite directory not found: {suite_dir} (is the submodule initialized?)"
        )
    if not suite_dir.is_dir():
        raise SuiteError(f"Suite path is not a directory: {suite_dir}")

    websites = []
    for entry in sorted(suite_dir.iterdir()):
        if not entry.is_dir():
            logger.debug(f"Skipping non-directory suite entry {entry.name}")
            continue
        if entry.name.startswith("."):
            continue
        websites.append(entry.name)
    return websites


def resolve_website(suite_dir: Path, name: str) -> Path:
    """Return the directory of a single website in the suite.

    Raises:
        SuiteError: If the website is not part of the suite.
    """
    websites = list_websites(suite_dir)
    if name not in websites:
        raise SuiteError(f"Unknown website '{name}' in {suite_dir}")
    return Path(suite_dir) / name
