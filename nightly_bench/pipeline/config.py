"""
Nightly Run Configuration

Dataclass describing one nightly run and its YAML loader.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from utils.exceptions import ConfigError

from ..benchmark.runner import DEFAULT_COMMAND
from ..reporting.publisher import PUBLISH_MODES

logger = logging.getLogger(__name__)

_PATH_FIELDS = ("repo_root", "report_dir", "suite_dir", "toolchain_bin_dir", "summary_path")


@dataclass
class NightlyConfig:
    """Complete configuration of a nightly benchmark run."""

    # Layout (report_dir and suite_dir are relative to repo_root)
    repo_root: Path = Path(".")
    report_dir: Path = Path("target/criterion")
    suite_dir: Path = Path("websites")

    # Benchmark
    bench_command: List[str] = field(default_factory=lambda: list(DEFAULT_COMMAND))
    toolchain_bin_dir: Optional[Path] = None
    website: Optional[str] = None
    bench_timeout_seconds: float = 0

    # Submodule
    update_submodules: bool = True
    recursive_submodules: bool = False
    submodule_attempts: int = 3

    # Steps
    check_suite: bool = True
    postprocess: bool = True
    publish_mode: str = "redirect"

    # Summary JSON; defaults to <report_dir>/nightly.json
    write_summary: bool = True
    summary_path: Optional[Path] = None

    def __post_init__(self) -> None:
        for name in _PATH_FIELDS:
            value = getattr(self, name)
            if value is not None and not isinstance(value, Path):
                setattr(self, name, Path(value).expanduser())
        if isinstance(self.bench_command, str):
            self.bench_command = self.bench_command.split()

    @property
    def resolved_report_dir(self) -> Path:
        return self.repo_root / self.report_dir

    @property
    def resolved_suite_dir(self) -> Path:
        return self.repo_root / self.suite_dir

    @property
    def resolved_summary_path(self) -> Path:
        if self.summary_path is not None:
            return self.repo_root / self.summary_path
        return self.resolved_report_dir / "nightly.json"

    def validate(self) -> None:
        """Check settings that would otherwise fail halfway through a run.

        Raises:
            ConfigError: On the first invalid setting.
        """
        if not self.bench_command:
            raise ConfigError("bench_command must not be empty")
        if self.publish_mode not in PUBLISH_MODES:
            raise ConfigError(
                f"Unknown publish mode '{self.publish_mode}' (expected one of {', '.join(PUBLISH_MODES)})"
            )
        if self.submodule_attempts < 1:
            raise ConfigError("submodule_attempts must be at least 1")
        if self.bench_timeout_seconds < 0:
            raise ConfigError("bench_timeout_seconds must not be negative")

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = str(value) if isinstance(value, Path) else value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **overrides: Any) -> "NightlyConfig":
        """Build a config from a mapping; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        merged = {**(data or {}), **{k: v for k, v in overrides.items() if v is not None}}
        unknown = sorted(set(merged) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        config = cls(**merged)
        config.validate()
        return config

    @classmethod
    def from_yaml(
        cls, path: Path, defaults: Optional[Dict[str, Any]] = None, **overrides: Any
    ) -> "NightlyConfig":
        """Load a nightly config from a YAML file.

        A relative ``repo_root`` is resolved against the YAML file's directory.
        Values in the file take precedence over ``defaults``; keyword overrides
        that are not None take precedence over the file.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        repo_root = Path(data.get("repo_root", ".")).expanduser()
        if not repo_root.is_absolute():
            data["repo_root"] = path.parent / repo_root

        logger.debug(f"Loaded nightly config from {path}")
        return cls.from_dict({**(defaults or {}), **data}, **overrides)
