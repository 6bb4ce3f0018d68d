"""
Nightly Pipeline

Runs the nightly benchmark flow end to end:

    prepare env -> update submodule -> check suite -> run benchmark
    -> post-process report -> publish index

Every step is fail-fast; the first error propagates to the caller. The
publish step is the only one with a soft outcome: a missing report index
produces an error page instead of a redirect.

Usage:
    from nightly_bench.pipeline import NightlyConfig, NightlyPipeline

    result = NightlyPipeline(NightlyConfig(repo_root=Path("."))).run()
    print(result.publish.output_path)
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from utils.exceptions import ReportingError
from utils.logging_config import DebugTimer

from ..benchmark import BenchmarkRun, BenchmarkRunner
from ..profiling import HostProfile, detect_host
from ..reporting import PublishResult, postprocess_reports, publish_report
from ..reporting.stats import STATS_FILENAME
from ..submodule import get_git_commit, update_submodules
from ..suite import list_websites, resolve_website
from .config import NightlyConfig

logger = logging.getLogger(__name__)


@dataclass
class NightlyResult:
    """Outcome of a nightly run."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    git_commit: Optional[str] = None
    host: Optional[HostProfile] = None
    websites: List[str] = field(default_factory=list)
    benchmark: Optional[BenchmarkRun] = None
    reports_postprocessed: int = 0
    publish: Optional[PublishResult] = None
    step_seconds: Dict[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.publish is not None and self.publish.ok

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_seconds": round(self.duration_seconds, 3),
            "git_commit": self.git_commit,
            "host": self.host.to_dict() if self.host else None,
            "websites": self.websites,
            "benchmark": self.benchmark.to_dict() if self.benchmark else None,
            "reports_postprocessed": self.reports_postprocessed,
            "publish": self.publish.to_dict() if self.publish else None,
            "steps": {k: round(v, 3) for k, v in self.step_seconds.items()},
            "ok": self.ok,
        }


class NightlyPipeline:
    """Orchestrates one nightly benchmark run."""

    def __init__(self, config: NightlyConfig):
        config.validate()
        self.config = config

    def run(self) -> NightlyResult:
        """
        Execute every enabled step in order.

        Returns:
            NightlyResult describing the run.

        Raises:
            NightlyBenchError: From the first failing step.
        """
        cfg = self.config
        result = NightlyResult(started_at=datetime.now())
        result.host = detect_host()
        result.git_commit = get_git_commit(cfg.repo_root)
        logger.info(f"Nightly run in {cfg.repo_root} (commit {result.git_commit or 'unknown'})")

        if cfg.update_submodules:
            with _StepTimer("submodule", result):
                update_submodules(
                    cfg.repo_root,
                    recursive=cfg.recursive_submodules,
                    max_attempts=cfg.submodule_attempts,
                )

        if cfg.check_suite:
            with _StepTimer("suite", result):
                if cfg.website:
                    resolve_website(cfg.resolved_suite_dir, cfg.website)
                    result.websites = [cfg.website]
                else:
                    result.websites = list_websites(cfg.resolved_suite_dir)
                logger.info(f"Suite has {len(result.websites)} website(s)")

        with _StepTimer("benchmark", result):
            runner = BenchmarkRunner(
                repo_root=cfg.repo_root,
                command=cfg.bench_command,
                toolchain_bin_dir=cfg.toolchain_bin_dir,
                timeout_seconds=cfg.bench_timeout_seconds,
            )
            result.benchmark = runner.run(website=cfg.website)

        if cfg.postprocess:
            with _StepTimer("postprocess", result):
                stats_path = cfg.resolved_report_dir / STATS_FILENAME
                if stats_path.exists():
                    result.reports_postprocessed = postprocess_reports(cfg.resolved_report_dir)
                else:
                    logger.warning(f"No {STATS_FILENAME} in {cfg.resolved_report_dir}; skipping stats injection")

        with _StepTimer("publish", result):
            result.publish = publish_report(cfg.resolved_report_dir, mode=cfg.publish_mode)

        result.finished_at = datetime.now()
        if cfg.write_summary:
            write_summary(result, cfg.resolved_summary_path)
        return result


class _StepTimer(DebugTimer):
    """DebugTimer that records the step duration on the run result."""

    def __init__(self, name: str, result: NightlyResult):
        super().__init__(name, logger)
        self._result = result

    def __exit__(self, exc_type, exc, tb):
        super().__exit__(exc_type, exc, tb)
        self._result.step_seconds[self.name] = self.elapsed
        return False


def write_summary(result: NightlyResult, path: Path) -> Path:
    """Write the run summary as JSON.

    Raises:
        ReportingError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(result.to_dict(), f, indent=2, default=str)
    except OSError as e:
        raise ReportingError(f"Failed to write run summary {path}: {e}") from e
    logger.info(f"Run summary saved to {path}")
    return path
