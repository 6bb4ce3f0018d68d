"""
Report post-processing module.

Injects selector statistics into the Criterion report tree and publishes
its index page one directory up.
"""

from .publisher import (
    PUBLISH_MODES,
    REPORT_MISSING_MESSAGE,
    PublishResult,
    publish_report,
    render_error,
    render_redirect,
)
from .stats import StatsEntry, StatsFile, load_stats, postprocess_reports

__all__ = [
    "publish_report",
    "PublishResult",
    "PUBLISH_MODES",
    "REPORT_MISSING_MESSAGE",
    "render_redirect",
    "render_error",
    "postprocess_reports",
    "load_stats",
    "StatsEntry",
    "StatsFile",
]
