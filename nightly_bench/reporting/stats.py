"""
Selector statistics injection for Criterion reports.

The benchmark harness writes ``stats.json`` next to the Criterion output:

    {"websites": {"<website>": {"<algorithm>": {...} | null}}}

After a run, each website's group report and each algorithm report gets a
"Selector Stats" section inserted below the matching benchmark summary.
Re-running over an already processed tree is a no-op.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from utils.exceptions import ReportingError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

STATS_FILENAME = "stats.json"
STATS_CLASS = "nightly-stats"
MAX_FILENAME_BYTES = 240

# Characters Criterion replaces when turning benchmark ids into directory names
_UNSAFE_CHARS = '?"/\\*<>:|^'

STATS_CSS = """
        .nightly-stats {
            margin: 12px 0 8px 0;
            padding: 8px 12px;
            border: 1px solid #d0d0d0;
            border-radius: 6px;
            background: #fafafa;
        }
        .nightly-stats h5 {
            margin: 0 0 6px 0;
            font-size: 14px;
            font-weight: 600;
        }
        .nightly-stats table {
            border-collapse: collapse;
        }
        .nightly-stats th {
            text-align: left;
            padding-right: 10px;
            font-weight: 500;
        }
        .nightly-stats td {
            padding-right: 10px;
        }
    """

STYLE_TAG = '<style type="text/css">'


def _parse_duration(value: Any) -> Optional[float]:
    """Parse a serialized duration into seconds.

    Accepts the ``{"secs": n, "nanos": m}`` form or a plain number of seconds.
    """
    if value is None:
        return None
    if isinstance(value, dict):
        return float(value.get("secs", 0)) + float(value.get("nanos", 0)) / 1e9
    return float(value)


@dataclass
class StatsEntry:
    """Selector matching statistics for one website/algorithm pair."""

    num_elements: int
    num_selectors: int
    matching_pairs: int
    sharing_instances: Optional[int] = None
    selector_map_hits: Optional[int] = None
    fast_rejects: Optional[int] = None
    slow_rejects: Optional[int] = None
    time_spent_slow_rejecting: Optional[float] = None  # seconds

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatsEntry":
        try:
            return cls(
                num_elements=int(data["num_elements"]),
                num_selectors=int(data["num_selectors"]),
                matching_pairs=int(data["matching_pairs"]),
                sharing_instances=data.get("sharing_instances"),
                selector_map_hits=data.get("selector_map_hits"),
                fast_rejects=data.get("fast_rejects"),
                slow_rejects=data.get("slow_rejects"),
                time_spent_slow_rejecting=_parse_duration(data.get("time_spent_slow_rejecting")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ReportingError(f"Malformed stats entry: {e}") from e

    def rows(self) -> List[Tuple[str, str]]:
        """Table rows for the values that are present, in display order."""
        rows = [
            ("Number of Elements", str(self.num_elements)),
            ("Number of Selectors", str(self.num_selectors)),
            ("Matching Pairs", str(self.matching_pairs)),
        ]
        if self.selector_map_hits is not None:
            rows.append(("Selector Map Hits", str(self.selector_map_hits)))
        if self.fast_rejects is not None:
            rows.append(("Fast Rejects", str(self.fast_rejects)))
        if self.slow_rejects is not None:
            rows.append(("Slow Rejects", str(self.slow_rejects)))
        if self.time_spent_slow_rejecting is not None:
            rows.append(("Time Spent Slow Rejecting", format_duration(self.time_spent_slow_rejecting)))
        if self.sharing_instances is not None:
            rows.append(("Sharing Instances", str(self.sharing_instances)))
        return rows


@dataclass
class StatsFile:
    """Contents of ``stats.json``: website -> algorithm -> entry (or None)."""

    websites: Dict[str, Dict[str, Optional[StatsEntry]]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatsFile":
        websites: Dict[str, Dict[str, Optional[StatsEntry]]] = {}
        for website, algorithms in (data.get("websites") or {}).items():
            websites[website] = {
                algorithm: StatsEntry.from_dict(entry) if entry is not None else None
                for algorithm, entry in (algorithms or {}).items()
            }
        return cls(websites=websites)


def load_stats(path: Path) -> StatsFile:
    """Load ``stats.json``.

    Raises:
        ReportingError: If the file is missing, unreadable or not valid JSON.
    """
    path = Path(path)
    if not path.exists():
        raise ReportingError(f"Stats file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ReportingError(f"Invalid stats file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ReportingError(f"Invalid stats file {path}: expected a JSON object")
    return StatsFile.from_dict(data)


def format_duration(seconds: float) -> str:
    return f"{seconds * 1000.0:.3f} ms"


def make_filename_safe(name: str) -> str:
    """Map a benchmark id to the directory name Criterion uses for it."""
    safe = "".join("_" if c in _UNSAFE_CHARS else c for c in name)
    encoded = safe.encode("utf-8")
    if len(encoded) > MAX_FILENAME_BYTES:
        safe = encoded[:MAX_FILENAME_BYTES].decode("utf-8", errors="ignore")
    return safe


def find_dir(base: Path, name: str) -> Optional[Path]:
    """Find the Criterion directory for ``name`` under ``base``."""
    safe = make_filename_safe(name)
    for candidate in (base / safe, base / safe.lower()):
        if candidate.exists():
            return candidate
    return None


def inject_styles_once(html: str) -> str:
    if f".{STATS_CLASS}" in html:
        return html
    pos = html.find(STYLE_TAG)
    if pos == -1:
        return html
    insert_at = pos + len(STYLE_TAG)
    return html[:insert_at] + STATS_CSS + html[insert_at:]


def render_stats_block(entry: Optional[StatsEntry]) -> str:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=False,
        keep_trailing_newline=True,
    )
    rows = entry.rows() if entry is not None else []
    return env.get_template("stats_block.html.j2").render(rows=rows)


def has_stats_block_at(html: str, insert_at: int) -> bool:
    """True if a stats block already starts at ``insert_at`` (ignoring whitespace)."""
    return html[insert_at:].lstrip().startswith(f'<section class="{STATS_CLASS}">')


def _insert_block(html: str, insert_at: int, entry: Optional[StatsEntry]) -> str:
    if has_stats_block_at(html, insert_at):
        return html
    return html[:insert_at] + render_stats_block(entry) + html[insert_at:]


def inject_group_report(
    html: str,
    website: str,
    algorithms: Dict[str, Optional[StatsEntry]],
) -> str:
    """Insert a stats block under every algorithm summary of a group report."""
    updated = inject_styles_once(html)
    for algorithm, entry in algorithms.items():
        needle = f"<h4>{website}/{algorithm}</h4>"
        h4_pos = updated.find(needle)
        if h4_pos == -1:
            continue
        anchor_close = updated.find("</a>", h4_pos)
        if anchor_close == -1:
            continue
        after_anchor = anchor_close + len("</a>")
        table_close = updated.find("</table>", after_anchor)
        if table_close == -1:
            continue
        updated = _insert_block(updated, table_close + len("</table>"), entry)
    return updated


def inject_algorithm_report(
    html: str,
    website: str,
    algorithm: str,
    entry: Optional[StatsEntry],
) -> str:
    """Insert a stats block after the plots section of an algorithm report."""
    updated = inject_styles_once(html)
    needle = f"<h2>{website}/{algorithm}</h2>"
    h2_pos = updated.find(needle)
    if h2_pos == -1:
        return updated
    plots_start = updated.find('<section class="plots">', h2_pos + len(needle))
    if plots_start == -1:
        return updated
    plots_end = updated.find("</section>", plots_start)
    if plots_end == -1:
        return updated
    return _insert_block(updated, plots_end + len("</section>"), entry)


def _rewrite_if_changed(path: Path, updated: str, original: str) -> bool:
    if updated == original:
        return False
    path.write_text(updated, encoding="utf-8")
    logger.debug(f"Injected selector stats into {path}")
    return True


def postprocess_reports(report_dir: Path, stats_path: Optional[Path] = None) -> int:
    """
    Inject selector statistics into the Criterion report tree.

    Args:
        report_dir: Criterion output directory.
        stats_path: Stats file; defaults to ``<report_dir>/stats.json``.

    Returns:
        Number of report files rewritten.

    Raises:
        ReportingError: If the stats file is missing or malformed, or a
            report cannot be rewritten.
    """
    report_dir = Path(report_dir)
    stats = load_stats(stats_path or report_dir / STATS_FILENAME)
    rewritten = 0

    try:
        for website, algorithms in stats.websites.items():
            website_dir = find_dir(report_dir, website)
            if website_dir is None:
                logger.debug(f"No report directory for website {website}")
                continue

            group_report = website_dir / "report" / "index.html"
            if group_report.exists():
                html = group_report.read_text(encoding="utf-8")
                updated = inject_group_report(html, website, algorithms)
                rewritten += _rewrite_if_changed(group_report, updated, html)

            for algorithm, entry in algorithms.items():
                algo_dir = find_dir(website_dir, algorithm)
                if algo_dir is None:
                    continue
                algo_report = algo_dir / "report" / "index.html"
                if algo_report.exists():
                    html = algo_report.read_text(encoding="utf-8")
                    updated = inject_algorithm_report(html, website, algorithm, entry)
                    rewritten += _rewrite_if_changed(algo_report, updated, html)
    except (OSError, UnicodeDecodeError) as e:
        raise ReportingError(f"Failed to post-process reports in {report_dir}: {e}") from e

    logger.info(f"Injected selector stats into {rewritten} report(s)")
    return rewritten
