"""
Report index publisher.

Criterion writes its summary page to ``<report_dir>/report/index.html``.
The publisher makes it reachable as ``<report_dir>/index.html`` by writing
a redirect stub, a symlink, or a copy with rewritten links. When the
benchmark run produced no report index, an error page is written in its
place so the published location never goes stale.
"""

import logging
import os
import posixpath
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from jinja2 import Environment, FileSystemLoader, select_autoescape

from utils.exceptions import ConfigError, ReportingError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

REPORT_SUBDIR = "report"
INDEX_NAME = "index.html"
REPORT_INDEX = f"{REPORT_SUBDIR}/{INDEX_NAME}"
REPORT_MISSING_MESSAGE = "Benchmark report not found: no report/index.html was generated."

PUBLISH_MODES = ("redirect", "symlink", "copy")

_LINK_ATTR_RE = re.compile(
    r"""(?P<attr>(?<=\s)(?:href|src)=)(?P<quote>["'])(?P<url>[^"']*)(?P=quote)"""
)


@dataclass
class PublishResult:
    """Where the report entry point was written and how."""

    output_path: Path
    mode: str
    ok: bool  # False when the error page was written

    def to_dict(self) -> dict:
        return {"output_path": str(self.output_path), "mode": self.mode, "ok": self.ok}


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        keep_trailing_newline=True,
    )


def render_redirect(target: str = REPORT_INDEX, title: str = "Benchmark report") -> str:
    """Render a minimal HTML page that forwards the browser to ``target``."""
    return _environment().get_template("redirect.html.j2").render(target=target, title=title)


def render_error(
    message: str = REPORT_MISSING_MESSAGE,
    expected: str = REPORT_INDEX,
    title: str = "Benchmark report unavailable",
) -> str:
    """Render the static error page used when no report was generated."""
    return (
        _environment()
        .get_template("error.html.j2")
        .render(message=message, expected=expected, title=title)
    )


def rebase_links(html: str, prefix: str = REPORT_SUBDIR) -> str:
    """Rewrite relative href/src URLs so they resolve from the parent directory.

    ``../group/report/index.html`` becomes ``group/report/index.html`` and
    ``plot.svg`` becomes ``report/plot.svg``. Absolute URLs, root-relative
    paths and fragments are left alone.
    """

    def _rewrite(match: re.Match) -> str:
        url = match.group("url")
        parts = urlsplit(url)
        if not url or parts.scheme or parts.netloc or url.startswith(("/", "#")):
            return match.group(0)
        path = posixpath.normpath(posixpath.join(prefix, parts.path))
        if path.startswith("../") or path == "..":
            return match.group(0)
        rebased = path
        if parts.query:
            rebased += f"?{parts.query}"
        if parts.fragment:
            rebased += f"#{parts.fragment}"
        return f"{match.group('attr')}{match.group('quote')}{rebased}{match.group('quote')}"

    return _LINK_ATTR_RE.sub(_rewrite, html)


def _clear_entry_point(path: Path) -> None:
    """Remove a previous entry point, including dangling symlinks."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        raise ReportingError(f"Cannot publish report: {path} exists and is not a file")


def publish_report(report_dir: Path, mode: str = "redirect") -> PublishResult:
    """
    Make the report index reachable from ``report_dir``.

    Args:
        report_dir: Criterion output directory (e.g. ``target/criterion``).
        mode: ``redirect``, ``symlink`` or ``copy``.

    Returns:
        PublishResult describing the written entry point.

    Raises:
        ConfigError: If ``mode`` is unknown.
        ReportingError: If the entry point cannot be written.
    """
    if mode not in PUBLISH_MODES:
        raise ConfigError(f"Unknown publish mode '{mode}' (expected one of {', '.join(PUBLISH_MODES)})")

    report_dir = Path(report_dir)
    report_index = report_dir / REPORT_SUBDIR / INDEX_NAME
    entry_point = report_dir / INDEX_NAME

    try:
        report_dir.mkdir(parents=True, exist_ok=True)
        _clear_entry_point(entry_point)

        if not report_index.is_file():
            logger.error(f"Report index missing: {report_index}")
            entry_point.write_text(render_error(), encoding="utf-8")
            return PublishResult(output_path=entry_point, mode=mode, ok=False)

        if mode == "redirect":
            entry_point.write_text(render_redirect(), encoding="utf-8")
        elif mode == "symlink":
            os.symlink(REPORT_INDEX, entry_point)
        else:
            html = report_index.read_text(encoding="utf-8")
            entry_point.write_text(rebase_links(html), encoding="utf-8")
            shutil.copystat(report_index, entry_point)
    except (OSError, UnicodeDecodeError) as e:
        raise ReportingError(f"Failed to publish report in {report_dir}: {e}") from e

    logger.info(f"Published {report_index} as {entry_point} ({mode})")
    return PublishResult(output_path=entry_point, mode=mode, ok=True)
