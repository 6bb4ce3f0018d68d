"""
Shared test fixtures for nightly-bench.

Provides common setup: temporary report trees, a websites suite
checkout, sample stats.json data and isolated settings.
"""

import json
from pathlib import Path

import pytest

GROUP_REPORT_HTML = """<!DOCTYPE html>
<html>
<head>
<style type="text/css">
body { font: 14px Helvetica Neue; }
</style>
</head>
<body>
<h2>example.com</h2>
<section class="plots"><img src="violin.svg"></section>
<section class="summary">
<h4>example.com/Naive</h4>
<a href="../Naive/report/index.html"><img src="../Naive/report/small.svg"></a>
<table><tr><th>Mean</th><td>1.2 ms</td></tr></table>
<h4>example.com/With SelectorMap</h4>
<a href="../With SelectorMap/report/index.html"><img src="../With SelectorMap/report/small.svg"></a>
<table><tr><th>Mean</th><td>0.8 ms</td></tr></table>
</section>
</body>
</html>
"""

ALGORITHM_REPORT_HTML = """<!DOCTYPE html>
<html>
<head>
<style type="text/css">
body { font: 14px Helvetica Neue; }
</style>
</head>
<body>
<h2>example.com/{algorithm}</h2>
<section class="plots"><img src="pdf.svg"><img src="regression.svg"></section>
<section class="stats"><table><tr><td>slope</td></tr></table></section>
</body>
</html>
"""

SUMMARY_REPORT_HTML = """<!DOCTYPE html>
<html>
<head><link rel="stylesheet" href="style.css"></head>
<body>
<h1>Criterion.rs Benchmark Index</h1>
<ul>
<li><a href="../example.com/report/index.html">example.com</a></li>
<li><a href="https://bheisler.github.io/criterion.rs/book/">Criterion book</a></li>
<li><a href="#top">Top</a></li>
</ul>
</body>
</html>
"""


def _stats_data() -> dict:
    return {
        "websites": {
            "example.com": {
                "Naive": {
                    "num_elements": 120,
                    "num_selectors": 45,
                    "matching_pairs": 300,
                    "sharing_instances": None,
                    "selector_map_hits": None,
                    "fast_rejects": None,
                    "slow_rejects": None,
                    "time_spent_slow_rejecting": None,
                },
                "With SelectorMap": {
                    "num_elements": 120,
                    "num_selectors": 45,
                    "matching_pairs": 300,
                    "sharing_instances": None,
                    "selector_map_hits": 210,
                    "fast_rejects": 12,
                    "slow_rejects": 3,
                    "time_spent_slow_rejecting": {"secs": 0, "nanos": 1500000},
                },
            }
        }
    }


@pytest.fixture
def stats_data() -> dict:
    """Return a stats.json payload for one website and two algorithms."""
    return _stats_data()


@pytest.fixture
def report_dir(tmp_path: Path) -> Path:
    """Create an empty Criterion output directory."""
    d = tmp_path / "target" / "criterion"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def report_tree(report_dir: Path) -> Path:
    """Create a Criterion output directory with a summary report index."""
    (report_dir / "report").mkdir()
    (report_dir / "report" / "index.html").write_text(SUMMARY_REPORT_HTML)
    return report_dir


@pytest.fixture
def stats_report_tree(report_tree: Path, stats_data: dict) -> Path:
    """Report tree with per-website and per-algorithm reports plus stats.json."""
    website_dir = report_tree / "example.com"
    (website_dir / "report").mkdir(parents=True)
    (website_dir / "report" / "index.html").write_text(GROUP_REPORT_HTML)
    for algorithm in ("Naive", "With SelectorMap"):
        algo_report = website_dir / algorithm / "report"
        algo_report.mkdir(parents=True)
        (algo_report / "index.html").write_text(ALGORITHM_REPORT_HTML.replace("{algorithm}", algorithm))
    (report_tree / "stats.json").write_text(json.dumps(stats_data, indent=2))
    return report_tree


@pytest.fixture
def suite_dir(tmp_path: Path) -> Path:
    """Create a websites suite checkout with three websites and a stray file."""
    d = tmp_path / "websites"
    d.mkdir()
    for name in ("example.com", "news.example.org", "shop.example.net"):
        (d / name).mkdir()
        (d / name / "index.html").write_text("<html></html>")
    (d / "README.md").write_text("not a website")
    return d


@pytest.fixture
def mock_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the settings module at temporary directories."""
    import config as settings

    state_dir = tmp_path / "state"
    monkeypatch.setattr(settings, "STATE_DIR", state_dir)
    monkeypatch.setattr(settings, "LOG_DIR", state_dir / "logs")
    monkeypatch.setattr(settings, "TOOLCHAIN_BIN_DIR", None)
    monkeypatch.setattr(settings, "BENCH_COMMAND", ["cargo", "bench"])
    monkeypatch.setattr(settings, "PUBLISH_MODE", "redirect")
    return state_dir


@pytest.fixture
def group_report_html() -> str:
    """Criterion group report for example.com with two algorithms."""
    return GROUP_REPORT_HTML


@pytest.fixture
def algorithm_report_html() -> str:
    """Criterion report for the example.com/Naive benchmark."""
    return ALGORITHM_REPORT_HTML.replace("{algorithm}", "Naive")
