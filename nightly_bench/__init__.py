"""
nightly-bench - nightly benchmark automation

Runs the external benchmark suite on a schedule and publishes its
Criterion HTML report.

Main components:
- process: subprocess execution with fail-fast semantics
- submodule: benchmark suite checkout via git submodules
- suite: validation of the websites suite directory
- benchmark: invocation of the external benchmark runner
- reporting: stats injection and report index publishing (Jinja2 templates)
- profiling: host detection for run context
- pipeline: the end-to-end nightly flow
"""

__version__ = "0.1.0"
