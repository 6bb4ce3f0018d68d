"""
Benchmark Module

Wraps the external benchmark runner.
"""

from .runner import DEFAULT_COMMAND, BenchmarkRun, BenchmarkRunner

__all__ = ["BenchmarkRunner", "BenchmarkRun", "DEFAULT_COMMAND"]
