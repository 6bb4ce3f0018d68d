"""
Nightly Pipeline Module

Configuration and orchestration of a full nightly benchmark run.
"""

from .config import NightlyConfig
from .runner import NightlyPipeline, NightlyResult, write_summary

__all__ = ["NightlyConfig", "NightlyPipeline", "NightlyResult", "write_summary"]
