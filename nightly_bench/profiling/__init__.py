"""
Host Profiling Module

Describes the machine a benchmark run executes on.
"""

from .host import HostProfile, detect_host

__all__ = ["detect_host", "HostProfile"]
