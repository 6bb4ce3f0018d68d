"""
Host profiling.

Records the machine a nightly run executed on, so results from different
runners are not compared blindly.

Usage:
    from nightly_bench.profiling import detect_host

    profile = detect_host()
    print(f"{profile.hostname}: {profile.cpu_cores_logical} cores, {profile.ram_gb:.0f}GB RAM")
"""

import logging
import platform
from dataclasses import dataclass
from typing import Any, Dict

import psutil

logger = logging.getLogger(__name__)


@dataclass
class HostProfile:
    """Basic description of the benchmark host."""

    hostname: str = ""
    os_name: str = ""
    os_version: str = ""
    platform: str = ""
    python_version: str = ""

    cpu_cores_physical: int = 0
    cpu_cores_logical: int = 0
    cpu_freq_mhz: float = 0.0

    ram_gb: float = 0.0
    ram_available_gb: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "hostname": self.hostname,
            "os": f"{self.os_name} {self.os_version}".strip(),
            "platform": self.platform,
            "python": self.python_version,
            "cpu": {
                "cores_physical": self.cpu_cores_physical,
                "cores_logical": self.cpu_cores_logical,
                "freq_mhz": self.cpu_freq_mhz,
            },
            "memory": {
                "total_gb": round(self.ram_gb, 2),
                "available_gb": round(self.ram_available_gb, 2),
            },
        }


def detect_host() -> HostProfile:
    """
    Detect the current host.

    Returns:
        HostProfile describing the current machine.
    """
    profile = HostProfile(
        hostname=platform.node(),
        os_name=platform.system(),
        os_version=platform.release(),
        platform=platform.machine(),
        python_version=platform.python_version(),
    )

    profile.cpu_cores_physical = psutil.cpu_count(logical=False) or 0
    profile.cpu_cores_logical = psutil.cpu_count(logical=True) or 0

    try:
        freq = psutil.cpu_freq()
        if freq:
            profile.cpu_freq_mhz = freq.current
    except (OSError, NotImplementedError) as e:
        logger.debug(f"CPU frequency unavailable: {e}")

    mem = psutil.virtual_memory()
    profile.ram_gb = mem.total / (1024**3)
    profile.ram_available_gb = mem.available / (1024**3)

    return profile
