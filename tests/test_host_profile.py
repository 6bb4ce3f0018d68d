"""Tests for host profiling."""

from unittest.mock import MagicMock, patch

from nightly_bench.profiling import HostProfile, detect_host


class TestDetectHost:
    def test_detects_current_host(self) -> None:
        profile = detect_host()
        assert profile.cpu_cores_logical >= 1
        assert profile.ram_gb > 0
        assert profile.os_name

    def test_cpu_freq_unavailable(self) -> None:
        with patch("nightly_bench.profiling.host.psutil.cpu_freq", side_effect=NotImplementedError):
            profile = detect_host()
        assert profile.cpu_freq_mhz == 0.0

    def test_uses_psutil_memory(self) -> None:
        mem = MagicMock(total=16 * 1024**3, available=8 * 1024**3)
        with patch("nightly_bench.profiling.host.psutil.virtual_memory", return_value=mem):
            profile = detect_host()
        assert profile.ram_gb == 16.0
        assert profile.ram_available_gb == 8.0


class TestHostProfile:
    def test_to_dict(self) -> None:
        profile = HostProfile(
            hostname="bench-01",
            os_name="Linux",
            os_version="6.8.0",
            platform="x86_64",
            python_version="3.12.1",
            cpu_cores_physical=8,
            cpu_cores_logical=16,
            ram_gb=31.234,
            ram_available_gb=20.5,
        )
        data = profile.to_dict()
        assert data["hostname"] == "bench-01"
        assert data["os"] == "Linux 6.8.0"
        assert data["cpu"]["cores_logical"] == 16
        assert data["memory"]["total_gb"] == 31.23
