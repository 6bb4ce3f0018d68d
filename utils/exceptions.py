"""
Custom exception hierarchy for nightly-bench.

All project-specific exceptions inherit from NightlyBenchError.
"""


class NightlyBenchError(Exception):
    """Base exception for nightly-bench."""

    pass


class ConfigError(NightlyBenchError):
    """Invalid or missing configuration."""

    pass


class CommandError(NightlyBenchError):
    """An external command could not be started or exited non-zero."""

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class SubmoduleError(NightlyBenchError):
    """Error while acquiring the benchmark suite submodule."""

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.exit_code = exit_code


class SuiteError(NightlyBenchError):
    """The benchmark suite checkout is missing or malformed."""

    pass


class BenchmarkError(NightlyBenchError):
    """The external benchmark runner failed."""

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.exit_code = exit_code


class ReportingError(NightlyBenchError):
    """Error during report post-processing or publishing."""

    pass
