"""
Logging configuration for nightly-bench.

Provides structured logging with multiple outputs:
- Colored console output (human-readable)
- Rotating file log (human-readable)
- JSON structured log (machine-parseable)
- Error-only log (quick problem identification)
"""

import json
import logging
import logging.handlers
import sys
import time
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

LOGGER_NAME = "nightly_bench"


class StructuredFormatter(logging.Formatter):
    """JSON-structured log formatter for machine parsing."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }
        if hasattr(record, "step"):
            log_data["step"] = record.step
        return json.dumps(log_data)


class ColoredFormatter(logging.Formatter):
    """Colored console formatter for human readability."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    console: bool = True,
    json_logs: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files
        console: Enable console output
        json_logs: Enable JSON structured logs
        max_bytes: Max size per log file
        backup_count: Number of backup files to keep

    Returns:
        Root logger for the project
    """
    log_dir = log_dir or Path.home() / ".nightly_bench" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()

    # Console handler with colors
    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        if sys.stderr.isatty():
            fmt = ColoredFormatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        else:
            fmt = logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        console_handler.setFormatter(fmt)
        root_logger.addHandler(console_handler)

    # Rotating file handler (human-readable)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "nightly_bench.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(lineno)d | %(message)s"
        )
    )
    root_logger.addHandler(file_handler)

    # JSON structured logs
    if json_logs:
        json_handler = logging.handlers.RotatingFileHandler(
            log_dir / "nightly_bench.json.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        json_handler.setLevel(logging.DEBUG)
        json_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(json_handler)

    # Error-only log
    error_handler = logging.handlers.RotatingFileHandler(
        log_dir / "nightly_bench.error.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(module)s:%(lineno)d\n"
            "%(message)s\n---"
        )
    )
    root_logger.addHandler(error_handler)

    return root_logger


class DebugTimer:
    """Context manager for timing a pipeline step."""

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or logging.getLogger(f"{LOGGER_NAME}.timing")
        self.start_time: Optional[float] = None
        self.elapsed: float = 0.0

    def __enter__(self):
        self.start_time = time.time()
        self.logger.debug(f"[{self.name}] started", extra={"step": self.name})
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed = time.time() - self.start_time
        if exc_type is None:
            self.logger.info(
                f"[{self.name}] done in {self.elapsed:.2f}s", extra={"step": self.name}
            )
        else:
            self.logger.error(
                f"[{self.name}] failed after {self.elapsed:.2f}s: {exc}",
                extra={"step": self.name},
            )
        return False
