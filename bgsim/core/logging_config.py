"""Logging setup for the simulation API.

Console output is human-readable; the optional log files hold one JSON
object per line. Simulation activity (translation, the gate and simulator
runs) is also copied to its own file so long sessions can be inspected
without the request noise.
"""

import json
import logging
import logging.handlers
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

LOG_DIR = Path(__file__).resolve().parents[2] / "logs"

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
CONSOLE_DATE_FORMAT = "%H:%M:%S"

# Loggers whose records also go to simulation.log
SIMULATION_LOGGER = "bgsim.services"

# uvicorn's own access log duplicates RequestLoggingMiddleware
QUIET_LOGGERS = ("uvicorn.access",)


class JSONFormatter(logging.Formatter):
    """Formats records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        extra = getattr(record, "extra_data", None)
        if extra:
            entry["extra"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Merges bound context into each record's ``extra_data``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict]:
        extra = dict(kwargs.get("extra") or {})
        extra["extra_data"] = {**self.extra, **extra.get("extra_data", {})}
        kwargs["extra"] = extra
        return msg, kwargs


def _file_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(
    log_level: str = "INFO",
    enable_console: bool = True,
    enable_file: bool = True,
    log_dir: Path | None = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Configure the root logger.

    Args:
        log_level: Root level name (DEBUG, INFO, WARNING, ERROR).
        enable_console: Write to stdout.
        enable_file: Write ``bgsim.log``, ``errors.log`` and ``simulation.log``.
        log_dir: Directory for the files; ``logs/`` next to the package by default.
        max_bytes: Rotation size per file.
        backup_count: Rotated files kept per log.
    """
    root = logging.getLogger()
    root.setLevel(logging.getLevelName(log_level.upper()))
    root.handlers.clear()

    simulation_logger = logging.getLogger(SIMULATION_LOGGER)
    for handler in list(simulation_logger.handlers):
        simulation_logger.removeHandler(handler)
        handler.close()

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT))
        root.addHandler(console)

    if not enable_file:
        return

    directory = log_dir or LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)

    root.addHandler(_file_handler(directory / "bgsim.log", logging.DEBUG, max_bytes, backup_count))
    root.addHandler(_file_handler(directory / "errors.log", logging.ERROR, max_bytes, backup_count))
    simulation_logger.addHandler(
        _file_handler(directory / "simulation.log", logging.DEBUG, max_bytes, backup_count)
    )


def get_logger(name: str, **context: Any) -> ContextLogger:
    """Get a logger that attaches ``context`` to every record."""
    return ContextLogger(logging.getLogger(name), context)
