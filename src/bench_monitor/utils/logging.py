"""Logging configuration for the benchmark monitor."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

PLAIN_FORMAT = "%(asctime)s - %(name)s - [%(threadName)s] - %(levelname)s - %(message)s"

# Chatty third-party loggers capped at WARNING
QUIET_LOGGERS = ("urllib3", "docker")


class JsonFormatter(logging.Formatter):
    """One JSON object per log record, for programmatic parsing."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    rich_console: bool = True,
    json_format: bool = False,
    quiet_loggers: tuple[str, ...] = QUIET_LOGGERS,
) -> None:
    """Configure logging for the monitor.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write logs to
        rich_console: Use rich console handler for pretty output
        json_format: Use structured JSON logging format (overrides rich_console)
        quiet_loggers: Third-party loggers kept at WARNING, since Docker SDK
            request logging drowns out tick messages at DEBUG

    Raises:
        ValueError: If level is not a logging level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handlers: list[logging.Handler] = []

    if json_format:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        handlers.append(handler)
    elif rich_console:
        handlers.append(
            RichHandler(
                level=numeric_level,
                rich_tracebacks=True,
                markup=False,
                show_time=True,
                show_path=False,
            )
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handlers.append(handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
