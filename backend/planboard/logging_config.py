"""
Logging configuration for Planboard.

Every module logs through `get_logger(__name__)`, which places it under the
"planboard" logger. `setup_logging()` installs a single stdout handler on
the root logger: colored lines for development, one JSON object per line
when settings.log_json is set.
"""

import json
import logging
import sys
from typing import Optional

from planboard.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty below WARNING
NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


# ANSI color codes for terminal output
class Colors:
    GREY = "\x1b[38;20m"
    GREEN = "\x1b[32;20m"
    YELLOW = "\x1b[33;20m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"


LEVEL_COLORS = {
    logging.DEBUG: Colors.GREY,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.BOLD_RED,
}


class ColoredFormatter(logging.Formatter):
    """Colors the whole line by log level."""

    def __init__(self):
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self._by_level = {
            level: logging.Formatter(color + LOG_FORMAT + Colors.RESET, datefmt=DATE_FORMAT)
            for level, color in LEVEL_COLORS.items()
        }

    def format(self, record):
        formatter = self._by_level.get(record.levelno)
        if formatter is None:
            return super().format(record)
        return formatter.format(record)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def format(self, record):
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level name. Defaults to settings.log_level, or DEBUG
            when settings.debug is set.
        json_format: Use the JSON formatter. Defaults to settings.log_json.
    """
    settings = get_settings()

    level_name = level or ("DEBUG" if settings.debug else settings.log_level)
    numeric_level = getattr(logging, level_name.upper(), logging.INFO)
    use_json = settings.log_json if json_format is None else json_format

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JsonFormatter() if use_json else ColoredFormatter())

    # Replace whatever was installed before (uvicorn, a previous call)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("planboard").setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module, under the "planboard" namespace.

    Usage:
        logger = get_logger(__name__)
    """
    if not name.startswith("planboard"):
        name = f"planboard.{name}"
    return logging.getLogger(name)
