"""Logging configuration for the static server.

Records go to a single handler on the ``static_server`` logger: stdout by
default, or a size-rotated file. ``json`` output is one sorted object per line,
``text`` output is the classic single-line format with the correlation ID.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from static_server.domain.correlation_id import (
    ROOT_LOGGER_NAME,
    CorrelationLoggerAdapter,
)

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROTATE_AT_BYTES = 10 * 1024 * 1024
ROTATED_FILES_KEPT = 5

# ``extra`` attributes copied into JSON records when present.
EXTRA_KEYS = (
    "event",
    "client",
    "method",
    "route",
    "path",
    "status_code",
    "requests_in_window",
    "window_seconds",
    "bytes",
    "error_type",
    "error",
    "host",
    "port",
    "directory",
    "favicon_url",
    "log_destination",
    "log_level",
    "socket_timeout",
    "shutdown_grace_seconds",
    "grace_seconds",
    "remaining_workers",
    "signal",
)


class CorrelationIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Give records logged outside an adapter a ``-`` correlation ID."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = getattr(record, "correlation_id", "-")
        return True


class JsonFormatter(logging.Formatter):
    """Serialize a record and its known extras as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "correlation_id": getattr(record, "correlation_id", "-"),
            "component": getattr(record, "component", "unknown"),
            "message": record.getMessage(),
        }
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                document[key] = getattr(record, key)

        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, sort_keys=True, default=str)


FORMATTERS = {
    "json": lambda: JsonFormatter(datefmt=DATE_FORMAT),
    "text": lambda: logging.Formatter(TEXT_FORMAT, DATE_FORMAT),
}


def _level_number(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def _open_handler(destination: Optional[str]) -> logging.Handler:
    if not destination or destination.lower() == "stdout":
        return logging.StreamHandler(sys.stdout)
    target = Path(destination)
    target.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        target, maxBytes=ROTATE_AT_BYTES, backupCount=ROTATED_FILES_KEPT
    )


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, log_format: str = "json"
) -> CorrelationLoggerAdapter:
    """Replace any handlers on the project logger and return an adapter for it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    numeric_level = _level_number(level)
    logger.setLevel(numeric_level)
    logger.propagate = False

    while logger.handlers:
        old_handler = logger.handlers.pop()
        old_handler.close()

    handler = _open_handler(destination)
    handler.setLevel(numeric_level)
    handler.setFormatter(FORMATTERS.get(log_format.lower(), FORMATTERS["json"])())
    handler.addFilter(CorrelationIdFilter())
    logger.addHandler(handler)
    return CorrelationLoggerAdapter(logger, {})
