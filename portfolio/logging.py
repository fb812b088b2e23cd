"""
Logging configuration.

The root logger gets two handlers:

- console: human-readable lines in development, JSON lines when
  ``LOG_CONSOLE_FORMAT=json`` (the staging/production default)
- error file: JSON lines for ERROR and above, written to ``LOG_FILE_PATH``

Log lines carry the HTTP correlation id and whatever the current task put
into the log context with ``set_log_context`` (the WebSocket endpoint sets
``connection_id``).
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from typing import Any

from portfolio.constants import MAX_LOG_SIZE_BYTES
from portfolio.middlewares.correlation_id import get_correlation_id
from portfolio.settings import app_settings

# Fields attached to every log line of the current request or connection
log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# Attributes every LogRecord has; anything else on a record came from extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "correlation_id"}

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def set_log_context(**kwargs: Any) -> None:
    """
    Add fields to the log context of the current task.

    Example:
        >>> set_log_context(connection_id="a1b2")
        >>> logger.info("Dispatching message")  # includes connection_id
    """
    log_context.set({**log_context.get(), **kwargs})


def get_log_context() -> dict[str, Any]:
    return log_context.get()


def clear_log_context() -> None:
    log_context.set({})


def _display_id() -> str:
    # WebSocket tasks have no correlation id, use the connection id instead
    return (
        get_correlation_id()
        or str(get_log_context().get("connection_id", ""))[:8]
        or "-"
    )


class StructuredJSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Contains the level, logger, message and source location, the
    correlation id, the log context, ``extra`` fields and the formatted
    exception if there is one. Messages that would make the line exceed
    ``MAX_LOG_SIZE_BYTES`` are truncated.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENV.value,
        }

        if request_id := get_correlation_id():
            entry["request_id"] = request_id
        entry.update(get_log_context())
        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        line = json.dumps(entry, default=str)
        if len(line) <= MAX_LOG_SIZE_BYTES:
            return line

        overflow = len(line) - MAX_LOG_SIZE_BYTES
        keep = max(len(entry["message"]) - overflow - 100, 0)
        entry["message"] = entry["message"][:keep] + "... [TRUNCATED]"
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter for development.

    INFO lines are short; other levels also show where the line was logged.
    """

    SHORT_FMT = "%(asctime)s - [%(correlation_id)s] %(levelname)s: %(message)s"
    LONG_FMT = (
        "%(asctime)s - [%(correlation_id)s] %(levelname)s: "
        "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )

    def __init__(self) -> None:
        super().__init__(self.SHORT_FMT, datefmt=DATE_FORMAT)
        self._long = logging.Formatter(self.LONG_FMT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        record.correlation_id = _display_id()
        if record.levelno == logging.INFO:
            return super().format(record)
        return self._long.format(record)


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if app_settings.LOG_CONSOLE_FORMAT == "json":
        handler.setFormatter(StructuredJSONFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter())
    return handler


def _error_file_handler() -> logging.Handler:
    directory = os.path.dirname(app_settings.LOG_FILE_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)
    handler = logging.FileHandler(app_settings.LOG_FILE_PATH)
    handler.setLevel(logging.ERROR)
    handler.setFormatter(StructuredJSONFormatter())
    return handler


def setup_logging() -> logging.Logger:
    """
    Configure the root logger once per process.

    Returns:
        The root logger.
    """
    root = logging.getLogger()
    root.setLevel(app_settings.LOG_LEVEL.upper())

    # Replace handlers so re-imports do not duplicate output
    root.handlers.clear()
    root.addHandler(_console_handler())

    try:
        root.addHandler(_error_file_handler())
    except OSError as e:
        root.warning(f"Error log file disabled: {e}")

    return root


logger = setup_logging()
