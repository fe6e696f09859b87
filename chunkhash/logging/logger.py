# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for chunkhash.

Every log entry is a single JSON line with a timestamp, level, source module
and message. Human-only text logs and print() are both avoided: the output
log is the only plain-text artifact this tool produces.

How this works:
  - Python's standard `logging` module does the routing. JsonFormatter turns
    each record into one JSON object.
  - `configure_logging` attaches handlers to the top-level "chunkhash" logger
    once per process (the CLI calls it after parsing --log-level).
  - Modules call `get_logger(__name__)` and get a child logger that propagates
    up to the configured parent.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "chunkhash.run.controller", "msg": "chunk hashed", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

ROOT_LOGGER_NAME = "chunkhash"


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each entry carries four fixed fields:
      ts     : ISO 8601 UTC timestamp
      level  : log level name
      module : the logger name (usually the Python module path)
      msg    : the formatted message string

    Anything passed through `extra=` is merged in as additional fields, which
    is how the run loop attaches offsets, lengths and digests.
    """

    _STANDARD_ATTRS = frozenset({
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    })

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the top-level chunkhash logger.

    Calling this again replaces the handlers instead of stacking them, so the
    CLI and tests can reconfigure freely.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  the stream and the file.
        stream: Where console output goes. Defaults to stdout.

    Returns:
        The configured "chunkhash" logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler(stream=stream if stream is not None else sys.stdout)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Don't propagate to the root logger, we handle all output ourselves.
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger for a chunkhash module.

    Names outside the "chunkhash" namespace are nested under it so their
    records still reach the configured handlers.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
