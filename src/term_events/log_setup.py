"""Logging setup for the event aggregator and its demo front-end."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any, TextIO


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per log record.

    The caller and both producer threads log through the same logger, so each
    line names its thread, and `ts` is when the record was created rather
    than when a handler got around to writing it.
    """

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        # ASCII output escapes raw control bytes from decoded input, so a
        # logged escape sequence never reaches the terminal unescaped.
        return json.dumps(event, default=str, ensure_ascii=True)


def setup_logger(
    name: str = "term_events",
    level: int | str = logging.INFO,
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Create and configure a process-wide logger writing to `stream` (stderr)."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
