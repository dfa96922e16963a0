# src/logging/logger.py — v3
"""JSON and text log formatters, and the one-call logging setup.

The service logs under the ``paperchat`` logger tree. uvicorn's own
loggers are routed to the same handlers so a served process writes one
stream in one format.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from paperchat.logging.context import get_context

# Third-party loggers that are chatty at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "google_genai", "openai")
# uvicorn loggers that share the service handlers.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error")


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line: level, logger, message, context, data."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context

        # logger.x(..., extra={"data": {...}})
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception_type"] = type(record.exc_info[1]).__name__
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``time [LEVEL] logger <request> {document} [component] — message``."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            _timestamp(record).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.request_id:
            parts.append(f"<{ctx.request_id}>")
        if ctx.document_id:
            parts.append(f"{{{ctx.document_id}}}")
        if ctx.component:
            parts.append(f"[{ctx.component}]")
        parts.append(f"— {record.getMessage()}")

        line = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """Install handlers on the ``paperchat`` and uvicorn loggers.

    Safe to call more than once; previous handlers are replaced.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" for production, "text" for the CLI.
        log_file: Optional rotating log file, in addition to stdout.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        from paperchat.logging.handlers import create_rotating_handler

        handlers.append(create_rotating_handler(log_file, rotation=rotation, retention=retention))
    for handler in handlers:
        handler.setFormatter(formatter)

    app_logger = logging.getLogger("paperchat")
    app_logger.setLevel(numeric_level)
    app_logger.handlers.clear()
    for handler in handlers:
        app_logger.addHandler(handler)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.setLevel(numeric_level)
        server_logger.propagate = False
        for handler in handlers:
            server_logger.addHandler(handler)
    # Access lines only at DEBUG.
    logging.getLogger("uvicorn.access").setLevel(
        logging.INFO if numeric_level <= logging.DEBUG else logging.WARNING
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
