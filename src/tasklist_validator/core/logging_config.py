"""Logging configuration with run context injection.

Every module logs through ``logging.getLogger(__name__)``. This module
configures the ``tasklist_validator`` root logger and tags each record with
the current run ID so log lines from one validation run can be grouped.

Usage:
    from tasklist_validator.core.logging_config import configure_logging, run_context

    configure_logging(level="DEBUG", format="structured")
    with run_context():
        validate_file("TaskList.md")
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, TextIO, Union

__all__ = [
    "ContextFilter",
    "HumanReadableFormatter",
    "StructuredFormatter",
    "configure_logging",
    "generate_run_id",
    "get_run_id",
    "run_context",
]

ROOT_LOGGER = "tasklist_validator"

_run_id: ContextVar[str] = ContextVar("run_id", default="")


def generate_run_id() -> str:
    return f"run_{uuid.uuid4().hex[:12]}"


def get_run_id() -> str:
    """Return the current run ID, or "" outside a run."""
    return _run_id.get()


@contextmanager
def run_context(run_id: Optional[str] = None) -> Iterator[str]:
    """Set a run ID for the duration of the block."""
    token = _run_id.set(run_id or generate_run_id())
    try:
        yield _run_id.get()
    finally:
        _run_id.reset(token)


class ContextFilter(logging.Filter):
    """Logging filter that adds ``run_id`` to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = get_run_id() or "-"
        return True


class StructuredFormatter(logging.Formatter):
    """JSON-structured log formatter.

    Produces newline-delimited JSON, one object per record:
        {"timestamp":"2026-01-15T10:30:45.123+00:00","level":"INFO",
         "logger":"tasklist_validator.core.validation",
         "message":"Validated TaskList.md: 4 task(s), 0 error(s), 0 warning(s)",
         "run_id":"run_a1b2c3d4e5f6"}
    """

    _standard_attrs = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "run_id",
    }

    def __init__(self, *, include_extra: bool = True, include_location: bool = False):
        super().__init__()
        self.include_extra = include_extra
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
        }

        if self.include_location:
            log_entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra = {}
            for key, value in record.__dict__.items():
                if key in self._standard_attrs:
                    continue
                try:
                    json.dumps(value)
                    extra[key] = value
                except (TypeError, ValueError):
                    extra[key] = str(value)
            if extra:
                log_entry["extra"] = extra

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Formats records as ``[LEVEL] [run_id] logger: message``."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [f"[{record.levelname}]"]

        run_id = getattr(record, "run_id", "-")
        if run_id and run_id != "-":
            parts.append(f"[{run_id}]")

        logger_name = record.name
        if logger_name.startswith(ROOT_LOGGER + "."):
            logger_name = logger_name[len(ROOT_LOGGER) + 1 :]
        parts.append(f"{logger_name}:")
        parts.append(record.getMessage())

        result = " ".join(parts)
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


def configure_logging(
    *,
    level: Union[int, str] = logging.WARNING,
    format: str = "structured",  # "structured" or "human"
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the root tasklist_validator logger.

    Args:
        level: Log level name or number
        format: "structured" for JSON lines, "human" for readable lines
        stream: Output stream (default: stderr)

    Returns:
        The configured package logger
    """
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    if format == "structured":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter())
    handler.addFilter(ContextFilter())

    logger.addHandler(handler)
    return logger
