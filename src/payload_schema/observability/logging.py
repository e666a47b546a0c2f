"""Structured logging: structlog loggers rendered through stdlib ``logging`` sinks."""

from __future__ import annotations

import json
import logging
import math
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import IO, Any, Final

import structlog

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

PACKAGE_LOGGER_NAME: Final[str] = "payload_schema"
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

_HANDLER_MARKER: Final[str] = "_payload_schema_handler"

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)


def get_logger(name: str = PACKAGE_LOGGER_NAME) -> Any:
    """Return a structlog logger that forwards events to the stdlib logger ``name``.

    Events become stdlib records whose message is the event name and whose
    keyword fields travel as record extras, so nothing is emitted unless the
    host application (or :func:`configure_logging`) attaches handlers.
    """

    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(
    level: int | str = "WARNING",
    log_format: str = "text",
    *,
    stream: IO[str] | None = None,
    logger_name: str = PACKAGE_LOGGER_NAME,
) -> logging.Logger:
    """Attach a single stream handler to the package logger and return it.

    Re-running replaces the handler installed by a previous call; handlers
    added by the host application are left alone.
    """

    resolved_level = parse_log_level(level)
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")

    formatter: logging.Formatter = (
        JsonLineFormatter() if log_format == "json" else TextLineFormatter()
    )
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved_level)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_MARKER, True)

    logger = logging.getLogger(logger_name)
    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            logger.removeHandler(existing)
            existing.close()

    logger.setLevel(resolved_level)
    logger.addHandler(handler)
    return logger


def parse_log_level(level: int | str) -> int:
    if isinstance(level, bool):
        raise ValueError("log level must be a level name or integer")
    if isinstance(level, int):
        return level
    candidate = logging.getLevelName(level.strip().upper())
    if not isinstance(candidate, int):
        raise ValueError(f"unknown log level {level!r}")
    return candidate


class JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = _normalize_json_value(extras)

        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class TextLineFormatter(logging.Formatter):
    """Human-oriented ``LEVEL logger: event key=value`` lines."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [f"{record.levelname} {record.name}: {record.getMessage()}"]
        for key, value in sorted(_extract_extra_fields(record).items()):
            rendered = json.dumps(_normalize_json_value(value), ensure_ascii=False)
            parts.append(f"{key}={rendered}")
        line = " ".join(parts)
        if record.exc_info is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _iso8601z_from_epoch(created: float) -> str:
    timestamp = datetime.fromtimestamp(created, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_LOG_RECORD_FIELDS and not key.startswith("_")
    }


def _normalize_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value, key=repr) if isinstance(value, (set, frozenset)) else value
        return [_normalize_json_value(item) for item in items]
    return repr(value)


__all__ = [
    "LOG_FORMATS",
    "PACKAGE_LOGGER_NAME",
    "JsonLineFormatter",
    "TextLineFormatter",
    "configure_logging",
    "get_logger",
    "parse_log_level",
]
