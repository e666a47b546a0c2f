"""Observability helpers: structlog loggers and stdlib sink configuration."""

from payload_schema.observability.logging import (
    LOG_FORMATS,
    PACKAGE_LOGGER_NAME,
    JsonLineFormatter,
    TextLineFormatter,
    configure_logging,
    get_logger,
    parse_log_level,
)

__all__ = [
    "LOG_FORMATS",
    "PACKAGE_LOGGER_NAME",
    "JsonLineFormatter",
    "TextLineFormatter",
    "configure_logging",
    "get_logger",
    "parse_log_level",
]
