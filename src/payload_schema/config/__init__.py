"""
payload-schema config package public API.

Purpose
- Export runtime settings resolution and its error type.
"""

from payload_schema.config.settings import (
    DEFINITIONS_ENV,
    LOG_FORMAT_ENV,
    LOG_LEVEL_ENV,
    ConfigError,
    Settings,
    load_settings,
)

__all__ = [
    "ConfigError",
    "DEFINITIONS_ENV",
    "LOG_FORMAT_ENV",
    "LOG_LEVEL_ENV",
    "Settings",
    "load_settings",
]
