"""
payload-schema — runtime settings.

Purpose
- Resolve CLI/runtime settings from ``PAYLOAD_SCHEMA_`` environment variables
  with explicit overrides taking precedence.

Functional requirements
- Precedence: explicit overrides > environment > built-in defaults.
- Fail fast with the offending variable name on invalid values.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Final

from payload_schema.constants import ENV_PREFIX
from payload_schema.observability.logging import LOG_FORMATS, parse_log_level

LOG_LEVEL_ENV: Final[str] = f"{ENV_PREFIX}LOG_LEVEL"
LOG_FORMAT_ENV: Final[str] = f"{ENV_PREFIX}LOG_FORMAT"
DEFINITIONS_ENV: Final[str] = f"{ENV_PREFIX}DEFINITIONS"

DEFAULT_LOG_LEVEL: Final[str] = "WARNING"
DEFAULT_LOG_FORMAT: Final[str] = "text"


class ConfigError(ValueError):
    """Raised when settings cannot be resolved from the environment or overrides."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Effective runtime settings for the command-line tooling."""

    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    definitions_path: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "log_level", _normalize_log_level(self.log_level, "log_level"))
        object.__setattr__(
            self, "log_format", _normalize_log_format(self.log_format, "log_format")
        )
        if self.definitions_path is not None and not isinstance(self.definitions_path, Path):
            object.__setattr__(self, "definitions_path", Path(self.definitions_path))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        source = os.environ if environ is None else environ

        raw_level = source.get(LOG_LEVEL_ENV, "").strip() or DEFAULT_LOG_LEVEL
        raw_format = source.get(LOG_FORMAT_ENV, "").strip() or DEFAULT_LOG_FORMAT
        raw_definitions = source.get(DEFINITIONS_ENV, "").strip()

        return cls(
            log_level=_normalize_log_level(raw_level, LOG_LEVEL_ENV),
            log_format=_normalize_log_format(raw_format, LOG_FORMAT_ENV),
            definitions_path=Path(raw_definitions) if raw_definitions else None,
        )

    def with_overrides(
        self,
        *,
        log_level: str | None = None,
        log_format: str | None = None,
        definitions_path: str | Path | None = None,
    ) -> Settings:
        """Return a copy with every non-``None`` override applied."""

        return replace(
            self,
            log_level=self.log_level if log_level is None else log_level,
            log_format=self.log_format if log_format is None else log_format,
            definitions_path=(
                self.definitions_path if definitions_path is None else Path(definitions_path)
            ),
        )


def load_settings(
    environ: Mapping[str, str] | None = None,
    **overrides: str | Path | None,
) -> Settings:
    """Resolve settings with precedence: overrides > environment > defaults."""

    unknown = sorted(set(overrides) - {"log_level", "log_format", "definitions_path"})
    if unknown:
        raise ConfigError(f"unknown settings overrides: {unknown}")
    return Settings.from_env(environ).with_overrides(**overrides)  # type: ignore[arg-type]


def _normalize_log_level(value: object, source: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{source} must be a non-empty log level name")
    name = value.strip().upper()
    try:
        parse_log_level(name)
    except ValueError as exc:
        raise ConfigError(f"{source} has unknown log level {value!r}") from exc
    return name


def _normalize_log_format(value: object, source: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{source} must be one of {LOG_FORMATS}")
    name = value.strip().lower()
    if name not in LOG_FORMATS:
        raise ConfigError(f"{source} must be one of {LOG_FORMATS}, got {value!r}")
    return name
