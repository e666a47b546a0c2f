"""Stable constants shared across the schema engine."""

from __future__ import annotations

from typing import Final

# Largest integer a JSON number round-trips without precision loss.
MAX_SAFE_INTEGER: Final[int] = 2**53 - 1

# Tag reported for ``None``; not a basic type, so type rules never accept it.
NULL_TYPE_TAG: Final[str] = "null"

# Base complexity scores used to order alternative checks (cheapest first).
NULL_RULE_COMPLEXITY: Final[int] = 1
TYPE_RULE_COMPLEXITY: Final[int] = 2
ARRAY_RULE_BASE_COMPLEXITY: Final[int] = 2
INVERSE_RULE_OVERHEAD: Final[int] = 1
PROPERTY_BASE_COMPLEXITY: Final[int] = 1
EXCLUDED_PROPERTY_COMPLEXITY: Final[int] = 1
SCHEMA_BASE_COMPLEXITY: Final[int] = 1

# Environment variable prefix for runtime settings.
ENV_PREFIX: Final[str] = "PAYLOAD_SCHEMA_"

__all__ = [
    "ARRAY_RULE_BASE_COMPLEXITY",
    "ENV_PREFIX",
    "EXCLUDED_PROPERTY_COMPLEXITY",
    "INVERSE_RULE_OVERHEAD",
    "MAX_SAFE_INTEGER",
    "NULL_RULE_COMPLEXITY",
    "NULL_TYPE_TAG",
    "PROPERTY_BASE_COMPLEXITY",
    "SCHEMA_BASE_COMPLEXITY",
    "TYPE_RULE_COMPLEXITY",
]
