"""Construction-time error taxonomy for schema definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from payload_schema.results import ValidationResult


class SchemaDefinitionError(ValueError):
    """Raised when a rule, property, schema, or builder is declared incorrectly."""


class EmptySchemaError(SchemaDefinitionError):
    """Raised when a schema is constructed without any properties."""


class UnknownBasicTypeError(SchemaDefinitionError):
    """Raised when a type rule receives a tag outside the basic type universe."""


class BuilderStateError(SchemaDefinitionError):
    """Raised when a builder call is made in a state that does not support it."""


class DuplicateSchemaError(SchemaDefinitionError):
    """Raised when a schema key is registered twice."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"a schema is already registered under {key!r}")


class DefinitionLoadError(SchemaDefinitionError):
    """Raised when a declarative definition document cannot be turned into schemas."""

    def __init__(self, message: str, *, path: str = "", source: str | None = None) -> None:
        self.message = message
        self.path = path
        self.source = source
        location = ": ".join(item for item in (source, path) if item)
        super().__init__(f"{location}: {message}" if location else message)


class PayloadValidationError(ValueError):
    """Raised by the opt-in raising wrapper when a payload fails its schema."""

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        super().__init__(f"invalid payload:\n{result.reason}")


__all__ = [
    "BuilderStateError",
    "DefinitionLoadError",
    "DuplicateSchemaError",
    "EmptySchemaError",
    "PayloadValidationError",
    "SchemaDefinitionError",
    "UnknownBasicTypeError",
]
