"""
payload-schema — composable object-shape validation.

Purpose
- Package root. Re-exports the validation engine: value rules, schema
  properties, schemas, the named schema collection, and their builders.

Import boundaries
- No side effects at import time (no config loading, no logging handlers).
- CLI, config, and definition-loading modules are imported on demand.
"""

from __future__ import annotations

from payload_schema.builders import BuilderState, SchemaBuilder, SchemaCollectionBuilder
from payload_schema.collection import SchemaCollection
from payload_schema.errors import (
    BuilderStateError,
    DefinitionLoadError,
    DuplicateSchemaError,
    EmptySchemaError,
    PayloadValidationError,
    SchemaDefinitionError,
    UnknownBasicTypeError,
)
from payload_schema.payloads import assert_valid, classify_payload, validate_payload
from payload_schema.properties import ExcludedProperty, Property, PropertyKind, SchemaProperty
from payload_schema.results import ValidationResult
from payload_schema.rules import (
    ArrayRule,
    InverseRule,
    NullRule,
    SubSchemaRule,
    TypeRule,
    ValueRule,
)
from payload_schema.schema import Schema
from payload_schema.values import UNDEFINED, BasicType

__version__ = "0.1.0"

__all__ = [
    "UNDEFINED",
    "ArrayRule",
    "BasicType",
    "BuilderState",
    "BuilderStateError",
    "DefinitionLoadError",
    "DuplicateSchemaError",
    "EmptySchemaError",
    "ExcludedProperty",
    "InverseRule",
    "NullRule",
    "PayloadValidationError",
    "Property",
    "PropertyKind",
    "Schema",
    "SchemaBuilder",
    "SchemaCollection",
    "SchemaCollectionBuilder",
    "SchemaDefinitionError",
    "SchemaProperty",
    "SubSchemaRule",
    "TypeRule",
    "UnknownBasicTypeError",
    "ValidationResult",
    "ValueRule",
    "__version__",
    "assert_valid",
    "classify_payload",
    "validate_payload",
]
