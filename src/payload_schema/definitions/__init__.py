"""Declarative schema definitions (YAML / TOML / JSON)."""

from payload_schema.definitions.loader import (
    DEFINITIONS_VERSION,
    collection_from_mapping,
    load_definitions,
    load_definitions_text,
    parse_document,
    schema_from_properties,
)

__all__ = [
    "DEFINITIONS_VERSION",
    "collection_from_mapping",
    "load_definitions",
    "load_definitions_text",
    "parse_document",
    "schema_from_properties",
]
