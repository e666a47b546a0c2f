"""Named registry of schemas used to classify objects by first match."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from payload_schema.errors import DuplicateSchemaError
from payload_schema.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from payload_schema.schema import Schema


class SchemaCollection:
    """Insertion-ordered ``name -> Schema`` mapping.

    Classification scans schemas in registration order and returns the first
    match, so for objects several schemas accept, the earliest registration
    wins regardless of key ordering.
    """

    def __init__(self, *, logger: Any | None = None) -> None:
        self._options: dict[str, Schema] = {}
        self._logger = logger if logger is not None else get_logger(__name__)

    def has_schema(self, key: str) -> bool:
        return key in self._options

    def get_schema(self, key: str) -> Schema | None:
        return self._options.get(key)

    def add_schema(self, key: str, schema: Schema) -> None:
        """Register ``schema`` under ``key``; raise if the key is taken."""

        if key in self._options:
            raise DuplicateSchemaError(key)
        self._options[key] = schema
        self._logger.debug("schema_collection_added", schema_key=key)

    def replace_schema(self, key: str, schema: Schema) -> None:
        """Register ``schema`` under ``key``, replacing any existing entry."""

        replaced = key in self._options
        self._options[key] = schema
        self._logger.debug("schema_collection_replaced", schema_key=key, replaced=replaced)

    def remove_schema(self, key: str) -> bool:
        removed = self._options.pop(key, None) is not None
        self._logger.debug("schema_collection_removed", schema_key=key, removed=removed)
        return removed

    remove = remove_schema

    def get_schema_keys(self) -> list[str]:
        return list(self._options)

    def validate_object_schema(self, obj: object) -> tuple[bool, str | None]:
        """Return ``(True, key)`` for the first schema accepting ``obj``, else ``(False, None)``."""

        for key, schema in self._options.items():
            if schema.is_valid(obj):
                self._logger.debug("schema_collection_match", schema_key=key)
                return True, key

        self._logger.debug("schema_collection_no_match", candidates=len(self._options))
        return False, None

    def __contains__(self, key: object) -> bool:
        return key in self._options

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._options))

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"SchemaCollection(keys={self.get_schema_keys()!r})"


__all__ = ["SchemaCollection"]
