"""Fluent builders for :class:`Schema` and :class:`SchemaCollection`.

Both builders stage at most one open property (and, for the collection
builder, one open schema) and materialize immutable objects when the next
declaration starts or :meth:`build` runs. State transitions:

``SchemaBuilder``::

    EMPTY --add_property--> PROPERTY_OPEN --add_property--> PROPERTY_OPEN
    EMPTY | PROPERTY_OPEN --build--> DONE

``SchemaCollectionBuilder``::

    NO_SCHEMA --add_schema--> SCHEMA_OPEN --add_property--> PROPERTY_OPEN
    SCHEMA_OPEN | PROPERTY_OPEN --add_schema--> SCHEMA_OPEN
    any (except DONE) --build--> DONE

Every misuse fails fast with :class:`BuilderStateError`; ``DONE`` is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Self

from payload_schema.collection import SchemaCollection
from payload_schema.errors import BuilderStateError, DuplicateSchemaError
from payload_schema.observability.logging import get_logger
from payload_schema.properties import ExcludedProperty, Property, PropertyKind
from payload_schema.rules import InverseRule, sort_by_complexity
from payload_schema.schema import Schema
from payload_schema.values import UNDEFINED

if TYPE_CHECKING:
    from payload_schema.properties import SchemaProperty
    from payload_schema.rules import ValueRule


class BuilderState(StrEnum):
    NO_SCHEMA = "no_schema"
    EMPTY = "empty"
    SCHEMA_OPEN = "schema_open"
    PROPERTY_OPEN = "property_open"
    DONE = "done"


@dataclass(slots=True)
class _PendingProperty:
    name: str
    kind: PropertyKind
    optional: bool = False
    default: object = UNDEFINED
    rules: list[ValueRule] = field(default_factory=list)

    def materialize(self) -> SchemaProperty:
        if self.kind is PropertyKind.EXCLUDED:
            return ExcludedProperty(self.name)
        return Property(
            self.name,
            rules=tuple(self.rules),
            optional=self.optional,
            default=self.default,
        )


class _PropertyStager:
    """Shared staging for the property-level builder calls."""

    _idle_state: BuilderState

    def __init__(self, *, logger: Any | None = None) -> None:
        self._state = self._idle_state
        self._pending: _PendingProperty | None = None
        self._injected_logger = logger
        self._logger = logger if logger is not None else get_logger(__name__)

    @property
    def state(self) -> BuilderState:
        return self._state

    def is_optional(self, is_optional: bool = True) -> Self:
        pending = self._require_property(f"set optional state to {is_optional!r}")
        pending.optional = bool(is_optional)
        return self

    def with_default(self, default_value: object) -> Self:
        pending = self._require_property(f"set default value {default_value!r}")
        pending.default = default_value
        return self

    def add_value_validation(self, rule: ValueRule) -> Self:
        if rule is None:
            raise BuilderStateError("unable to add property validation rule: rule is None")
        # Validates the rule type before it is staged.
        sort_by_complexity((rule,))
        pending = self._require_property(f"add property validation {rule.display_string!r}")
        pending.rules.append(rule)
        return self

    def add_inverse_validation(self, rule: ValueRule) -> Self:
        """Shorthand for ``add_value_validation(InverseRule(rule))``."""

        return self.add_value_validation(InverseRule(rule))

    def _scope(self) -> str:
        return "the schema"

    def _require_open(self, action: str) -> None:
        if self._state is BuilderState.DONE:
            raise BuilderStateError(f"unable to {action}: build() has already been called")

    def _require_property(self, action: str) -> _PendingProperty:
        self._require_open(action)
        pending = self._pending
        if pending is None:
            raise BuilderStateError(f"unable to {action} for {self._scope()}: no active property")
        if pending.kind is not PropertyKind.PROPERTY:
            raise BuilderStateError(
                f"unable to {action} for {pending.name!r}: "
                f"unsupported for property kind {pending.kind.value!r}"
            )
        return pending

    def _open_property(self, name: str, kind: PropertyKind | str) -> None:
        if not isinstance(name, str) or not name:
            raise BuilderStateError(f"unable to add a property to {self._scope()}: name is empty")
        try:
            resolved_kind = PropertyKind(kind)
        except ValueError as exc:
            raise BuilderStateError(
                f"unable to add property {name!r}: unknown property kind {kind!r}"
            ) from exc
        self._pending = _PendingProperty(name=name, kind=resolved_kind)
        self._state = BuilderState.PROPERTY_OPEN

    def _take_pending(self) -> SchemaProperty | None:
        pending = self._pending
        if pending is None:
            return None
        self._pending = None
        return pending.materialize()


class SchemaBuilder(_PropertyStager):
    """Assemble a single :class:`Schema` from a chain of declarations.

    Example::

        schema = (
            SchemaBuilder()
            .add_property("name").add_value_validation(TypeRule("string"))
            .add_property("age").is_optional(True).add_value_validation(TypeRule("number"))
            .build()
        )
    """

    _idle_state = BuilderState.EMPTY

    def __init__(self, *, logger: Any | None = None) -> None:
        super().__init__(logger=logger)
        self._properties: list[SchemaProperty] = []

    def add_property(
        self, name: str, kind: PropertyKind | str = PropertyKind.PROPERTY
    ) -> SchemaBuilder:
        self._require_open(f"add property {name!r}")
        self._flush_property()
        self._open_property(name, kind)
        return self

    def build(self) -> Schema:
        self._require_open("build the schema")
        self._flush_property()
        schema = Schema(self._properties)
        self._state = BuilderState.DONE
        self._logger.debug(
            "schema_built",
            properties=list(schema.property_names),
            complexity=schema.complexity,
        )
        return schema

    def _flush_property(self) -> None:
        completed = self._take_pending()
        if completed is not None:
            self._properties.append(completed)
        self._state = BuilderState.EMPTY


class SchemaCollectionBuilder(_PropertyStager):
    """Assemble a :class:`SchemaCollection` of named schemas in declaration order."""

    _idle_state = BuilderState.NO_SCHEMA

    def __init__(self, *, logger: Any | None = None) -> None:
        super().__init__(logger=logger)
        self._finished: dict[str, Schema] = {}
        self._schema_name: str | None = None
        self._schema_properties: list[SchemaProperty] = []

    def add_schema(self, name: str) -> SchemaCollectionBuilder:
        self._require_open(f"add schema {name!r}")
        self._flush_schema()
        if not isinstance(name, str) or not name:
            raise BuilderStateError("unable to start a new schema: name is empty")
        self._schema_name = name
        self._state = BuilderState.SCHEMA_OPEN
        return self

    def add_property(
        self, name: str, kind: PropertyKind | str = PropertyKind.PROPERTY
    ) -> SchemaCollectionBuilder:
        self._require_open(f"add property {name!r}")
        if self._schema_name is None:
            raise BuilderStateError(f"unable to define property {name!r}: no active schema")
        self._flush_property()
        self._open_property(name, kind)
        return self

    def build(self) -> SchemaCollection:
        self._require_open("build the schema collection")
        self._flush_schema()
        collection = SchemaCollection(logger=self._injected_logger)
        for name, schema in self._finished.items():
            collection.add_schema(name, schema)
        self._state = BuilderState.DONE
        self._logger.debug("schema_collection_built", schema_keys=list(self._finished))
        return collection

    def _scope(self) -> str:
        if self._schema_name is None:
            return "the collection"
        return f"schema {self._schema_name!r}"

    def _require_property(self, action: str) -> _PendingProperty:
        self._require_open(action)
        if self._schema_name is None:
            raise BuilderStateError(f"unable to {action}: no active schema")
        return super()._require_property(action)

    def _flush_property(self) -> None:
        completed = self._take_pending()
        if completed is not None:
            self._schema_properties.append(completed)
        if self._schema_name is not None:
            self._state = BuilderState.SCHEMA_OPEN

    def _flush_schema(self) -> None:
        if self._schema_name is None:
            return
        self._flush_property()
        name = self._schema_name
        if name in self._finished:
            raise DuplicateSchemaError(name)
        self._finished[name] = Schema(self._schema_properties)
        self._logger.debug("schema_built", schema_key=name, properties=len(self._schema_properties))

        self._schema_name = None
        self._schema_properties = []
        self._state = BuilderState.NO_SCHEMA


__all__ = [
    "BuilderState",
    "SchemaBuilder",
    "SchemaCollectionBuilder",
]
