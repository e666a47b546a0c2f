"""Schema: an AND-combination of properties describing one object shape."""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping

from payload_schema.constants import SCHEMA_BASE_COMPLEXITY
from payload_schema.errors import EmptySchemaError, SchemaDefinitionError
from payload_schema.properties import ExcludedProperty, Property, SchemaProperty
from payload_schema.results import ValidationResult
from payload_schema.values import is_object, runtime_type_tag


class Schema:
    """Ordered, immutable collection of :data:`SchemaProperty` entries.

    Validation evaluates every property, even after a failure, so the
    returned reason lists all failing properties newline-separated in
    declaration order. Duplicate property names are kept and evaluated.
    """

    __slots__ = ("_complexity", "_properties")

    def __init__(self, properties: Iterable[SchemaProperty] | None) -> None:
        items = tuple(properties) if properties is not None else ()
        if not items:
            raise EmptySchemaError("a schema requires at least one property")
        for item in items:
            if not isinstance(item, (Property, ExcludedProperty)):
                raise SchemaDefinitionError(
                    f"schema entries must be schema properties, got {type(item).__name__}"
                )

        self._properties: tuple[SchemaProperty, ...] = items
        self._complexity = SCHEMA_BASE_COMPLEXITY + sum(item.complexity for item in items)

    @property
    def properties(self) -> tuple[SchemaProperty, ...]:
        return self._properties

    @property
    def complexity(self) -> int:
        return self._complexity

    @property
    def property_names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self._properties)

    @property
    def display_string(self) -> str:
        lines = "\n\t".join(f'"{item.name}": "{item.display_string}"' for item in self._properties)
        return f"{{\n\t{lines}\n}}"

    def check(self, obj: object) -> ValidationResult:
        """Validate ``obj`` against every property and collect all failures."""

        if not is_object(obj):
            return ValidationResult.fail(
                f"Value of type '{runtime_type_tag(obj)}' was not an object"
            )

        reasons: list[str] = []
        for item in self._properties:
            outcome = item.check(obj)
            if not outcome.valid:
                reasons.append(outcome.reason)

        if reasons:
            return ValidationResult.fail("\n".join(reasons))
        return ValidationResult.ok()

    def is_valid(self, obj: object) -> bool:
        return self.check(obj).valid

    def apply_default_properties(self, obj: object) -> tuple[str, ...]:
        """Apply each property's default to ``obj`` in place, in declaration order.

        Does not validate afterwards. Non-mapping values are left untouched.
        Returns the names of the properties that changed ``obj``.
        """

        if not isinstance(obj, MutableMapping):
            return ()
        return tuple(item.name for item in self._properties if item.test_apply_default(obj))

    def __repr__(self) -> str:
        return f"Schema(properties={list(self.property_names)!r}, complexity={self._complexity})"


__all__ = ["Schema"]
