"""Schema properties: named slots an object must (or must not) carry."""

from __future__ import annotations

import copy
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeAlias

from payload_schema.constants import EXCLUDED_PROPERTY_COMPLEXITY, PROPERTY_BASE_COMPLEXITY
from payload_schema.errors import SchemaDefinitionError
from payload_schema.results import ValidationResult
from payload_schema.rules import ValueRule, sort_by_complexity
from payload_schema.values import UNDEFINED, get_value, has_key


class PropertyKind(StrEnum):
    """Property variants a builder can open."""

    PROPERTY = "property"
    EXCLUDED = "excluded"


@dataclass(frozen=True, slots=True)
class Property:
    """A property that must be present (unless optional) and match one of ``rules``.

    Rules are OR-combined and tried in ascending complexity order. ``default``
    is written into objects by :meth:`test_apply_default` when the property is
    currently invalid; ``UNDEFINED`` means no default was configured, and is
    still written as an explicit value in that case.
    """

    name: str
    rules: tuple[ValueRule, ...] = ()
    optional: bool = False
    default: object = UNDEFINED
    complexity: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _require_name(self.name)
        ordered = sort_by_complexity(self.rules)
        object.__setattr__(self, "rules", ordered)
        object.__setattr__(self, "optional", bool(self.optional))
        object.__setattr__(
            self,
            "complexity",
            PROPERTY_BASE_COMPLEXITY + sum(rule.complexity for rule in ordered),
        )

    @property
    def display_string(self) -> str:
        presence = "Optionally Included" if self.optional else "Included"
        if not self.rules:
            return f"'{self.name}' {presence}"
        conditions = " | ".join(rule.display_string for rule in self.rules)
        return f"'{self.name}' {presence} with [{conditions}]"

    def check(self, obj: object) -> ValidationResult:
        if not has_key(obj, self.name):
            if self.optional:
                return ValidationResult.ok()
            return ValidationResult.fail(f"Value is missing property '{self.name}'")

        if not self.rules:
            return ValidationResult.ok()

        value = get_value(obj, self.name)
        reasons: list[str] = []
        for rule in self.rules:
            outcome = rule.check(value)
            if outcome.valid:
                return ValidationResult.ok()
            reasons.append(outcome.reason)

        return ValidationResult.fail(
            f"'{self.name}' failed conditions [{' | '.join(reasons)}]"
        )

    def is_valid(self, obj: object) -> bool:
        return self.check(obj).valid

    def test_apply_default(self, obj: MutableMapping[str, object]) -> bool:
        """Write ``default`` into ``obj`` when the property is currently invalid.

        Returns whether ``obj`` was modified.
        """

        if self.check(obj).valid:
            return False
        # Copied so mutable defaults are never shared between payloads.
        obj[self.name] = copy.deepcopy(self.default)
        return True


@dataclass(frozen=True, slots=True)
class ExcludedProperty:
    """A property that must not be meaningfully present on the object.

    A key explicitly set to ``UNDEFINED`` counts as absent.
    """

    name: str

    def __post_init__(self) -> None:
        _require_name(self.name)

    @property
    def complexity(self) -> int:
        return EXCLUDED_PROPERTY_COMPLEXITY

    @property
    def display_string(self) -> str:
        return f"!({self.name} in obj)"

    def check(self, obj: object) -> ValidationResult:
        if get_value(obj, self.name) is UNDEFINED:
            return ValidationResult.ok()
        return ValidationResult.fail(f"Value had property '{self.name}'")

    def is_valid(self, obj: object) -> bool:
        return self.check(obj).valid

    def test_apply_default(self, obj: MutableMapping[str, object]) -> bool:
        """Delete the excluded key from ``obj`` when it is present."""

        if self.check(obj).valid:
            return False
        del obj[self.name]
        return True


SchemaProperty: TypeAlias = Property | ExcludedProperty


def _require_name(name: object) -> None:
    if not isinstance(name, str) or not name:
        raise SchemaDefinitionError(f"property name must be a non-empty string, got {name!r}")


__all__ = [
    "ExcludedProperty",
    "Property",
    "PropertyKind",
    "SchemaProperty",
]
