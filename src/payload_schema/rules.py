"""Value rules: atomic, self-describing checks over a single value.

The variant set is closed: :class:`TypeRule`, :class:`ArrayRule`,
:class:`NullRule`, :class:`InverseRule` and :class:`SubSchemaRule`. Every
variant exposes

- ``check(value) -> ValidationResult`` (pure, never raises for bad input),
- ``is_value_valid(value) -> bool``,
- ``complexity`` (positive sort key, cheapest first),
- ``display_string`` (static description of the check).

Rules keep no per-call state, so one instance may be shared by any number of
concurrent validations.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from payload_schema.constants import (
    ARRAY_RULE_BASE_COMPLEXITY,
    INVERSE_RULE_OVERHEAD,
    NULL_RULE_COMPLEXITY,
    TYPE_RULE_COMPLEXITY,
)
from payload_schema.errors import SchemaDefinitionError
from payload_schema.results import ValidationResult
from payload_schema.values import BasicType, coerce_basic_type, is_array, runtime_type_tag

if TYPE_CHECKING:
    from payload_schema.schema import Schema


class _ValueCheck:
    __slots__ = ()

    def check(self, value: object) -> ValidationResult:
        raise NotImplementedError

    def is_value_valid(self, value: object) -> bool:
        return self.check(value).valid


@dataclass(frozen=True, slots=True)
class TypeRule(_ValueCheck):
    """Accept values whose runtime type tag equals ``expected``."""

    expected: BasicType

    def __post_init__(self) -> None:
        object.__setattr__(self, "expected", coerce_basic_type(self.expected))

    @property
    def complexity(self) -> int:
        return TYPE_RULE_COMPLEXITY

    @property
    def display_string(self) -> str:
        return f"value === '{self.expected.value}'"

    def check(self, value: object) -> ValidationResult:
        actual = runtime_type_tag(value)
        if actual == self.expected.value:
            return ValidationResult.ok()
        return ValidationResult.fail(
            f"Value was of type '{actual}' when was expecting '{self.expected.value}'"
        )


@dataclass(frozen=True, slots=True)
class ArrayRule(_ValueCheck):
    """Accept arrays, optionally requiring each element to match one child rule."""

    rules: tuple[ValueRule, ...] = ()
    complexity: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = sort_by_complexity(self.rules)
        object.__setattr__(self, "rules", ordered)
        object.__setattr__(
            self,
            "complexity",
            ARRAY_RULE_BASE_COMPLEXITY + sum(rule.complexity for rule in ordered),
        )

    @property
    def display_string(self) -> str:
        if not self.rules:
            return "[IsArray]"
        return f"[IsArray | {_join_displays(self.rules)}]"

    def check(self, value: object) -> ValidationResult:
        if not is_array(value):
            return ValidationResult.fail("Supplied value was not an array")
        if not self.rules:
            return ValidationResult.ok()

        for index, item in enumerate(value):  # type: ignore[arg-type]
            if any(rule.is_value_valid(item) for rule in self.rules):
                continue
            return ValidationResult.fail(
                f"Array value at index {index} failed conditions [{_join_displays(self.rules)}]"
            )
        return ValidationResult.ok()


@dataclass(frozen=True, slots=True)
class NullRule(_ValueCheck):
    """Accept exactly ``None``; ``UNDEFINED`` is not null."""

    @property
    def complexity(self) -> int:
        return NULL_RULE_COMPLEXITY

    @property
    def display_string(self) -> str:
        return "value === null"

    def check(self, value: object) -> ValidationResult:
        if value is None:
            return ValidationResult.ok()
        return ValidationResult.fail("Value was not null")


@dataclass(frozen=True, slots=True)
class InverseRule(_ValueCheck):
    """Accept values the wrapped rule rejects."""

    rule: ValueRule

    def __post_init__(self) -> None:
        _require_rule(self.rule, "InverseRule")

    @property
    def complexity(self) -> int:
        return INVERSE_RULE_OVERHEAD + self.rule.complexity

    @property
    def display_string(self) -> str:
        return f"!({self.rule.display_string})"

    def check(self, value: object) -> ValidationResult:
        if self.rule.is_value_valid(value):
            return ValidationResult.fail(f"{self.rule.display_string} was valid")
        return ValidationResult.ok()


@dataclass(frozen=True, slots=True)
class SubSchemaRule(_ValueCheck):
    """Accept objects that satisfy a nested :class:`~payload_schema.schema.Schema`."""

    schema: Schema

    @property
    def complexity(self) -> int:
        return self.schema.complexity

    @property
    def display_string(self) -> str:
        return self.schema.display_string

    def check(self, value: object) -> ValidationResult:
        return self.schema.check(value)


ValueRule: TypeAlias = TypeRule | ArrayRule | NullRule | InverseRule | SubSchemaRule

_RULE_TYPES = (TypeRule, ArrayRule, NullRule, InverseRule, SubSchemaRule)


def sort_by_complexity(rules: Iterable[ValueRule] | None) -> tuple[ValueRule, ...]:
    """Return ``rules`` as a tuple ordered by ascending complexity (stable)."""

    if rules is None:
        return ()
    items = tuple(rules)
    for rule in items:
        _require_rule(rule, "rule list")
    return tuple(sorted(items, key=lambda rule: rule.complexity))


def _require_rule(rule: object, owner: str) -> None:
    if not isinstance(rule, _RULE_TYPES):
        raise SchemaDefinitionError(
            f"{owner} expects value rules, got {type(rule).__name__}"
        )


def _join_displays(rules: Iterable[ValueRule]) -> str:
    return " | ".join(rule.display_string for rule in rules)


__all__ = [
    "ArrayRule",
    "InverseRule",
    "NullRule",
    "SubSchemaRule",
    "TypeRule",
    "ValueRule",
    "sort_by_complexity",
]
