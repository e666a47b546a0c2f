"""Dynamic value model: the ``UNDEFINED`` sentinel, basic type tags, and key lookups."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from enum import StrEnum
from typing import Final

from payload_schema.constants import MAX_SAFE_INTEGER, NULL_TYPE_TAG
from payload_schema.errors import UnknownBasicTypeError


class _Undefined:
    """Marker for the ``undefined`` value of the input model.

    Distinct from ``None`` (null). Survives copying and pickling as the same
    object so identity checks keep working on deep-copied payloads.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict[int, object]) -> _Undefined:
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Final[_Undefined] = _Undefined()


class BasicType(StrEnum):
    """Runtime type tags a :class:`~payload_schema.rules.TypeRule` can expect."""

    UNDEFINED = "undefined"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SYMBOL = "symbol"
    BIGINT = "bigint"
    OBJECT = "object"
    FUNCTION = "function"


def coerce_basic_type(value: BasicType | str) -> BasicType:
    """Return ``value`` as a :class:`BasicType` or raise ``UnknownBasicTypeError``."""

    if isinstance(value, BasicType):
        return value
    if isinstance(value, str):
        try:
            return BasicType(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(item.value for item in BasicType)
    raise UnknownBasicTypeError(f"unknown basic type {value!r}; expected one of: {allowed}")


def runtime_type_tag(value: object) -> str:
    """Map a Python value onto the basic type tag universe.

    ``None`` maps to ``"null"``, which no :class:`BasicType` matches; nulls are
    only accepted by the null rule.
    """

    if value is UNDEFINED:
        return BasicType.UNDEFINED.value
    if value is None:
        return NULL_TYPE_TAG
    if isinstance(value, bool):
        return BasicType.BOOLEAN.value
    if isinstance(value, enum.Enum):
        return BasicType.SYMBOL.value
    if isinstance(value, int):
        if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
            return BasicType.NUMBER.value
        return BasicType.BIGINT.value
    if isinstance(value, float):
        return BasicType.NUMBER.value
    if isinstance(value, str):
        return BasicType.STRING.value
    if isinstance(value, (Mapping, list, tuple)):
        return BasicType.OBJECT.value
    if callable(value):
        return BasicType.FUNCTION.value
    return BasicType.OBJECT.value


def is_array(value: object) -> bool:
    return isinstance(value, (list, tuple))


def is_object(value: object) -> bool:
    return isinstance(value, Mapping)


def has_key(obj: object, name: str) -> bool:
    """Key presence test that treats non-mapping values as having no keys."""

    return isinstance(obj, Mapping) and name in obj


def get_value(obj: object, name: str) -> object:
    """Return ``obj[name]``, or ``UNDEFINED`` when the key is absent."""

    if not isinstance(obj, Mapping):
        return UNDEFINED
    return obj.get(name, UNDEFINED)


def strip_undefined(value: object) -> object:
    """Return a JSON-compatible copy of ``value`` with ``UNDEFINED`` entries dropped."""

    if isinstance(value, Mapping):
        return {
            str(key): strip_undefined(item)
            for key, item in value.items()
            if item is not UNDEFINED
        }
    if is_array(value):
        # Array slots cannot be dropped without shifting indexes; render as null.
        return [None if item is UNDEFINED else strip_undefined(item) for item in value]
    if value is UNDEFINED:
        return None
    return value


__all__ = [
    "UNDEFINED",
    "BasicType",
    "coerce_basic_type",
    "get_value",
    "has_key",
    "is_array",
    "is_object",
    "runtime_type_tag",
    "strip_undefined",
]
