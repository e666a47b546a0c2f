"""
payload-schema — declarative schema definition loader.

Purpose
- Build ``Schema`` / ``SchemaCollection`` objects from YAML, TOML, or JSON
  documents so schemas can live next to the services that use them.

Document shape
- ``fragments``: optional mapping of name -> property list. Fragments are only
  usable as nested ``{schema: <name>}`` rules; they are not registered.
- ``schemas``: mapping of name -> property list, registered in document order.
- ``version``: optional integer, must equal ``DEFINITIONS_VERSION``.

Property entries
- ``name`` (required), ``optional``, ``default``, ``excluded``, ``rules``.

Rule entries (exactly one key each)
- ``{type: <basic type>}``, ``{array: [<rule>, ...] | true}``, ``{null: true}``,
  ``{not: <rule>}``, ``{schema: <fragment or earlier schema>}``.

Functional requirements
- Route every declaration through the builders so builder guards apply.
- Report failures with the document source and a dotted field path.
- Reject references to undeclared or later schemas (no cycles).
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Literal

import yaml

from payload_schema.builders import SchemaBuilder
from payload_schema.collection import SchemaCollection
from payload_schema.errors import DefinitionLoadError, SchemaDefinitionError
from payload_schema.observability.logging import get_logger
from payload_schema.properties import PropertyKind
from payload_schema.rules import ArrayRule, InverseRule, NullRule, SubSchemaRule, TypeRule
from payload_schema.schema import Schema

if TYPE_CHECKING:
    from payload_schema.rules import ValueRule

DocumentFormat = Literal["yaml", "toml", "json"]

DEFINITIONS_VERSION: Final[int] = 1

_SUFFIX_FORMATS: Final[dict[str, DocumentFormat]] = {
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".json": "json",
}
_ROOT_KEYS: Final[frozenset[str]] = frozenset({"version", "fragments", "schemas"})
_PROPERTY_KEYS: Final[frozenset[str]] = frozenset(
    {"name", "optional", "default", "excluded", "rules"}
)
_RULE_KINDS: Final[tuple[str, ...]] = ("type", "array", "null", "not", "schema")

_LOGGER = get_logger(__name__)


def load_definitions(
    path: str | Path,
    *,
    fmt: DocumentFormat | None = None,
    logger: Any | None = None,
) -> SchemaCollection:
    """Load a definition document from ``path``; format defaults to the file suffix."""

    source = Path(path)
    resolved_fmt = fmt if fmt is not None else _format_for(source)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise DefinitionLoadError(
            f"unable to read definitions: {exc.strerror or exc}", source=str(source)
        ) from exc

    collection = load_definitions_text(
        text, resolved_fmt, source=str(source), logger=logger
    )
    (logger if logger is not None else _LOGGER).info(
        "definitions_loaded",
        source=str(source),
        schema_keys=collection.get_schema_keys(),
    )
    return collection


def load_definitions_text(
    text: str,
    fmt: DocumentFormat,
    *,
    source: str | None = None,
    logger: Any | None = None,
) -> SchemaCollection:
    """Parse ``text`` in the given format and build its schema collection."""

    document = parse_document(text, fmt, source=source)
    return collection_from_mapping(document, source=source, logger=logger)


def parse_document(text: str, fmt: DocumentFormat, *, source: str | None = None) -> object:
    try:
        if fmt == "yaml":
            return yaml.safe_load(text)
        if fmt == "toml":
            return tomllib.loads(text)
        if fmt == "json":
            return json.loads(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise DefinitionLoadError(f"invalid {fmt} document: {exc}", source=source) from exc
    raise DefinitionLoadError(f"unsupported document format {fmt!r}", source=source)


def collection_from_mapping(
    document: object,
    *,
    source: str | None = None,
    logger: Any | None = None,
) -> SchemaCollection:
    """Build a :class:`SchemaCollection` from an already-parsed definition document."""

    root = _as_mapping(document, "<root>", source)
    _reject_unknown_keys(root, _ROOT_KEYS, "", source)

    if "version" in root:
        version = root["version"]
        if isinstance(version, bool) or version != DEFINITIONS_VERSION:
            raise DefinitionLoadError(
                f"unsupported definitions version {version!r}; expected {DEFINITIONS_VERSION}",
                path="version",
                source=source,
            )

    known: dict[str, Schema] = {}
    fragments = _as_mapping(root.get("fragments") or {}, "fragments", source)
    for name, entries in fragments.items():
        path = f"fragments.{name}"
        known[_schema_name(name, path, source)] = schema_from_properties(
            entries, path=path, known=known, source=source
        )

    schemas = _as_mapping(root.get("schemas"), "schemas", source)
    collection = SchemaCollection(logger=logger)
    for name, entries in schemas.items():
        path = f"schemas.{name}"
        key = _schema_name(name, path, source)
        if key in known:
            raise DefinitionLoadError(
                f"schema {key!r} is already declared as a fragment", path=path, source=source
            )
        schema = schema_from_properties(entries, path=path, known=known, source=source)
        collection.add_schema(key, schema)
        known[key] = schema
    return collection


def schema_from_properties(
    entries: object,
    *,
    path: str = "<schema>",
    known: Mapping[str, Schema] | None = None,
    source: str | None = None,
) -> Schema:
    """Build one :class:`Schema` from a list of property entries."""

    items = _as_sequence(entries, path, source)
    references = known if known is not None else {}
    builder = SchemaBuilder()
    for index, raw in enumerate(items):
        _declare_property(builder, raw, f"{path}[{index}]", references, source)

    try:
        return builder.build()
    except SchemaDefinitionError as exc:
        raise DefinitionLoadError(str(exc), path=path, source=source) from exc


def _declare_property(
    builder: SchemaBuilder,
    raw: object,
    path: str,
    known: Mapping[str, Schema],
    source: str | None,
) -> None:
    entry = _as_mapping(raw, path, source)
    _reject_unknown_keys(entry, _PROPERTY_KEYS, path, source)
    if "name" not in entry:
        raise DefinitionLoadError("property entry requires 'name'", path=path, source=source)

    excluded = _as_bool(entry.get("excluded", False), f"{path}.excluded", source)
    optional = (
        _as_bool(entry["optional"], f"{path}.optional", source) if "optional" in entry else None
    )
    rules = [
        _parse_rule(item, f"{path}.rules[{index}]", known, source)
        for index, item in enumerate(
            _as_sequence(entry.get("rules", []), f"{path}.rules", source)
        )
    ]

    try:
        builder.add_property(
            entry["name"], PropertyKind.EXCLUDED if excluded else PropertyKind.PROPERTY
        )
        if optional is not None:
            builder.is_optional(optional)
        if "default" in entry:
            builder.with_default(entry["default"])
        for rule in rules:
            builder.add_value_validation(rule)
    except SchemaDefinitionError as exc:
        raise DefinitionLoadError(str(exc), path=path, source=source) from exc


def _parse_rule(
    raw: object,
    path: str,
    known: Mapping[str, Schema],
    source: str | None,
) -> ValueRule:
    entry = _as_mapping(raw, path, source)
    if len(entry) != 1:
        raise DefinitionLoadError(
            f"rule must have exactly one of {list(_RULE_KINDS)}", path=path, source=source
        )
    ((kind, argument),) = entry.items()
    # YAML 1.1 loads a bare `null` key as None.
    if kind is None:
        kind = "null"

    if kind == "type":
        try:
            return TypeRule(argument)
        except SchemaDefinitionError as exc:
            raise DefinitionLoadError(str(exc), path=f"{path}.type", source=source) from exc

    if kind == "array":
        if argument is True or argument is None:
            return ArrayRule()
        children = _as_sequence(argument, f"{path}.array", source)
        return ArrayRule(
            tuple(
                _parse_rule(child, f"{path}.array[{index}]", known, source)
                for index, child in enumerate(children)
            )
        )

    if kind == "null":
        if argument is not True:
            raise DefinitionLoadError(
                "null rule must be written as {null: true}", path=path, source=source
            )
        return NullRule()

    if kind == "not":
        return InverseRule(_parse_rule(argument, f"{path}.not", known, source))

    if kind == "schema":
        if not isinstance(argument, str) or argument not in known:
            raise DefinitionLoadError(
                f"unknown schema reference {argument!r}; reference fragments or earlier schemas",
                path=f"{path}.schema",
                source=source,
            )
        return SubSchemaRule(known[argument])

    raise DefinitionLoadError(
        f"unknown rule kind {kind!r}; expected one of {list(_RULE_KINDS)}",
        path=path,
        source=source,
    )


def _format_for(path: Path) -> DocumentFormat:
    fmt = _SUFFIX_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise DefinitionLoadError(
            f"cannot infer document format from suffix {path.suffix!r}; "
            f"expected one of {sorted(_SUFFIX_FORMATS)}",
            source=str(path),
        )
    return fmt


def _schema_name(name: object, path: str, source: str | None) -> str:
    if not isinstance(name, str) or not name:
        raise DefinitionLoadError("schema names must be non-empty strings", path=path, source=source)
    return name


def _as_mapping(value: object, path: str, source: str | None) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DefinitionLoadError(
            f"expected a mapping, got {type(value).__name__}", path=path, source=source
        )
    return value


def _as_sequence(value: object, path: str, source: str | None) -> Sequence[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise DefinitionLoadError(
            f"expected a list, got {type(value).__name__}", path=path, source=source
        )
    return value


def _as_bool(value: object, path: str, source: str | None) -> bool:
    if not isinstance(value, bool):
        raise DefinitionLoadError(
            f"expected a boolean, got {type(value).__name__}", path=path, source=source
        )
    return value


def _reject_unknown_keys(
    payload: Mapping[str, Any],
    allowed: frozenset[str],
    path: str,
    source: str | None,
) -> None:
    unknown = sorted(str(key) for key in payload if key not in allowed)
    if unknown:
        raise DefinitionLoadError(
            f"unknown keys {unknown}; allowed: {sorted(allowed)}", path=path, source=source
        )
