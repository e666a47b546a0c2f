"""
payload-schema — unit tests for declarative schema definitions

Purpose
- Validate YAML/TOML/JSON documents produce the same schemas the builders
  would, and that malformed documents fail with a dotted field path.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest
import structlog
from structlog.testing import CapturingLogger, LogCapture

from payload_schema.definitions import (
    collection_from_mapping,
    load_definitions,
    load_definitions_text,
    schema_from_properties,
)
from payload_schema.errors import DefinitionLoadError, SchemaDefinitionError
from payload_schema.properties import ExcludedProperty, Property
from payload_schema.rules import ArrayRule, InverseRule, NullRule, SubSchemaRule, TypeRule
from payload_schema.values import UNDEFINED

if TYPE_CHECKING:
    from pathlib import Path

PERSON_YAML = """\
version: 1
fragments:
  address:
    - name: city
      rules: [{type: string}]
schemas:
  person:
    - name: name
      rules: [{type: string}]
    - name: age
      optional: true
      default: 0
      rules: [{type: number}]
    - name: legacyFlag
      excluded: true
    - name: tags
      rules: [{array: [{type: string}]}]
    - name: address
      rules: [{schema: address}, {null: true}]
    - name: nickname
      optional: true
      rules: [{not: {type: number}}]
  company:
    - name: owner
      rules: [{schema: person}]
"""

PERSON_TOML = """\
[[schemas.person]]
name = "name"
rules = [{ type = "string" }]

[[schemas.person]]
name = "age"
optional = true
default = 0
rules = [{ type = "number" }]
"""


def _capturing_logger() -> tuple[Any, LogCapture]:
    capture = LogCapture()
    return structlog.wrap_logger(CapturingLogger(), processors=[capture]), capture


def test_yaml_document_builds_expected_schemas() -> None:
    collection = load_definitions_text(PERSON_YAML, "yaml")

    assert collection.get_schema_keys() == ["person", "company"]
    person = collection.get_schema("person")
    assert person is not None
    name, age, legacy, tags, address, nickname = person.properties

    assert name == Property("name", rules=(TypeRule("string"),))
    assert age == Property("age", rules=(TypeRule("number"),), optional=True, default=0)
    assert legacy == ExcludedProperty("legacyFlag")
    assert tags.rules == (ArrayRule((TypeRule("string"),)),)
    assert isinstance(address, Property)
    assert [type(rule) for rule in address.rules] == [NullRule, SubSchemaRule]
    assert nickname.rules == (InverseRule(TypeRule("number")),)
    assert name.default is UNDEFINED


def test_yaml_schemas_validate_payloads() -> None:
    collection = load_definitions_text(PERSON_YAML, "yaml")
    person = collection.get_schema("person")
    assert person is not None

    good = {"name": "Ann", "tags": ["a"], "address": {"city": "X"}}
    assert person.is_valid(good)
    assert person.is_valid({"name": "Ann", "tags": [], "address": None})

    reason = person.check({"name": "Ann", "tags": [1], "address": {}, "legacyFlag": 1}).reason
    assert "Value had property 'legacyFlag'" in reason
    assert "Array value at index 0" in reason
    assert "missing property 'city'" in reason

    company = collection.get_schema("company")
    assert company is not None
    assert company.is_valid({"owner": good})
    assert collection.validate_object_schema({"owner": good}) == (True, "company")


def test_fragments_are_not_registered() -> None:
    collection = load_definitions_text(PERSON_YAML, "yaml")

    assert not collection.has_schema("address")


def test_toml_and_json_documents_are_equivalent() -> None:
    from_toml = load_definitions_text(PERSON_TOML, "toml")
    document = {
        "schemas": {
            "person": [
                {"name": "name", "rules": [{"type": "string"}]},
                {"name": "age", "optional": True, "default": 0, "rules": [{"type": "number"}]},
            ]
        }
    }
    from_json = load_definitions_text(json.dumps(document), "json")

    toml_schema = from_toml.get_schema("person")
    json_schema = from_json.get_schema("person")
    assert toml_schema is not None and json_schema is not None
    assert toml_schema.properties == json_schema.properties
    assert toml_schema.display_string == json_schema.display_string


def test_load_definitions_infers_format_and_logs(tmp_path: Path) -> None:
    path = tmp_path / "defs.yml"
    path.write_text(PERSON_YAML, encoding="utf-8")
    logger, capture = _capturing_logger()

    collection = load_definitions(path, logger=logger)

    assert collection.get_schema_keys() == ["person", "company"]
    loaded = [entry for entry in capture.entries if entry["event"] == "definitions_loaded"]
    assert len(loaded) == 1
    assert loaded[0]["log_level"] == "info"
    assert loaded[0]["source"] == str(path)
    assert loaded[0]["schema_keys"] == ["person", "company"]


def test_load_definitions_explicit_format_overrides_suffix(tmp_path: Path) -> None:
    path = tmp_path / "defs.txt"
    path.write_text(PERSON_TOML, encoding="utf-8")

    assert load_definitions(path, fmt="toml").get_schema_keys() == ["person"]
    with pytest.raises(DefinitionLoadError, match="cannot infer document format"):
        load_definitions(path)


def test_load_definitions_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DefinitionLoadError, match="unable to read definitions") as excinfo:
        load_definitions(tmp_path / "missing.yaml")

    assert excinfo.value.source == str(tmp_path / "missing.yaml")


def test_array_shorthand_means_any_array() -> None:
    schema = schema_from_properties(
        [{"name": "a", "rules": [{"array": True}]}, {"name": "b", "rules": [{"array": []}]}]
    )

    assert schema.is_valid({"a": [1, "x"], "b": [None]})
    assert not schema.is_valid({"a": "x", "b": []})


@pytest.mark.parametrize(
    ("document", "path", "message"),
    [
        ("- just a list", "<root>", "expected a mapping"),
        ("schemas: {}\nextra: 1", "", "unknown keys ['extra']"),
        ("version: 2\nschemas: {}", "version", "unsupported definitions version"),
        ("fragments: {}", "schemas", "expected a mapping, got NoneType"),
        ("schemas:\n  p: []", "schemas.p", "at least one property"),
        ("schemas:\n  p: [{rules: []}]", "schemas.p[0]", "requires 'name'"),
        ("schemas:\n  p: [{name: a, colour: red}]", "schemas.p[0]", "unknown keys ['colour']"),
        ("schemas:\n  p: [{name: a, optional: 'yes'}]", "schemas.p[0].optional", "boolean"),
        ("schemas:\n  p: [{name: a, excluded: 1}]", "schemas.p[0].excluded", "boolean"),
        ("schemas:\n  p: [{name: a, rules: {type: string}}]", "schemas.p[0].rules", "list"),
        (
            "schemas:\n  p: [{name: a, rules: [{type: array}]}]",
            "schemas.p[0].rules[0].type",
            "unknown basic type",
        ),
        (
            "schemas:\n  p: [{name: a, rules: [{type: string, null: true}]}]",
            "schemas.p[0].rules[0]",
            "exactly one",
        ),
        (
            "schemas:\n  p: [{name: a, rules: [{regex: x}]}]",
            "schemas.p[0].rules[0]",
            "unknown rule kind 'regex'",
        ),
        (
            "schemas:\n  p: [{name: a, rules: [{null: false}]}]",
            "schemas.p[0].rules[0]",
            "{null: true}",
        ),
        (
            "schemas:\n  p: [{name: a, rules: [{array: [{type: nope}]}]}]",
            "schemas.p[0].rules[0].array[0].type",
            "unknown basic type",
        ),
        (
            "schemas:\n  p: [{name: a, rules: [{schema: q}]}]\n  q: [{name: b}]",
            "schemas.p[0].rules[0].schema",
            "unknown schema reference 'q'",
        ),
        (
            "schemas:\n  p: [{name: a, rules: [{schema: p}]}]",
            "schemas.p[0].rules[0].schema",
            "unknown schema reference 'p'",
        ),
        (
            "schemas:\n  p: [{name: a, excluded: true, optional: true}]",
            "schemas.p[0]",
            "unsupported for property kind 'excluded'",
        ),
        (
            "fragments:\n  p: [{name: a}]\nschemas:\n  p: [{name: b}]",
            "schemas.p",
            "already declared as a fragment",
        ),
    ],
)
def test_malformed_documents_name_the_failing_path(
    document: str, path: str, message: str
) -> None:
    with pytest.raises(DefinitionLoadError) as excinfo:
        load_definitions_text(document, "yaml", source="defs.yaml")

    error = excinfo.value
    assert error.path == path
    assert message in error.message
    assert str(error).startswith("defs.yaml: ")
    assert isinstance(error, SchemaDefinitionError)


def test_invalid_syntax_is_reported_per_format() -> None:
    with pytest.raises(DefinitionLoadError, match="invalid yaml document"):
        load_definitions_text("schemas: [", "yaml")
    with pytest.raises(DefinitionLoadError, match="invalid toml document"):
        load_definitions_text("schemas = [", "toml")
    with pytest.raises(DefinitionLoadError, match="invalid json document"):
        load_definitions_text("{", "json")
    with pytest.raises(DefinitionLoadError, match="unsupported document format"):
        load_definitions_text("{}", "xml")  # type: ignore[arg-type]


def test_collection_from_mapping_accepts_parsed_documents() -> None:
    collection = collection_from_mapping(
        {"schemas": {"thing": [{"name": "id", "rules": [{"type": "number"}]}]}}
    )

    assert collection.validate_object_schema({"id": 1}) == (True, "thing")



def test_yaml_bare_null_key_is_the_null_rule() -> None:
    collection = load_definitions_text(
        "schemas:\n  p:\n    - name: a\n      rules: [{null: true}]\n", "yaml"
    )

    schema = collection.get_schema("p")
    assert schema is not None
    (prop,) = schema.properties
    assert prop.rules == (NullRule(),)
    assert schema.is_valid({"a": None})
    assert not schema.is_valid({"a": 0})


def test_json_null_key_is_the_null_rule() -> None:
    document = {"schemas": {"p": [{"name": "a", "rules": [{"null": True}]}]}}

    schema = load_definitions_text(json.dumps(document), "json").get_schema("p")

    assert schema is not None
    assert schema.properties[0].rules == (NullRule(),)
