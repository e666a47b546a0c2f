from __future__ import annotations

from typing import Any

import pytest
import structlog
from structlog.testing import CapturingLogger, LogCapture

from payload_schema.builders import SchemaBuilder, SchemaCollectionBuilder
from payload_schema.errors import PayloadValidationError
from payload_schema.payloads import assert_valid, classify_payload, validate_payload
from payload_schema.rules import TypeRule
from payload_schema.schema import Schema


def _capturing_logger() -> tuple[Any, LogCapture]:
    capture = LogCapture()
    return structlog.wrap_logger(CapturingLogger(), processors=[capture]), capture


def _counter() -> Schema:
    return (
        SchemaBuilder()
        .add_property("name")
        .add_value_validation(TypeRule("string"))
        .add_property("count")
        .with_default(0)
        .add_value_validation(TypeRule("number"))
        .build()
    )


def test_validate_payload_applies_defaults_before_validating() -> None:
    logger, capture = _capturing_logger()
    payload: dict[str, object] = {"name": "widget"}

    result = validate_payload(_counter(), payload, logger=logger)

    assert result.valid
    assert payload == {"name": "widget", "count": 0}
    (entry,) = capture.entries
    assert entry["event"] == "payload_accepted"
    assert entry["log_level"] == "debug"
    assert entry["defaults_applied"] == ["count"]


def test_validate_payload_without_defaults_leaves_payload_alone() -> None:
    logger, capture = _capturing_logger()
    payload: dict[str, object] = {"name": "widget"}

    result = validate_payload(_counter(), payload, apply_defaults=False, logger=logger)

    assert not result.valid
    assert result.reason == "Value is missing property 'count'"
    assert payload == {"name": "widget"}
    (entry,) = capture.entries
    assert entry["event"] == "payload_rejected"
    assert entry["log_level"] == "info"
    assert entry["reason"] == result.reason


def test_assert_valid_returns_the_mutated_payload() -> None:
    payload: dict[str, object] = {"name": "widget"}

    assert assert_valid(_counter(), payload) is payload
    assert payload["count"] == 0


def test_assert_valid_raises_with_the_failing_result() -> None:
    with pytest.raises(PayloadValidationError) as excinfo:
        assert_valid(_counter(), {"name": 3})

    assert not excinfo.value.result.valid
    assert "'name' failed conditions" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


def test_classify_payload_returns_first_matching_key() -> None:
    collection = (
        SchemaCollectionBuilder()
        .add_schema("order")
        .add_property("order_id")
        .add_schema("user")
        .add_property("user_id")
        .build()
    )

    assert classify_payload(collection, {"user_id": 1}) == "user"
    assert classify_payload(collection, {"order_id": 1, "user_id": 2}) == "order"
    assert classify_payload(collection, {}) is None
