"""Request/response payload helpers: apply defaults, then validate."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from payload_schema.errors import PayloadValidationError
from payload_schema.observability.logging import get_logger

if TYPE_CHECKING:
    from payload_schema.collection import SchemaCollection
    from payload_schema.results import ValidationResult
    from payload_schema.schema import Schema

TPayload = TypeVar("TPayload")

_LOGGER = get_logger(__name__)


def validate_payload(
    schema: Schema,
    payload: object,
    *,
    apply_defaults: bool = True,
    logger: Any | None = None,
) -> ValidationResult:
    """Fill defaults into ``payload`` in place (when requested), then validate it."""

    log = logger if logger is not None else _LOGGER
    applied: tuple[str, ...] = ()
    if apply_defaults:
        applied = schema.apply_default_properties(payload)

    result = schema.check(payload)
    if result.valid:
        log.debug("payload_accepted", defaults_applied=list(applied))
    else:
        log.info(
            "payload_rejected",
            defaults_applied=list(applied),
            reason=result.reason,
        )
    return result


def assert_valid(
    schema: Schema,
    payload: TPayload,
    *,
    apply_defaults: bool = True,
    logger: Any | None = None,
) -> TPayload:
    """Validate like :func:`validate_payload` and raise ``PayloadValidationError`` on failure."""

    result = validate_payload(schema, payload, apply_defaults=apply_defaults, logger=logger)
    if not result.valid:
        raise PayloadValidationError(result)
    return payload


def classify_payload(
    collection: SchemaCollection,
    payload: object,
) -> str | None:
    """Return the key of the first registered schema accepting ``payload``."""

    matched, key = collection.validate_object_schema(payload)
    return key if matched else None


__all__ = ["assert_valid", "classify_payload", "validate_payload"]
