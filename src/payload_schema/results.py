"""Validation outcome value shared by rules, properties, and schemas."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a single validation call.

    ``reason`` is empty for successful checks and carries the human-readable
    diagnostic otherwise. Results are truthy exactly when ``valid`` is set.
    """

    valid: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def ok(cls) -> ValidationResult:
        return _OK

    @classmethod
    def fail(cls, reason: str) -> ValidationResult:
        return cls(valid=False, reason=reason)


_OK = ValidationResult(valid=True)

__all__ = ["ValidationResult"]
