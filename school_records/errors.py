"""Errors raised by the record store."""
from __future__ import annotations

from typing import Any, Mapping


class RecordStoreError(RuntimeError):
    """Base class for every error surfaced by the record store."""


class NotFound(RecordStoreError):
    """Raised when a unique key matches no row."""

    def __init__(self, entity: str, key: Mapping[str, Any]) -> None:
        self.entity = entity
        self.key = dict(key)
        super().__init__(f"{entity} not found for {self.key!r}")


class UniqueConstraintViolation(RecordStoreError):
    """Raised when a write collides with an existing unique value."""

    def __init__(self, field: str, entity: str | None = None) -> None:
        self.field = field
        self.entity = entity
        super().__init__(f"{field} is already taken")


class ForeignKeyViolation(RecordStoreError):
    """Raised when a referenced parent row does not exist."""

    def __init__(self, field: str | None, value: Any = None, message: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message or f"{field} references a missing row: {value!r}")


class StreamGradeMismatch(ForeignKeyViolation):
    """Raised when a student's stream belongs to a different grade."""

    def __init__(self, stream_id: str, grade_id: str, stream_grade_id: str) -> None:
        self.grade_id = grade_id
        self.stream_grade_id = stream_grade_id
        super().__init__(
            "streamId",
            stream_id,
            f"stream {stream_id!r} belongs to grade {stream_grade_id!r}, not {grade_id!r}",
        )


class ReferentialIntegrityViolation(RecordStoreError):
    """Raised when deleting a row that still has dependents."""

    def __init__(
        self, entity: str, dependents: Mapping[str, int], action: str = "delete"
    ) -> None:
        self.entity = entity
        self.dependents = dict(dependents)
        self.action = action
        summary = ", ".join(f"{count} {name}" for name, count in self.dependents.items())
        super().__init__(f"cannot {action} {entity}: still referenced by {summary or 'dependent rows'}")


class StoreUnavailable(RecordStoreError):
    """Raised when the underlying database cannot be reached."""


class UnknownEntity(RecordStoreError):
    """Raised when an entity name does not match any model."""


class MalformedKey(RecordStoreError):
    """Raised when a lookup key does not name a unique field."""


class InvalidFilter(RecordStoreError):
    """Raised for filters or orderings that reference unknown fields or operators."""


class InvalidRecord(RecordStoreError):
    """Raised when input fields fail validation before reaching the store."""

    def __init__(self, entity: str, errors: list[dict[str, Any]]) -> None:
        self.entity = entity
        self.errors = errors
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = first.get("msg", "invalid input")
        super().__init__(f"invalid {entity}: {location + ': ' if location else ''}{detail}")


__all__ = [
    "ForeignKeyViolation",
    "InvalidFilter",
    "InvalidRecord",
    "MalformedKey",
    "NotFound",
    "RecordStoreError",
    "ReferentialIntegrityViolation",
    "StoreUnavailable",
    "StreamGradeMismatch",
    "UniqueConstraintViolation",
    "UnknownEntity",
]
