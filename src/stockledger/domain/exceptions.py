"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations

from typing import Any


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated.

    ``context`` names the offending field, record index or composite key
    so a caller can decide whether a corrected re-submission makes sense.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        record_index: int | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.record_index = record_index
        self.key = key

    @property
    def context(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in (
                ("field", self.field),
                ("record_index", self.record_index),
                ("key", self.key),
            )
            if value is not None
        }


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class BusinessError(DomainException):
    """An unexpected internal failure, surfaced without its internal details."""


class TransientStorageError(DomainException):
    """Storage contention that may succeed if the whole call is retried."""


class LockTimeoutError(TransientStorageError):
    """A row lock could not be acquired in time."""

    def __init__(self, table: str, row_id: str, timeout: float) -> None:
        super().__init__(
            f"Timed out after {timeout:.2f}s waiting for lock on {table}/{row_id}"
        )
        self.table = table
        self.row_id = row_id
