"""Error taxonomy for the registration and listing paths.

Every failure raised by the core derives from RegistryError and carries
an ``error_type`` identifier and the HTTP status the API layer maps it
to. The five concrete kinds let a caller tell apart input problems
(fix and resubmit) from storage, write, connection and read failures.
"""

from __future__ import annotations

import dataclasses
from typing import Any, ClassVar


class ErrorTypes:
    """Error type identifiers returned in API error bodies."""

    VALIDATION_FAILED = "validation_failed"
    STORAGE_FAILED = "storage_failed"
    WRITE_FAILED = "write_failed"
    CONNECTION_FAILED = "connection_failed"
    READ_FAILED = "read_failed"


@dataclasses.dataclass(frozen=True)
class Violation:
    """A single failed validation rule.

    Attributes:
        field: Name of the submitted field.
        rule: Rule identifier ("required", "min_length", "max_length",
            "email").
        message: Human-readable message for display next to the field.
    """

    field: str
    rule: str
    message: str


class RegistryError(Exception):
    """Base class for all directory service failures."""

    error_type: ClassVar[str] = "internal_error"
    status_code: ClassVar[int] = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-serializable response body."""
        return {"error": self.error_type, "message": self.message}


class ValidationError(RegistryError):
    """Submission failed one or more field rules; nothing was stored."""

    error_type = ErrorTypes.VALIDATION_FAILED
    status_code = 422

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = violations
        super().__init__("; ".join(v.message for v in violations))

    @property
    def fields(self) -> set[str]:
        return {v.field for v in self.violations}

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["violations"] = [dataclasses.asdict(v) for v in self.violations]
        return body


class StorageError(RegistryError):
    """The image could not be written; no database write was attempted."""

    error_type = ErrorTypes.STORAGE_FAILED


class WriteError(RegistryError):
    """The insert failed after the image had already been stored."""

    error_type = ErrorTypes.WRITE_FAILED


class ConnectionError(RegistryError):  # noqa: A001
    """The relational store could not be reached."""

    error_type = ErrorTypes.CONNECTION_FAILED
    status_code = 503


class ReadError(RegistryError):
    """The listing query failed."""

    error_type = ErrorTypes.READ_FAILED
