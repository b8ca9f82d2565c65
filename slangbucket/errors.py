"""Typed failures raised by bucket operations.

Every failure carries an `ErrorKind` and a label. For backend failures the label
names the command that failed (e.g. ``GET_STR_K_SLANG``); for guard violations
it names the guard (e.g. ``ID_LAST_SLANG``). Backend error text is logged, never
put into the exception message.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    UNSUPPORTED = "UNSUPPORTED"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"


class BucketError(Exception):
    """Base class of all bucket failures.

    Attributes:
        kind: Machine-readable category of the failure
        label: Operation or guard that produced the failure
    """

    kind: ErrorKind

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(label)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.label,
            "extensions": {"internal_error": self.label, "kind": self.kind.value},
        }


class NotFound(BucketError):
    """Alias is unbound, or id has no record or aliases."""

    kind = ErrorKind.NOT_FOUND


class AlreadyExists(BucketError):
    """Alias is already bound."""

    kind = ErrorKind.ALREADY_EXISTS


class Unsupported(BucketError):
    """A structural guard refused the mutation."""

    kind = ErrorKind.UNSUPPORTED


class BackendUnavailable(BucketError):
    """A key-value backend command failed."""

    kind = ErrorKind.BACKEND_UNAVAILABLE
