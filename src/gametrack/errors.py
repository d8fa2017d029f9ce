"""Error kinds for gametrack.

One exception type tagged with a kind. The request layer dispatches on
the kind instead of on exception subclasses.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Failure kinds; the value is the status-equivalent code."""

    VALIDATION = 400
    COMPUTATION = 422
    STORAGE = 500

    @property
    def status_code(self) -> int:
        return self.value


class ResultError(Exception):
    """Raised by the result store and aggregation engine.

    Attributes:
        kind: Which failure this is.
        message: Human-readable description.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"ResultError({self.kind.name}, {self.message!r})"
