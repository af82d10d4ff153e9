"""
Explicit result type for session operations.

Store and codec calls inside the lifecycle manager return a SessionResult
instead of raising, so callers can tell "empty session" from "failed to
load" and tests can assert on the exact error that occurred.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from errors.exceptions import SessionError

T = TypeVar("T")


@dataclass(frozen=True)
class SessionResult(Generic[T]):
    """
    Outcome of a session operation.

    Attributes:
        value: The produced value when the operation succeeded.
        error: The SessionError when the operation failed.
    """
    value: Optional[T] = None
    error: Optional[SessionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "SessionResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SessionError) -> "SessionResult[T]":
        return cls(error=error)

    def value_or(self, default: Optional[T] = None) -> Optional[T]:
        """Return the value, or ``default`` when the operation failed."""
        if self.error is not None:
            return default
        return self.value
