"""
Exception classes for the session persistence layer.

This module provides the SessionError base class, the CodecError and
StoreError subclasses, and convenience factory functions for creating
them with the proper error codes.
"""

from typing import Any, Optional

from errors.codes import ErrorCode, get_default_log_level


class SessionError(Exception):
    """
    Base exception class for all session-layer errors.

    This exception provides structured error information including:
    - error_code: A standardized error code from the ErrorCode enum
    - message: A human-readable error message
    - log_level: The level the error is reported at
    - details: Optional additional context (e.g., operation, table name)

    Example:
        raise StoreError(
            error_code=ErrorCode.SESSION_STORE_UNAVAILABLE,
            message="DynamoDB get_item failed",
            details={"operation": "get_item", "table": "bot-session-dynamodb"}
        )
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        log_level: Optional[int] = None,
        details: Optional[dict[str, Any]] = None
    ):
        """
        Initialize a SessionError.

        Args:
            error_code: The error code from the ErrorCode enum
            message: A human-readable error message
            log_level: The reporting level (defaults to the error code's default)
            details: Optional dictionary with additional error context
        """
        self.error_code = error_code
        self.message = message
        self.log_level = log_level or get_default_log_level(error_code)
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the exception to a dictionary for JSON serialization.

        Returns:
            Dictionary containing error_code, message, and details
        """
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error_code={self.error_code.value!r}, "
            f"message={self.message!r}, details={self.details!r})"
        )


class CodecError(SessionError):
    """Raised when a session cannot be packed into or unpacked from a payload."""


class StoreError(SessionError):
    """Raised when the backing key-value store fails."""


# Convenience factory functions for common error types

def codec_error(
    message: str,
    details: Optional[dict[str, Any]] = None
) -> CodecError:
    """Create a codec error exception."""
    return CodecError(
        error_code=ErrorCode.CODEC_ERROR,
        message=message,
        details=details
    )


def store_unavailable(
    message: str = "Session store unavailable",
    details: Optional[dict[str, Any]] = None
) -> StoreError:
    """Create a session store unavailable exception."""
    return StoreError(
        error_code=ErrorCode.SESSION_STORE_UNAVAILABLE,
        message=message,
        details=details
    )


def internal_error(
    message: str = "An unexpected error occurred",
    details: Optional[dict[str, Any]] = None
) -> SessionError:
    """Create an internal error exception."""
    return SessionError(
        error_code=ErrorCode.INTERNAL_ERROR,
        message=message,
        details=details
    )
