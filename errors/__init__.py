"""
Error handling module for the session layer.

This module provides structured error handling with:
- ErrorCode enum for standardized error codes
- SessionError, CodecError and StoreError exception classes
- SessionResult for explicit success/failure values
- Reporting adapters that log errors instead of propagating them
"""

from errors.codes import ErrorCode
from errors.exceptions import (
    CodecError,
    SessionError,
    StoreError,
    codec_error,
    internal_error,
    store_unavailable,
)
from errors.handlers import (
    ErrorResponse,
    build_error_response,
    report_session_error,
)
from errors.result import SessionResult

__all__ = [
    "ErrorCode",
    "SessionError",
    "CodecError",
    "StoreError",
    "codec_error",
    "internal_error",
    "store_unavailable",
    "ErrorResponse",
    "build_error_response",
    "report_session_error",
    "SessionResult",
]
