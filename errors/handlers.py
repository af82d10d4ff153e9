"""
Error reporting adapters for the session layer.

Session storage failures never propagate past the middleware boundary.
This module holds the adapters that downgrade them instead:

- report_session_error logs a SessionError with its structured context
- ErrorResponse / build_error_response produce the generic JSON body
  returned by the HTTP adapter when a request could not be completed
"""

import logging
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from errors.codes import ErrorCode
from errors.exceptions import SessionError

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """
    Structured error response model.

    Returned by the HTTP session middleware when the wrapped request
    failed and no response could be produced.
    """
    error_code: str
    message: str
    details: Optional[dict[str, Any]] = None
    session_key: Optional[str] = None


def report_session_error(
    operation: str,
    key: Optional[str],
    exc: SessionError,
    log: Optional[logging.Logger] = None,
) -> None:
    """
    Log a session error without raising it.

    Args:
        operation: Lifecycle operation that failed (e.g. "get_session")
        key: Session key the operation targeted
        exc: The error that occurred
        log: Logger to write to (defaults to this module's logger)
    """
    (log or logger).log(
        exc.log_level,
        f"Session {operation} failed: {exc.message}",
        extra={
            "extra_data": {
                "operation": operation,
                "session_key": key,
                "error_code": exc.error_code.value,
                "details": exc.details,
            }
        },
        exc_info=exc if exc.__cause__ is not None else None,
    )


def build_error_response(session_key: Optional[str] = None) -> JSONResponse:
    """
    Build the generic 500 response used when request handling failed.

    Internal details are never exposed; the failure itself has already
    been logged by the session interceptor.

    Args:
        session_key: Session key of the failed request, if one was derived

    Returns:
        JSONResponse with a generic INTERNAL_ERROR body
    """
    error_response = ErrorResponse(
        error_code=ErrorCode.INTERNAL_ERROR.value,
        message="An unexpected error occurred. Please try again later.",
        session_key=session_key,
    )

    return JSONResponse(
        status_code=500,
        content=error_response.model_dump(exclude_none=True),
    )
