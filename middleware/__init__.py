"""
Middleware components for session handling.

- SessionInterceptor: framework-neutral ``(ctx, call_next)`` middleware
- SessionMiddleware: FastAPI/Starlette adapter for webhook endpoints
"""

from middleware.session import (
    SessionHandle,
    SessionInterceptor,
    current_session_var,
    get_current_session,
)
from middleware.asgi import (
    SESSION_KEY_HEADER,
    SessionMiddleware,
    header_session_key,
)

__all__ = [
    "SessionHandle",
    "SessionInterceptor",
    "current_session_var",
    "get_current_session",
    "SESSION_KEY_HEADER",
    "SessionMiddleware",
    "header_session_key",
]
