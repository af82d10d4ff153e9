"""
Session middleware for webhook-fed bots served by FastAPI/Starlette.

Binds the session handle on ``request.state.<property_name>`` for the
duration of the request and saves it once the endpoint has responded.
The session key comes from a function of the request; by default the
X-Session-Key header.
"""

from typing import Any, Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from errors.handlers import build_error_response
from middleware.session import SessionHandle, SessionInterceptor
from session.manager import SessionManager
from session.options import GetSessionKey

# Header carrying the session key
SESSION_KEY_HEADER = "X-Session-Key"


def header_session_key(request: Request) -> Optional[str]:
    """Read the session key from the X-Session-Key header."""
    return request.headers.get(SESSION_KEY_HEADER)


class _RequestSessionInterceptor(SessionInterceptor):
    """Binds the handle on request.state instead of on the request itself."""

    def bind_session(self, ctx: Any, handle: SessionHandle) -> None:
        setattr(ctx.state, self.property_name, handle)

    def bound_session(self, ctx: Any) -> Any:
        return getattr(ctx.state, self.property_name, None)


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Middleware that loads and saves a session around each request.

    Requests without a session key pass through untouched. If the endpoint
    (or the session store) fails, the failure is logged by the interceptor
    and a generic 500 ErrorResponse is returned.
    """

    def __init__(
        self,
        app: ASGIApp,
        manager: SessionManager,
        get_session_key: Optional[GetSessionKey] = None,
    ):
        """
        Initialize the middleware.

        Args:
            app: The ASGI application to wrap
            manager: Session lifecycle manager
            get_session_key: Request -> key function (sync or async);
                defaults to the X-Session-Key header
        """
        super().__init__(app)
        self.interceptor = _RequestSessionInterceptor(
            manager,
            get_session_key=get_session_key or header_session_key,
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        response = await self.interceptor(request, lambda: call_next(request))

        if response is None:
            handle = getattr(request.state, self.interceptor.property_name, None)
            return build_error_response(
                session_key=handle.key if isinstance(handle, SessionHandle) else None
            )

        return response
