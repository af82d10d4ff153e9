"""
Session middleware for bot update handlers.

The interceptor loads the session for the incoming update, binds a
SessionHandle onto the handler context, runs the handler, and saves the
session afterwards. Session storage problems never break the handler
pipeline: they are logged and the update is handled anyway.

Usage with any framework that calls middleware as ``(ctx, call_next)``:

    interceptor = SessionInterceptor(manager)

    async def handle(ctx):
        session = ctx.session.get()
        session["count"] = session.get("count", 0) + 1

    await interceptor(ctx, lambda: handle(ctx))
"""

import inspect
import logging
from collections.abc import Mapping, MutableMapping
from contextvars import ContextVar
from typing import Any, Awaitable, Callable, Optional

from errors.exceptions import CodecError
from session.manager import SessionManager
from session.options import GetSessionKey
from telemetry.service import reset_correlation_key, set_correlation_key

logger = logging.getLogger(__name__)

# Handle of the session bound to the update being handled
current_session_var: ContextVar[Optional["SessionHandle"]] = ContextVar("current_session", default=None)


class SessionHandle:
    """
    Accessor for the session of one in-flight update.

    ``get()`` returns the live session dict, so in-place mutations are
    saved. ``set()`` replaces the session with a shallow copy of the given
    mapping; it does not merge.

    Attributes:
        key: Session key the handle belongs to.
        loaded: False when the session could not be loaded from the store.
        assigned: True once the handler has replaced the session, through
            set() or by assigning the context property directly.
    """

    def __init__(self, key: str, value: Optional[dict[str, Any]], loaded: bool = True):
        self.key = key
        self._value = value
        self.loaded = loaded
        self.assigned = False

    def get(self) -> Optional[dict[str, Any]]:
        return self._value

    def set(self, value: Optional[Mapping[str, Any]]) -> None:
        self._value = dict(value) if value is not None else {}
        self.assigned = True

    value = property(get, set)

    def __repr__(self) -> str:
        return f"SessionHandle(key={self.key!r}, value={self._value!r})"


def get_current_session() -> Optional[SessionHandle]:
    """
    Get the session handle of the update being handled.

    Returns:
        The handle, or None outside of a session-enabled handler
    """
    return current_session_var.get()


class SessionInterceptor:
    """
    Loads, binds and saves the session around a handler call.

    Attributes:
        manager: Session lifecycle manager.
        get_session_key: Context -> key function (sync or async).
        property_name: Name the handle is bound under on the context.
    """

    def __init__(
        self,
        manager: SessionManager,
        get_session_key: Optional[GetSessionKey] = None,
        property_name: Optional[str] = None,
    ):
        self.manager = manager
        self.get_session_key = get_session_key or manager.options.get_session_key
        self.property_name = property_name or manager.options.property_name

    async def derive_key(self, ctx: Any) -> Optional[str]:
        key = self.get_session_key(ctx)
        if inspect.isawaitable(key):
            key = await key
        return str(key) if key else None

    def bind_session(self, ctx: Any, handle: SessionHandle) -> None:
        """Attach the handle to the context: item for mappings, attribute otherwise."""
        if isinstance(ctx, MutableMapping):
            ctx[self.property_name] = handle
        else:
            setattr(ctx, self.property_name, handle)

    def bound_session(self, ctx: Any) -> Any:
        """Read back whatever is bound under the property name."""
        if isinstance(ctx, MutableMapping):
            return ctx.get(self.property_name)
        return getattr(ctx, self.property_name, None)

    async def __call__(self, ctx: Any, call_next: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run ``call_next`` with the session bound on ``ctx``.

        Returns:
            The result of ``call_next``, or None if loading the session,
            the handler or saving the session raised.
        """
        key = await self.derive_key(ctx)
        if not key:
            return await call_next()

        token = set_correlation_key(key)
        try:
            return await self._handle(ctx, call_next, key)
        except Exception:
            logger.exception(
                "Session middleware swallowed a handler failure",
                extra={"extra_data": {"session_key": key}}
            )
            return None
        finally:
            reset_correlation_key(token)

    async def _handle(self, ctx: Any, call_next: Callable[[], Awaitable[Any]], key: str) -> Any:
        loaded = await self.manager.try_get_session(key)
        if loaded.ok:
            handle = SessionHandle(key, loaded.value)
        else:
            self.manager.report("get_session", key, loaded.error)
            if isinstance(loaded.error, CodecError):
                # unreadable record: start over, the save below replaces or deletes it
                handle = SessionHandle(key, {})
            else:
                handle = SessionHandle(key, None, loaded=False)

        self.bind_session(ctx, handle)
        handle_token = current_session_var.set(handle)
        try:
            result = await call_next()
        finally:
            current_session_var.reset(handle_token)

        bound = self.bound_session(ctx)
        if bound is not handle:
            # the handler assigned the property directly
            handle.set(bound)

        # a session that failed to load is only written if the handler replaced it
        if handle.loaded or handle.assigned:
            await self.manager.save_session(key, handle.get())
        return result
