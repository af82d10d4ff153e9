"""
Session lifecycle manager.

Decides whether a session exists, creates it on a miss, packs and unpacks
its payload, and commits or clears it after a request.

Every operation comes in two forms:

- ``try_<operation>`` returns a SessionResult carrying either the value or
  the SessionError that occurred. The interceptor uses these to tell an
  empty session from a failed load.
- ``<operation>`` applies the reporting policy: failures are logged, sent
  to the optional ``on_error`` callback and counted as a ``session.errors``
  metric, then downgraded to None. Nothing is raised to the caller, so a
  failed save is indistinguishable from a successful one by return value.
"""

import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional, TypeVar

from errors.exceptions import SessionError, internal_error
from errors.handlers import report_session_error
from errors.result import SessionResult
from session.codec import PayloadCodec
from session.options import SessionOptions
from session.store import SessionStore
from telemetry.service import record_metric

logger = logging.getLogger(__name__)

T = TypeVar("T")

OnError = Callable[[str, str, SessionError], None]


class SessionManager:
    """
    Loads, creates, saves and clears sessions in a SessionStore.

    Attributes:
        store: Backing store for session records.
        options: Immutable session options.
        codec: Codec built from the compression options.
    """

    def __init__(
        self,
        store: SessionStore,
        options: Optional[SessionOptions] = None,
        on_error: Optional[OnError] = None,
    ):
        """
        Args:
            store: Backing store for session records.
            options: Session options; defaults to SessionOptions().
            on_error: Called as ``on_error(operation, key, error)`` for every
                failure the public operations swallow.
        """
        self.store = store
        self.options = options or SessionOptions()
        self.codec = PayloadCodec(self.options.compression)
        self.on_error = on_error

    async def _attempt(self, operation: str, key: str,
                       action: Callable[[], Awaitable[T]]) -> SessionResult[T]:
        try:
            return SessionResult.success(await action())
        except SessionError as e:
            return SessionResult.failure(e)
        except Exception as e:
            error = internal_error(
                f"Unexpected {type(e).__name__} during {operation}",
                details={"reason": str(e)},
            )
            error.__cause__ = e
            return SessionResult.failure(error)

    def report(self, operation: str, key: str, error: SessionError) -> None:
        """Log a swallowed failure and publish it on the error channel."""
        report_session_error(operation, key, error, log=logger)
        record_metric(
            "session.errors",
            1,
            tags={"operation": operation, "error_code": error.error_code.value},
        )
        if self.on_error is None:
            return
        try:
            self.on_error(operation, key, error)
        except Exception:
            logger.exception(
                "Session on_error callback failed",
                extra={"extra_data": {"operation": operation, "session_key": key}}
            )

    def _settle(self, operation: str, key: str, result: SessionResult[T]) -> Optional[T]:
        if not result.ok:
            self.report(operation, key, result.error)
        return result.value_or(None)

    # Explicit-result operations

    async def try_create_session(self, key: str) -> SessionResult[None]:
        """Store an empty session under ``key``."""
        async def action() -> None:
            payload = await self.codec.pack({})
            await self.store.create(key, payload)
            logger.debug("Session created", extra={"extra_data": {"session_key": key}})

        return await self._attempt("create_session", key, action)

    async def try_get_session(self, key: str) -> SessionResult[dict[str, Any]]:
        """
        Load the session stored under ``key``, creating it when missing.

        A missing record is created as an empty session; a failure to create
        it is reported and ignored, and the empty session is still returned.
        """
        async def action() -> dict[str, Any]:
            record = await self.store.read(key)
            if record is None:
                await self.create_session(key)
                payload = await self.codec.pack({})
            else:
                payload = record.session_value
            return await self.codec.unpack(payload)

        return await self._attempt("get_session", key, action)

    async def try_save_session(self, key: str, session: Optional[Mapping[str, Any]]) -> SessionResult[None]:
        """
        Persist ``session`` under ``key``.

        An empty or missing session deletes the record instead; emptying
        the session is how a conversation's state is removed.
        """
        if not session:
            return await self.try_clear_session(key)

        async def action() -> None:
            payload = await self.codec.pack(session)
            await self.store.update(key, payload)

        return await self._attempt("save_session", key, action)

    async def try_clear_session(self, key: str) -> SessionResult[None]:
        """Delete the record stored under ``key``."""
        async def action() -> None:
            await self.store.delete(key)
            logger.debug("Session cleared", extra={"extra_data": {"session_key": key}})

        return await self._attempt("clear_session", key, action)

    # Reporting operations

    async def create_session(self, key: str) -> None:
        self._settle("create_session", key, await self.try_create_session(key))

    async def get_session(self, key: str) -> Optional[dict[str, Any]]:
        """
        Return the session for ``key``, or None if it could not be loaded.

        None means a store or codec failure; a new conversation yields {}.
        """
        return self._settle("get_session", key, await self.try_get_session(key))

    async def save_session(self, key: str, session: Optional[Mapping[str, Any]]) -> None:
        result = await self.try_save_session(key, session)
        operation = "save_session" if session else "clear_session"
        self._settle(operation, key, result)

    async def clear_session(self, key: str) -> None:
        self._settle("clear_session", key, await self.try_clear_session(key))
