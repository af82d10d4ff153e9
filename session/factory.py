"""
Construction helpers wiring settings, options, store and manager together.
"""

from typing import Any, Mapping, Optional

from config.settings import Settings, get_settings
from session.dynamodb_store import DynamoDBSessionStore
from session.manager import OnError, SessionManager
from session.memory_store import InMemorySessionStore
from session.options import SessionOptions
from session.store import SessionStore
from telemetry.service import get_telemetry_service, initialize_telemetry


def create_session_store(settings: Settings, options: SessionOptions) -> SessionStore:
    """
    Build the store selected by ``settings.session_store_type``.

    The returned store is not connected yet; call ``await store.connect()``.
    """
    if settings.session_store_type == "memory":
        return InMemorySessionStore()
    return DynamoDBSessionStore(options.dynamodb)


def create_session_manager(
    settings: Optional[Settings] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    on_error: Optional[OnError] = None,
    init_telemetry: bool = True,
) -> SessionManager:
    """
    Build a SessionManager from environment settings and code overrides.

    Unless ``init_telemetry`` is False, the global telemetry service is
    initialized from the same settings (log level, OTLP endpoint) when the
    host application has not initialized one already.

    Example:
        manager = create_session_manager(overrides={
            "compression": {"enabled": True},
            "get_session_key": lambda ctx: str(ctx.chat.id),
        })
        await manager.store.connect()

    Raises:
        ConfigurationError: If the settings or merged options are invalid.
    """
    settings = settings or get_settings()
    options = SessionOptions.from_settings(settings, overrides)

    if init_telemetry and get_telemetry_service() is None:
        initialize_telemetry(settings)

    store = create_session_store(settings, options)
    return SessionManager(store, options, on_error=on_error)
