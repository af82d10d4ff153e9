"""
Session store abstraction for external session storage.

This module defines the record type and the abstract interface every
session store implements. A store persists one SessionRecord per session
key and knows nothing about compression; it stores whatever payload the
codec hands it in its native form.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

# Attribute names of a stored record
SESSION_KEY_ATTRIBUTE = "SessionKey"
SESSION_VALUE_ATTRIBUTE = "SessionValue"


@dataclass
class SessionRecord:
    """
    A persisted session.

    Attributes:
        session_key: Key the record is stored under.
        session_value: Stored payload (a map, or a binary when compressed).
    """
    session_key: str
    session_value: Any

    def to_item(self) -> dict[str, Any]:
        """Return the record in its wire shape."""
        return {
            SESSION_KEY_ATTRIBUTE: self.session_key,
            SESSION_VALUE_ATTRIBUTE: self.session_value,
        }


class SessionStore(ABC):
    """
    Abstract base class for session storage implementations.

    All methods are async to support non-blocking I/O operations with
    external storage systems. Operations that fail because of the backend
    raise StoreError; "not found" is never an error.
    """

    async def connect(self) -> None:
        """Acquire backend resources. Called once before first use."""

    async def disconnect(self) -> None:
        """Release backend resources. Called during shutdown."""

    @abstractmethod
    async def create(self, session_key: str, payload: Any) -> None:
        """
        Insert a new session record.

        Creating a record that already exists overwrites it.

        Args:
            session_key: Key of the session.
            payload: Initial stored payload.

        Raises:
            StoreError: If the backend request fails.
        """
        pass

    @abstractmethod
    async def read(self, session_key: str) -> Optional[SessionRecord]:
        """
        Look up a session record.

        Args:
            session_key: Key of the session.

        Returns:
            The record, or None if no record exists for the key.

        Raises:
            StoreError: If the backend request fails.
        """
        pass

    @abstractmethod
    async def update(self, session_key: str, payload: Any) -> None:
        """
        Replace the stored payload of a session.

        Args:
            session_key: Key of the session.
            payload: New stored payload.

        Raises:
            StoreError: If the backend request fails.
        """
        pass

    @abstractmethod
    async def delete(self, session_key: str) -> None:
        """
        Delete a session record.

        This operation is idempotent - deleting a missing record
        does not raise an error.

        Raises:
            StoreError: If the backend request fails.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check connectivity and health of the session store.

        Returns:
            True if the store is reachable, False otherwise.

        Note:
            This method should not raise exceptions - connectivity issues
            should be caught and result in a False return value.
        """
        pass
