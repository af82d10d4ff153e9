"""
In-process session store.

Keeps records in a dictionary. Payloads are deep-copied on the way in and
out so callers observe the same isolation they would get from a remote
store. Intended for development and tests; data does not survive a restart.
"""

import copy
from typing import Any, Optional

from session.store import SessionRecord, SessionStore


class InMemorySessionStore(SessionStore):
    """Dictionary-backed SessionStore with DynamoDB-like upsert semantics."""

    def __init__(self):
        self._records: dict[str, Any] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, session_key: str) -> bool:
        return session_key in self._records

    async def create(self, session_key: str, payload: Any) -> None:
        self._records[session_key] = copy.deepcopy(payload)

    async def read(self, session_key: str) -> Optional[SessionRecord]:
        if session_key not in self._records:
            return None
        return SessionRecord(session_key, copy.deepcopy(self._records[session_key]))

    async def update(self, session_key: str, payload: Any) -> None:
        # UpdateItem creates the item when it does not exist
        self._records[session_key] = copy.deepcopy(payload)

    async def delete(self, session_key: str) -> None:
        self._records.pop(session_key, None)

    async def health_check(self) -> bool:
        return True
