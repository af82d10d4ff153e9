"""
Session management module for bot conversations.

This module persists one session per conversation in an external store
(DynamoDB, or an in-process store during development), with optional
LZMA compression of the stored payload.
"""

from session.store import SessionRecord, SessionStore
from session.options import (
    CompressionConfig,
    DynamoDBConfig,
    SessionOptions,
    default_session_key,
)
from session.codec import PayloadCodec
from session.memory_store import InMemorySessionStore
from session.dynamodb_store import DynamoDBSessionStore
from session.manager import SessionManager
from session.factory import create_session_manager, create_session_store

__all__ = [
    "SessionRecord",
    "SessionStore",
    "CompressionConfig",
    "DynamoDBConfig",
    "SessionOptions",
    "default_session_key",
    "PayloadCodec",
    "InMemorySessionStore",
    "DynamoDBSessionStore",
    "SessionManager",
    "create_session_manager",
    "create_session_store",
]
