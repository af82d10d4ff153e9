"""
Shared pytest fixtures and configuration for all tests.
"""
import os
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

# Hypothesis configuration for property-based testing
from hypothesis import settings, Verbosity, Phase

from session.manager import SessionManager
from session.memory_store import InMemorySessionStore
from session.options import CompressionConfig, SessionOptions

# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,  # Disable deadline for async tests
    print_blob=True,
)

# CI profile: more thorough testing for continuous integration
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,
)

# Debug profile: minimal examples for quick debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],  # Skip shrinking for speed
)

# Fast profile: quick smoke tests
settings.register_profile(
    "fast",
    max_examples=20,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture
def memory_store() -> InMemorySessionStore:
    """Empty in-process session store."""
    return InMemorySessionStore()


@pytest.fixture
def session_options() -> SessionOptions:
    """Default options: compression disabled."""
    return SessionOptions()


@pytest.fixture
def compressed_options() -> SessionOptions:
    """Options with LZMA compression enabled at level 9."""
    return SessionOptions(compression=CompressionConfig(enabled=True, level=9))


@pytest.fixture
def manager(memory_store, session_options) -> SessionManager:
    """Manager over the in-memory store, compression disabled."""
    return SessionManager(memory_store, session_options)


@pytest.fixture
def compressed_manager(memory_store, compressed_options) -> SessionManager:
    """Manager over the in-memory store, compression enabled."""
    return SessionManager(memory_store, compressed_options)


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock boto3 DynamoDB client for unit tests."""
    mock = MagicMock()
    mock.get_item = MagicMock(return_value={})
    mock.put_item = MagicMock(return_value={})
    mock.update_item = MagicMock(return_value={})
    mock.delete_item = MagicMock(return_value={})
    mock.describe_table = MagicMock(return_value={"Table": {"TableStatus": "ACTIVE"}})
    return mock


@pytest.fixture
def make_update():
    """Factory for bot update contexts carrying a sender and a chat."""
    def _make(user_id=1, chat_id=1):
        return SimpleNamespace(
            from_user=SimpleNamespace(id=user_id) if user_id is not None else None,
            chat=SimpleNamespace(id=chat_id) if chat_id is not None else None,
        )
    return _make
