"""
Shared pytest fixtures for redis-brain tests.

This module provides common fixtures including:
- Redis mocks for storage/persistence tests
- Connection targets and host brains
"""

import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from redis_brain.config.provider import ConnectionTarget


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis():
    """Create a mock async Redis client."""
    redis = AsyncMock()

    # Connection
    redis.ping = AsyncMock(return_value=True)
    redis.info = AsyncMock(return_value={"loading": 0})
    redis.aclose = AsyncMock()

    # String operations
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)

    return redis


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes.
    """
    storage = {}

    redis = AsyncMock()

    async def mock_set(key, value, *args, **kwargs):
        storage[key] = value
        return True

    async def mock_get(key):
        return storage.get(key)

    redis.ping = AsyncMock(return_value=True)
    redis.info = AsyncMock(return_value={"loading": 0})
    redis.aclose = AsyncMock()
    redis.set = mock_set
    redis.get = mock_get
    redis._storage = storage  # Expose for test assertions

    return redis


# =============================================================================
# Connection Targets and Brains
# =============================================================================

@pytest.fixture
def target():
    """Plain host/port target with a custom prefix."""
    return ConnectionTarget.from_url("redis://localhost:6379/testbot")


@pytest.fixture
def auth_target():
    """Target carrying inline credentials."""
    return ConnectionTarget.from_url("redis://:secret@redis.example.com:6380/testbot")


@pytest.fixture
def brain_mock():
    """Host brain stand-in recording every capability call."""
    brain = MagicMock()
    brain.merge_data = MagicMock()
    brain.set_auto_save = MagicMock()
    brain.on_save = MagicMock()
    brain.on_close = MagicMock()
    brain.signal_connected = MagicMock()
    return brain
