"""
Tests for the process entry point and logging configuration.
"""

import asyncio
import json
from unittest.mock import patch

import pytest
from redis.exceptions import RedisError

from redis_brain.config.provider import EnvConfigProvider
from redis_brain.logging_config import get_logging_config
from redis_brain.main import run

ENVIRON = {
    "REDIS_URL": "redis://localhost:6379/testbot",
    "REDIS_BRAIN_RECONNECT_DELAY": "0",
}


@pytest.mark.asyncio
async def test_run_saves_brain_on_stop(mock_redis_with_data):
    stop = asyncio.Event()

    with patch(
        "redis_brain.modules.storage.storage.create_client", return_value=mock_redis_with_data
    ):
        task = asyncio.create_task(run(EnvConfigProvider(ENVIRON), stop))
        await asyncio.sleep(0.05)
        stop.set()
        await task

    stored = json.loads(mock_redis_with_data._storage["testbot:storage"])
    assert stored == {"users": {}, "_private": {}}
    mock_redis_with_data.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_reraises_load_failure(mock_redis):
    """Test a failed load closes the connection and stops the process."""
    mock_redis.get.side_effect = RedisError("MISCONF")

    with patch("redis_brain.modules.storage.storage.create_client", return_value=mock_redis):
        with pytest.raises(RedisError):
            await run(EnvConfigProvider(ENVIRON), asyncio.Event())

    mock_redis.set.assert_not_awaited()
    mock_redis.aclose.assert_awaited_once()


def test_logging_config_level():
    config = get_logging_config("DEBUG")

    assert config["loggers"]["redis_brain"]["level"] == "DEBUG"
    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["redis"]["level"] == "WARNING"
