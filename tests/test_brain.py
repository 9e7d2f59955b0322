"""
Unit tests for the in-memory host brain.
"""

import asyncio
import logging

import pytest

from redis_brain.modules.brain import Brain


def test_private_store():
    brain = Brain()

    brain.set("greeting", "hello").set({"count": 1, "flag": False})

    assert brain.get("greeting") == "hello"
    assert brain.get("count") == 1
    assert brain.get("flag") is False
    assert brain.get("missing") is None

    brain.remove("greeting")
    assert brain.get("greeting") is None


def test_merge_data_overwrites_top_level_keys():
    brain = Brain()
    loaded = []
    brain.on("loaded", loaded.append)

    brain.merge_data({"_private": {"a": 1}, "extra": [1, 2]})

    assert brain.data == {"users": {}, "_private": {"a": 1}, "extra": [1, 2]}
    assert loaded == [brain.data]


def test_merge_empty_data_keeps_defaults():
    brain = Brain()

    brain.merge_data({})

    assert brain.data == {"users": {}, "_private": {}}


def test_save_emits_data():
    brain = Brain()
    saved = []
    brain.on_save(saved.append)

    brain.save()

    assert saved == [brain.data]


def test_signal_connected():
    brain = Brain()
    events = []
    brain.on("connected", lambda: events.append("connected"))

    brain.signal_connected()

    assert events == ["connected"]


@pytest.mark.asyncio
async def test_async_handlers_are_drained():
    brain = Brain()
    saved = []

    async def handler(data):
        await asyncio.sleep(0)
        saved.append(dict(data))

    brain.on_save(handler)
    brain.save()
    assert saved == []

    await brain.drain()
    assert saved == [brain.data]


@pytest.mark.asyncio
async def test_close_saves_then_closes():
    brain = Brain()
    events = []
    brain.on_save(lambda data: events.append("save"))
    brain.on_close(lambda: events.append("close"))

    await brain.close()

    assert events == ["save", "close"]


@pytest.mark.asyncio
async def test_failing_handler_is_logged(caplog):
    brain = Brain()

    async def handler():
        raise RuntimeError("boom")

    brain.on_close(handler)
    await brain.close()

    assert "Brain event handler failed: boom" in caplog.text


@pytest.mark.asyncio
async def test_save_interval_respects_auto_save():
    """Test periodic saves only happen while auto-save is on."""
    brain = Brain()
    saved = []
    brain.on_save(saved.append)

    brain.set_auto_save(False)
    brain.reset_save_interval(0.01)
    await asyncio.sleep(0.05)
    assert saved == []

    brain.set_auto_save(True)
    await asyncio.sleep(0.05)
    assert len(saved) >= 1

    await brain.close()
    count = len(saved)
    await asyncio.sleep(0.05)
    assert len(saved) == count
