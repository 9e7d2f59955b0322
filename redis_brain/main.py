#!/usr/bin/env python3
"""
redis-brain - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Loads the brain and keeps it saved until shutdown

All business logic is in the modules, following black box principles.
"""

import asyncio
import logging
import signal
from typing import Optional

from redis_brain.config.provider import ConfigProvider, EnvConfigProvider
from redis_brain.logging_config import configure_logging
from redis_brain.modules.brain import Brain
from redis_brain.modules.persistence import PersistenceModule
from redis_brain.modules.storage import StorageModule

logger = logging.getLogger(__name__)


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform/loop, fall back to KeyboardInterrupt
            pass


async def run(
    config_provider: Optional[ConfigProvider] = None,
    stop: Optional[asyncio.Event] = None,
) -> None:
    """
    Run the brain until stopped.

    Args:
        config_provider: Configuration source, environment by default
        stop: Event ending the run, set by SIGINT/SIGTERM by default

    Raises:
        RedisError: If the stored brain could not be loaded
    """
    provider = config_provider or EnvConfigProvider()
    brain_config = provider.get_brain_config()
    target = provider.get_connection_target()

    if stop is None:
        stop = asyncio.Event()
        _install_signal_handlers(stop)

    brain = Brain(save_interval=brain_config.save_interval)
    storage = StorageModule(target, reconnect_delay=brain_config.reconnect_delay)
    persistence = PersistenceModule(brain, storage)
    persistence.attach()

    logger.info(f"Starting redis-brain for {target.storage_key}...")
    brain.reset_save_interval()

    load_task = asyncio.create_task(persistence.start())
    stop_task = asyncio.create_task(stop.wait())

    try:
        done, _ = await asyncio.wait({load_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        if load_task in done and load_task.exception() is None:
            await stop_task
    finally:
        for task in (load_task, stop_task):
            if not task.done():
                task.cancel()

        logger.info("Shutting down redis-brain...")
        await brain.close()
        logger.info("redis-brain shutdown complete")

    if load_task.done() and not load_task.cancelled():
        # Re-raise load failures now that the connection is closed
        load_task.result()


def main() -> None:
    provider = EnvConfigProvider()
    configure_logging(provider.get_brain_config().log_level)
    asyncio.run(run(provider))


if __name__ == "__main__":
    main()
