import asyncio
import json
import logging
from typing import Any, Dict, Optional

from redis.exceptions import RedisError

from ..brain.interfaces import BrainHost
from ..storage import StorageModule, is_connection_refused

logger = logging.getLogger(__name__)


class PersistenceModule:
    def __init__(self, brain: BrainHost, storage: StorageModule):
        """
        Initialize persistence module.

        Args:
            brain: Host brain to load into and save from
            storage: Storage module owning the Redis connection
        """
        self.brain = brain
        self.storage = storage
        self.prefix = storage.target.prefix
        self.storage_key = storage.target.storage_key
        self.loaded = False
        self._write_lock = asyncio.Lock()

    def attach(self) -> None:
        """
        Hook the module into the host brain's lifecycle.

        Auto-save stays off until the first load completes, so an empty
        brain never overwrites what is already stored.
        """
        self.brain.set_auto_save(False)
        self.brain.on_save(self.save)
        self.brain.on_close(self.shutdown)

    async def start(self) -> bool:
        """
        Connect and load the stored brain.

        Returns:
            True if the brain was loaded
        """
        if not await self.storage.open():
            return False
        await self.load()
        return True

    async def load(self) -> Dict[str, Any]:
        """
        Load the stored brain and merge it into the host.

        Returns:
            The merged snapshot

        Raises:
            RedisError: If the read fails
        """
        reply = await self.storage.client.get(self.storage_key)

        if reply:
            logger.info(f"Data for {self.prefix} brain retrieved from Redis")
            data = json.loads(reply)
        else:
            logger.info(f"Initializing new data for {self.prefix} brain")
            data = {}

        self.brain.merge_data(data)
        self.brain.signal_connected()

        self.loaded = True
        self.brain.set_auto_save(True)
        return data

    async def save(self, data: Optional[Dict[str, Any]] = None) -> bool:
        """
        Write a brain snapshot, replacing whatever is stored.

        Args:
            data: Snapshot to store, None stores an empty brain

        Returns:
            True if the snapshot was written
        """
        if not self.loaded:
            logger.warning(f"Skipping save for {self.prefix} brain, not loaded from Redis yet")
            return False

        payload = json.dumps(data if data is not None else {})

        async with self._write_lock:
            if self.storage.closed:
                logger.warning(f"Skipping save for {self.prefix} brain, Redis connection is closed")
                return False
            try:
                await self.storage.client.set(self.storage_key, payload)
            except RedisError as e:
                if is_connection_refused(e):
                    # Redis is down, the next save will try again
                    logger.debug(f"Redis refused save for {self.prefix} brain: {e}")
                else:
                    logger.error(f"Failed to save {self.prefix} brain to Redis: {e}", exc_info=e)
                return False

        return True

    async def shutdown(self) -> None:
        """Let in-flight writes finish, then close the connection."""
        async with self._write_lock:
            await self.storage.disconnect()
