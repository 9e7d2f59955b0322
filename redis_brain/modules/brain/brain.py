import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Set, Union

from .interfaces import CloseHandler, SaveHandler

logger = logging.getLogger(__name__)


class Brain:
    def __init__(self, save_interval: int = 5):
        """
        Initialize the in-memory brain.

        Args:
            save_interval: Seconds between automatic saves
        """
        self.data: Dict[str, Any] = {"users": {}, "_private": {}}
        self.auto_save = True
        self.save_interval = save_interval
        self._handlers: Dict[str, List[Callable[..., Any]]] = defaultdict(list)
        self._pending: Set[asyncio.Future] = set()
        self._save_task: Optional[asyncio.Task] = None

    # Events

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        """Register a handler for an event."""
        self._handlers[event].append(handler)

    def emit(self, event: str, *args: Any) -> None:
        """
        Call every handler registered for an event.

        Awaitable results are scheduled on the running loop and tracked
        until drain() collects them.
        """
        for handler in list(self._handlers[event]):
            result = handler(*args)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)

    def on_save(self, handler: SaveHandler) -> None:
        self.on("save", handler)

    def on_close(self, handler: CloseHandler) -> None:
        self.on("close", handler)

    def signal_connected(self) -> None:
        self.emit("connected")

    # Private key-value store

    def set(self, key: Union[str, Dict[str, Any]], value: Any = None) -> "Brain":
        """Store a value, or every pair of a mapping, in the private namespace."""
        pairs = key if isinstance(key, dict) else {key: value}
        self.data["_private"].update(pairs)
        self.emit("loaded", self.data)
        return self

    def get(self, key: str) -> Any:
        return self.data["_private"].get(key)

    def remove(self, key: str) -> "Brain":
        self.data["_private"].pop(key, None)
        return self

    def merge_data(self, data: Optional[Dict[str, Any]]) -> None:
        """Copy the top-level keys of a loaded snapshot into the brain."""
        for key, value in (data or {}).items():
            self.data[key] = value
        self.emit("loaded", self.data)

    # Saving

    def save(self) -> None:
        self.emit("save", self.data)

    def set_auto_save(self, enabled: bool) -> None:
        self.auto_save = enabled

    def reset_save_interval(self, seconds: Optional[int] = None) -> None:
        """(Re)start the periodic save loop."""
        if seconds is not None:
            self.save_interval = seconds
        self._stop_save_interval()
        self._save_task = asyncio.ensure_future(self._save_loop())

    async def _save_loop(self) -> None:
        while True:
            await asyncio.sleep(self.save_interval)
            if self.auto_save:
                self.save()

    def _stop_save_interval(self) -> None:
        if self._save_task is not None:
            self._save_task.cancel()
            self._save_task = None

    async def drain(self) -> None:
        """Wait for scheduled handler tasks, logging any that failed."""
        while self._pending:
            tasks = list(self._pending)
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.error(f"Brain event handler failed: {result}", exc_info=result)

    async def close(self) -> None:
        """Stop saving periodically, save one last time and emit close."""
        self._stop_save_interval()
        self.save()
        self.emit("close")
        await self.drain()
