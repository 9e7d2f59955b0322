"""Host brain interfaces following Black Box Design principles."""
from typing import Any, Callable, Dict, Optional, Protocol

SaveHandler = Callable[[Optional[Dict[str, Any]]], Any]
CloseHandler = Callable[[], Any]


class BrainHost(Protocol):
    """Protocol for the host brain a persistence module is attached to."""

    def merge_data(self, data: Dict[str, Any]) -> None:
        """Merge a loaded snapshot into the in-memory brain."""
        ...

    def set_auto_save(self, enabled: bool) -> None:
        """Turn periodic saving on or off."""
        ...

    def on_save(self, handler: SaveHandler) -> None:
        """
        Register a save handler.

        Args:
            handler: Called with the snapshot (or None) on every save.
                May return an awaitable.
        """
        ...

    def on_close(self, handler: CloseHandler) -> None:
        """Register a close handler. May return an awaitable."""
        ...

    def signal_connected(self) -> None:
        """Announce that the brain has been loaded from storage."""
        ...
