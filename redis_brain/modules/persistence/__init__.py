"""
Persistence Module - Black Box Interface

Purpose: Keep the host brain in Redis across restarts
Interface: attach(), start(), load(), save(), shutdown()
Hidden: Storage key layout, serialization, write ordering

Talks to the host only through BrainHost and to Redis only through StorageModule.
"""

from .persistence import PersistenceModule

__all__ = ["PersistenceModule"]
