"""
Storage Module - Black Box Interface

Purpose: Own the single Redis connection the brain is persisted through
Interface: open(), disconnect(), client
Hidden: Client construction, authentication, ready check, reconnects

Can be replaced with any storage backend without affecting other modules.
"""

from .storage import StorageModule, create_client, is_connection_refused

__all__ = ["StorageModule", "create_client", "is_connection_refused"]
