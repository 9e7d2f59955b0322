"""
Brain Module - Black Box Interface

Purpose: The host's in-memory key-value brain
Interface: set(), get(), remove(), merge_data(), save(), close()
Hidden: Event dispatch, save interval scheduling

Persistence backends only see the BrainHost protocol.
"""

from .brain import Brain
from .interfaces import BrainHost

__all__ = ["Brain", "BrainHost"]
