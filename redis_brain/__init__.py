"""
redis-brain - Redis persistence for a chat bot's brain

Keeps the bot's in-memory key-value brain in Redis so state survives
process restarts.

Architecture:
- Each module is self-contained with clear interfaces
- The host brain is only reached through the BrainHost protocol
- Configuration is resolved once and passed down by value

Modules:
- brain: Host brain interface and in-memory implementation
- storage: Redis connection management
- persistence: Loading and saving the brain snapshot
"""

__version__ = "1.0.0"
