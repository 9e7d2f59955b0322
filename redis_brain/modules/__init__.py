"""
redis-brain Modules

- brain: the host brain and the BrainHost protocol persistence depends on
- storage: the one Redis connection, with auth and ready check
- persistence: load on startup, save on every brain save, close on shutdown

No module reaches into another's internals.
"""
