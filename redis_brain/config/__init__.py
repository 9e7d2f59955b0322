"""Configuration for redis-brain."""

from .provider import (
    DEFAULT_PREFIX,
    DEFAULT_REDIS_URL,
    BrainConfig,
    ConfigProvider,
    ConnectionTarget,
    EnvConfigProvider,
)

__all__ = [
    "DEFAULT_PREFIX",
    "DEFAULT_REDIS_URL",
    "BrainConfig",
    "ConfigProvider",
    "ConnectionTarget",
    "EnvConfigProvider",
]
