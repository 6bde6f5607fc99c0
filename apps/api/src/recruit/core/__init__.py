"""
Core module - Configuration, storage, security, and notification utilities.
"""

from recruit.core.config import get_settings, settings
from recruit.core.redis import close_redis, init_redis
from recruit.core.store import (
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    StoreError,
    get_store,
    set_store,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Redis
    "init_redis",
    "close_redis",
    # Store
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "StoreError",
    "get_store",
    "set_store",
]
