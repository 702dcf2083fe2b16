"""
Cache Module

Provides the local (in-process) and distributed (Redis) cache providers.
"""

from .base_provider import BaseCacheProvider
from .memory_provider import MemoryCacheProvider
from .memory_store import ExpiringMemoryStore, default_memory_store
from .redis_connection import RedisConnection, RedisConnectionRegistry, default_registry
from .redis_provider import RedisCacheProvider

__all__ = [
    "BaseCacheProvider",
    "MemoryCacheProvider",
    "RedisCacheProvider",
    "ExpiringMemoryStore",
    "default_memory_store",
    "RedisConnection",
    "RedisConnectionRegistry",
    "default_registry",
]
