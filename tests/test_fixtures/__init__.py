"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .cache_factory import CacheTestFactory
from .redis_factory import FakeAsyncRedis, FakeRedis, FakeRedisServer, RedisTestFactory

__all__ = [
    "CacheTestFactory",
    "RedisTestFactory",
    "FakeRedisServer",
    "FakeRedis",
    "FakeAsyncRedis",
]
