"""
Local Cache Provider

Cache provider backed by the process-wide expiring map. Always reachable
once a namespace prefix is configured; ``configure_target`` is ignored.
Async operations complete synchronously.

Author: System Architect
Date: 2025-12-10
"""

from datetime import timedelta

from cache_provider.core.keys import InvalidationPattern
from cache_provider.core.metadata import utc_now
from cache_provider.infrastructure.cache.base_provider import BaseCacheProvider
from cache_provider.infrastructure.cache.memory_store import (
    ExpiringMemoryStore,
    default_memory_store,
)


class MemoryCacheProvider(BaseCacheProvider):
    """
    In-process cache provider.

    Usage:
        provider = MemoryCacheProvider()
        provider.configure("app", "tenant-1")
        provider.add(widget, timedelta(minutes=5), "id:7")
    """

    def __init__(self, store: ExpiringMemoryStore | None = None):
        super().__init__()
        self._store = store if store is not None else default_memory_store()

    @property
    def store(self) -> ExpiringMemoryStore:
        return self._store

    def _target_available(self) -> bool:
        return True

    async def _target_available_async(self) -> bool:
        return True

    def _read(self, key: str) -> str | None:
        return self._store.get(key)

    async def _read_async(self, key: str) -> str | None:
        return self._read(key)

    def _write(self, key: str, text: str, ttl: timedelta) -> None:
        self._store.set(key, text, utc_now() + ttl)

    async def _write_async(self, key: str, text: str, ttl: timedelta) -> None:
        self._write(key, text, ttl)

    def _remove(self, *keys: str) -> int:
        return sum(1 for key in keys if self._store.remove(key))

    async def _remove_async(self, *keys: str) -> int:
        return self._remove(*keys)

    def _remove_matching(self, pattern: InvalidationPattern) -> int:
        matches = [key for key in self._store.keys() if pattern.matches(key)]
        return self._remove(*matches)

    async def _remove_matching_async(self, pattern: InvalidationPattern) -> int:
        return self._remove_matching(pattern)
