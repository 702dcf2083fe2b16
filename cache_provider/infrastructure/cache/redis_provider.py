"""
Distributed Cache Provider

Cache provider backed by a shared redis store. Connections come from a
``RedisConnectionRegistry`` so providers pointing at the same server share
clients.

Storage mapping:
    write       SET key text PX <ttl-ms>
    read        GET key
    remove      DEL key...
    invalidate  SCAN MATCH <escaped-base>.* then DEL base and matches in batches

Redis failures surface as ``CacheConnectionError`` (unreachable) or
``CacheOperationError`` (anything else).

Author: System Architect
Date: 2025-12-11
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from cache_provider.core.config.constants import (
    DEFAULT_DATABASE_INSTANCE,
    DELETE_BATCH_SIZE,
    SCAN_BATCH_SIZE,
)
from cache_provider.core.exceptions import CacheConnectionError, CacheOperationError
from cache_provider.core.keys import InvalidationPattern
from cache_provider.core.logging import get_logger, redact_credentials
from cache_provider.infrastructure.cache.base_provider import BaseCacheProvider
from cache_provider.infrastructure.cache.redis_connection import (
    RedisConnection,
    RedisConnectionRegistry,
    default_registry,
)

logger = get_logger(__name__)


@contextmanager
def _redis_errors(operation: str, key: str | None = None) -> Iterator[None]:
    """Translate redis exceptions into cache exceptions."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise CacheConnectionError.from_exception(
            e, message=f"Redis {operation} failed: server unreachable", operation=operation, key=key
        ) from e
    except RedisError as e:
        raise CacheOperationError.from_exception(
            e, message=f"Redis {operation} failed", operation=operation, key=key
        ) from e


def _ttl_milliseconds(ttl: timedelta) -> int:
    return max(1, int(ttl.total_seconds() * 1000))


def _batches(keys: list[str], size: int = DELETE_BATCH_SIZE) -> Iterator[list[str]]:
    for start in range(0, len(keys), size):
        yield keys[start:start + size]


class RedisCacheProvider(BaseCacheProvider):
    """
    Redis-backed cache provider.

    Available only when a namespace prefix and a connection string are
    configured and the server answers a ping.

    Usage:
        provider = RedisCacheProvider()
        provider.configure("app", "tenant-1")
        provider.configure_target("redis://localhost:6379", 10)
        widget = await provider.retrieve_async(Widget, "id:7")
    """

    def __init__(self, registry: RedisConnectionRegistry | None = None):
        super().__init__()
        self._registry = registry if registry is not None else default_registry()
        self._connection: RedisConnection | None = None
        self._database_instance = DEFAULT_DATABASE_INSTANCE

    @property
    def database_instance(self) -> int:
        return self._database_instance

    def configure_target(
        self, connection_string: str | None, database_instance: int = DEFAULT_DATABASE_INSTANCE
    ) -> None:
        self._database_instance = database_instance
        if connection_string is None or not connection_string.strip():
            self._connection = None
            logger.warning("Redis connection string is blank, cache disabled")
            return

        self._connection = self._registry.get(connection_string)
        logger.info(
            "Redis target configured",
            connection_string=redact_credentials(connection_string),
            database_instance=database_instance,
        )

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    def _client(self):
        return self._connection.client(self._database_instance)

    def _async_client(self):
        return self._connection.async_client(self._database_instance)

    # -------------------------------------------------------------------------
    # Storage primitives
    # -------------------------------------------------------------------------

    def _target_available(self) -> bool:
        return self._connection is not None and self._connection.is_connected(
            self._database_instance
        )

    async def _target_available_async(self) -> bool:
        return self._connection is not None and await self._connection.is_connected_async(
            self._database_instance
        )

    def _read(self, key: str) -> str | None:
        with _redis_errors("get", key):
            return self._client().get(key)

    async def _read_async(self, key: str) -> str | None:
        with _redis_errors("get", key):
            return await self._async_client().get(key)

    def _write(self, key: str, text: str, ttl: timedelta) -> None:
        with _redis_errors("set", key):
            self._client().set(key, text, px=_ttl_milliseconds(ttl))

    async def _write_async(self, key: str, text: str, ttl: timedelta) -> None:
        with _redis_errors("set", key):
            await self._async_client().set(key, text, px=_ttl_milliseconds(ttl))

    def _remove(self, *keys: str) -> int:
        if not keys:
            return 0
        with _redis_errors("delete", keys[0]):
            return int(self._client().delete(*keys))

    async def _remove_async(self, *keys: str) -> int:
        if not keys:
            return 0
        with _redis_errors("delete", keys[0]):
            return int(await self._async_client().delete(*keys))

    def _remove_matching(self, pattern: InvalidationPattern) -> int:
        with _redis_errors("scan", pattern.glob):
            nested = self._client().scan_iter(match=pattern.glob, count=SCAN_BATCH_SIZE)
            keys = [pattern.base, *nested]
        return sum(self._remove(*batch) for batch in _batches(keys))

    async def _remove_matching_async(self, pattern: InvalidationPattern) -> int:
        with _redis_errors("scan", pattern.glob):
            client = self._async_client()
            nested = [
                key async for key in client.scan_iter(match=pattern.glob, count=SCAN_BATCH_SIZE)
            ]
            keys = [pattern.base, *nested]
        removed = 0
        for batch in _batches(keys):
            removed += await self._remove_async(*batch)
        return removed
