"""
Redis Connection Registry

Owns the redis clients shared by every distributed provider in the process.

Architecture:
    RedisConnectionRegistry (one per process)
        └── RedisConnection (one per distinct connection string)
                ├── redis.Redis          (one per database instance, lazy)
                └── redis.asyncio.Redis  (one per database instance, lazy)

Each client carries its own connection pool, so opening a connection string
once and selecting databases from it is the only connection management a
provider needs.

Architectural Decision: Keyed registry instead of a module-level client
- Two providers pointing at the same server share sockets
- Creation happens exactly once per connection string, even under
  concurrent first use (double-checked lock)
- Client factories are injectable so tests never need a live server

Author: System Architect
Date: 2025-12-11
"""

import threading
import time
from collections.abc import Callable
from typing import Any

import redis
import redis.asyncio as aioredis
from redis.exceptions import RedisError

from cache_provider.core.config.settings import get_settings
from cache_provider.core.exceptions import CacheConnectionError
from cache_provider.core.logging import get_logger, redact_credentials

logger = get_logger(__name__)

# (connection_string, database_instance) -> client
ClientFactory = Callable[[str, int], Any]


# =============================================================================
# DEFAULT CLIENT FACTORIES
# =============================================================================


def _client_options() -> dict[str, Any]:
    settings = get_settings()
    return {
        "decode_responses": True,
        "socket_timeout": settings.REDIS_SOCKET_TIMEOUT,
        "socket_connect_timeout": settings.REDIS_SOCKET_CONNECT_TIMEOUT,
    }


def create_redis_client(connection_string: str, database_instance: int) -> redis.Redis:
    """
    Create a blocking client with its own connection pool.

    A database number in the URL path takes precedence over ``database_instance``.

    Raises:
        CacheConnectionError: If the connection string cannot be parsed
    """
    try:
        return redis.Redis.from_url(connection_string, db=database_instance, **_client_options())
    except ValueError as e:
        raise CacheConnectionError.from_exception(
            e,
            message="Invalid redis connection string",
            connection_string=redact_credentials(connection_string),
        ) from e


def create_async_redis_client(connection_string: str, database_instance: int) -> aioredis.Redis:
    """Async counterpart of ``create_redis_client``."""
    try:
        return aioredis.Redis.from_url(connection_string, db=database_instance, **_client_options())
    except ValueError as e:
        raise CacheConnectionError.from_exception(
            e,
            message="Invalid redis connection string",
            connection_string=redact_credentials(connection_string),
        ) from e


# =============================================================================
# CONNECTION
# =============================================================================


class RedisConnection:
    """
    Clients for one connection string, one pair per database instance.

    Liveness answers are cached for ``health_check_interval`` seconds so the
    availability guard in front of every operation does not cost a round
    trip each time.
    """

    def __init__(
        self,
        connection_string: str,
        client_factory: ClientFactory,
        async_client_factory: ClientFactory,
        health_check_interval: float,
    ):
        self._connection_string = connection_string
        self._client_factory = client_factory
        self._async_client_factory = async_client_factory
        self._health_check_interval = health_check_interval

        self._clients: dict[int, Any] = {}
        self._async_clients: dict[int, Any] = {}
        self._health: dict[int, tuple[bool, float]] = {}
        self._lock = threading.Lock()

    @property
    def connection_string(self) -> str:
        return self._connection_string

    def client(self, database_instance: int) -> redis.Redis:
        """Blocking client for a database, created on first use."""
        with self._lock:
            client = self._clients.get(database_instance)
            if client is None:
                client = self._client_factory(self._connection_string, database_instance)
                self._clients[database_instance] = client
            return client

    def async_client(self, database_instance: int) -> aioredis.Redis:
        """Async client for a database, created on first use."""
        with self._lock:
            client = self._async_clients.get(database_instance)
            if client is None:
                client = self._async_client_factory(self._connection_string, database_instance)
                self._async_clients[database_instance] = client
            return client

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def _cached_health(self, database_instance: int) -> bool | None:
        cached = self._health.get(database_instance)
        if cached is None:
            return None
        healthy, checked_at = cached
        if time.monotonic() - checked_at >= self._health_check_interval:
            return None
        return healthy

    def _record_health(
        self, database_instance: int, healthy: bool, error: Exception | None = None
    ) -> bool:
        previous = self._health.get(database_instance)
        self._health[database_instance] = (healthy, time.monotonic())
        if not healthy and (previous is None or previous[0]):
            logger.warning(
                "Redis unreachable, cache disabled until it recovers",
                connection_string=redact_credentials(self._connection_string),
                database_instance=database_instance,
                error=str(error) if error else None,
            )
        elif healthy and previous is not None and not previous[0]:
            logger.info(
                "Redis reachable again",
                connection_string=redact_credentials(self._connection_string),
                database_instance=database_instance,
            )
        return healthy

    def is_connected(self, database_instance: int) -> bool:
        """Ping the database, reusing a recent answer when there is one."""
        cached = self._cached_health(database_instance)
        if cached is not None:
            return cached
        try:
            pong = self.client(database_instance).ping()
            return self._record_health(database_instance, bool(pong))
        except (RedisError, OSError, CacheConnectionError) as e:
            return self._record_health(database_instance, False, e)

    async def is_connected_async(self, database_instance: int) -> bool:
        cached = self._cached_health(database_instance)
        if cached is not None:
            return cached
        try:
            pong = await self.async_client(database_instance).ping()
            return self._record_health(database_instance, bool(pong))
        except (RedisError, OSError, CacheConnectionError) as e:
            return self._record_health(database_instance, False, e)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close blocking clients. Async clients need ``aclose``."""
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
            self._health.clear()
        for client in clients:
            client.close()

    async def aclose(self) -> None:
        with self._lock:
            async_clients = list(self._async_clients.values())
            self._async_clients.clear()
        for client in async_clients:
            await client.aclose()
        self.close()


# =============================================================================
# REGISTRY
# =============================================================================


class RedisConnectionRegistry:
    """
    One ``RedisConnection`` per distinct connection string.

    Usage:
        registry = RedisConnectionRegistry()
        connection = registry.get("redis://localhost:6379")
        connection.client(10).get("app.Widget.7")
    """

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        async_client_factory: ClientFactory | None = None,
        health_check_interval: float | None = None,
    ):
        self._client_factory = client_factory or create_redis_client
        self._async_client_factory = async_client_factory or create_async_redis_client
        self._health_check_interval = (
            health_check_interval
            if health_check_interval is not None
            else get_settings().CACHE_HEALTH_CHECK_INTERVAL
        )
        self._connections: dict[str, RedisConnection] = {}
        self._lock = threading.Lock()

    def get(self, connection_string: str) -> RedisConnection:
        """Return the connection for a string, creating it exactly once."""
        connection = self._connections.get(connection_string)
        if connection is not None:
            return connection

        with self._lock:
            connection = self._connections.get(connection_string)
            if connection is None:
                connection = RedisConnection(
                    connection_string,
                    self._client_factory,
                    self._async_client_factory,
                    self._health_check_interval,
                )
                self._connections[connection_string] = connection
                logger.info(
                    "Redis connection registered",
                    connection_string=redact_credentials(connection_string),
                )
            return connection

    def __len__(self) -> int:
        return len(self._connections)

    def close_all(self) -> None:
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for connection in connections:
            connection.close()

    async def aclose_all(self) -> None:
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for connection in connections:
            await connection.aclose()


_registry: RedisConnectionRegistry | None = None
_registry_lock = threading.Lock()


def default_registry() -> RedisConnectionRegistry:
    """
    Get the process-wide connection registry (singleton).

    Returns:
        RedisConnectionRegistry: Shared registry instance
    """
    global _registry

    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = RedisConnectionRegistry()

    return _registry
