"""
Redis Test Factory

In-memory stand-ins for ``redis.Redis`` and ``redis.asyncio.Redis`` that
share one fake server, plus client factories to inject into a
``RedisConnectionRegistry``.
"""

import re
import time
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError


def glob_to_regex(pattern: str) -> re.Pattern:
    """Translate a redis glob (with backslash escapes) to a regex."""
    parts = []
    escaped = False
    for char in pattern:
        if escaped:
            parts.append(re.escape(char))
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


class FakeRedisServer:
    """
    Shared keyspace for fake clients, per database instance.

    Attributes:
        error: When set, every command raises it
        reachable: When False, ``ping`` raises a connection error
    """

    def __init__(self):
        self.databases: dict[int, dict[str, tuple[str, float | None]]] = {}
        self.error: Exception | None = None
        self.reachable = True
        self.commands: list[tuple[str, tuple]] = []
        self.ttls_ms: dict[str, int] = {}

    def data(self, db: int = 0) -> dict[str, tuple[str, float | None]]:
        return self.databases.setdefault(db, {})

    def keys(self, db: int = 0) -> list[str]:
        store = self.data(db)
        now = time.monotonic()
        return [key for key, (_, expires) in store.items() if expires is None or expires > now]

    def _check(self, command: str, args: tuple) -> None:
        self.commands.append((command, args))
        if self.error is not None:
            raise self.error

    def ping(self, db: int) -> bool:
        self.commands.append(("ping", ()))
        if not self.reachable:
            raise RedisConnectionError("Connection refused")
        return True

    def get(self, db: int, key: str) -> str | None:
        self._check("get", (key,))
        entry = self.data(db).get(key)
        if entry is None:
            return None
        value, expires = entry
        if expires is not None and expires <= time.monotonic():
            del self.data(db)[key]
            return None
        return value

    def set(self, db: int, key: str, value: str, px: int | None = None) -> bool:
        self._check("set", (key, value, px))
        expires = time.monotonic() + px / 1000 if px is not None else None
        self.data(db)[key] = (value, expires)
        if px is not None:
            self.ttls_ms[key] = px
        return True

    def delete(self, db: int, *keys: str) -> int:
        self._check("delete", keys)
        live = set(self.keys(db))
        removed = 0
        for key in keys:
            if self.data(db).pop(key, None) is not None and key in live:
                removed += 1
        return removed

    def scan(self, db: int, match: str | None) -> list[str]:
        self._check("scan", (match,))
        regex = glob_to_regex(match) if match else None
        return [key for key in self.keys(db) if regex is None or regex.fullmatch(key)]


class FakeRedis:
    """Blocking client double bound to one database."""

    def __init__(self, server: FakeRedisServer, db: int = 0):
        self.server = server
        self.db = db
        self.closed = False

    def ping(self) -> bool:
        return self.server.ping(self.db)

    def get(self, key: str) -> str | None:
        return self.server.get(self.db, key)

    def set(self, key: str, value: str, px: int | None = None) -> bool:
        return self.server.set(self.db, key, value, px=px)

    def delete(self, *keys: str) -> int:
        return self.server.delete(self.db, *keys)

    def scan_iter(self, match: str | None = None, count: int | None = None):
        yield from self.server.scan(self.db, match)

    def close(self) -> None:
        self.closed = True


class FakeAsyncRedis:
    """Async client double bound to one database."""

    def __init__(self, server: FakeRedisServer, db: int = 0):
        self.server = server
        self.db = db
        self.closed = False

    async def ping(self) -> bool:
        return self.server.ping(self.db)

    async def get(self, key: str) -> str | None:
        return self.server.get(self.db, key)

    async def set(self, key: str, value: str, px: int | None = None) -> bool:
        return self.server.set(self.db, key, value, px=px)

    async def delete(self, *keys: str) -> int:
        return self.server.delete(self.db, *keys)

    async def scan_iter(self, match: str | None = None, count: int | None = None):
        for key in self.server.scan(self.db, match):
            yield key

    async def aclose(self) -> None:
        self.closed = True


class RedisTestFactory:
    """Factory for fake redis servers and registry client factories."""

    @staticmethod
    def client_factories(server: FakeRedisServer, calls: list[tuple[str, int]] | None = None):
        """
        Build ``(client_factory, async_client_factory)`` over a fake server.

        Args:
            server: Shared fake keyspace
            calls: Optional list receiving ``(connection_string, db)`` per created client
        """

        def client_factory(connection_string: str, database_instance: int) -> Any:
            if calls is not None:
                calls.append((connection_string, database_instance))
            return FakeRedis(server, database_instance)

        def async_client_factory(connection_string: str, database_instance: int) -> Any:
            if calls is not None:
                calls.append((connection_string, database_instance))
            return FakeAsyncRedis(server, database_instance)

        return client_factory, async_client_factory

    @staticmethod
    def registry(server: FakeRedisServer, calls: list[tuple[str, int]] | None = None):
        from cache_provider.infrastructure.cache.redis_connection import RedisConnectionRegistry

        client_factory, async_client_factory = RedisTestFactory.client_factories(server, calls)
        return RedisConnectionRegistry(
            client_factory=client_factory,
            async_client_factory=async_client_factory,
            health_check_interval=0.0,
        )
