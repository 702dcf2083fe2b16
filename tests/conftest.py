"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures.cache_factory import CacheTestFactory  # noqa: E402
from tests.test_fixtures.redis_factory import FakeRedisServer, RedisTestFactory  # noqa: E402


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """
    Settings built from explicit values, independent of the environment.
    """
    from cache_provider.core.config.constants import CacheBackendKind
    from cache_provider.core.config.settings import Settings

    return Settings(
        CACHE_BACKEND=CacheBackendKind.MEMORY,
        CACHE_PREFIX="app",
        CACHE_UNIQUE_KEYS=["tenant-1", "test"],
        CACHE_DEFAULT_EXPIRATION=120,
        REDIS_CONNECTION_STRING="redis://localhost:6379",
        REDIS_DATABASE_INSTANCE=10,
    )


@pytest.fixture(autouse=True)
def reset_global_state():
    """Forget the global settings and provider between tests."""
    import cache_provider.core.config.settings as settings_module
    import cache_provider.factory as factory_module

    yield

    settings_module._settings = None
    factory_module._cache_provider = None


# ============================================================================
# Local Backend Fixtures
# ============================================================================


@pytest.fixture
def memory_store():
    """Fresh, unshared expiring map."""
    from cache_provider.infrastructure.cache.memory_store import ExpiringMemoryStore

    return ExpiringMemoryStore()


@pytest.fixture
def memory_provider(memory_store):
    """Local provider configured with prefix ``app`` and static key ``tenant-1``."""
    return CacheTestFactory.memory_provider("app", "tenant-1", store=memory_store)


# ============================================================================
# Distributed Backend Fixtures
# ============================================================================


@pytest.fixture
def fake_redis_server():
    """In-memory redis keyspace shared by every fake client."""
    return FakeRedisServer()


@pytest.fixture
def redis_client_calls():
    """Records ``(connection_string, db)`` for every fake client created."""
    return []


@pytest.fixture
def redis_registry(fake_redis_server, redis_client_calls):
    """Connection registry wired to the fake server."""
    return RedisTestFactory.registry(fake_redis_server, redis_client_calls)


@pytest.fixture
def redis_provider(fake_redis_server, redis_registry):
    """Distributed provider configured with prefix ``app`` and static key ``tenant-1``."""
    return CacheTestFactory.redis_provider(
        fake_redis_server, "app", "tenant-1", registry=redis_registry
    )


@pytest.fixture(params=["memory", "redis"])
def any_provider(request, memory_store, fake_redis_server, redis_registry):
    """Each backend in turn, for contract tests shared by both."""
    if request.param == "memory":
        return CacheTestFactory.memory_provider("app", "tenant-1", store=memory_store)
    return CacheTestFactory.redis_provider(
        fake_redis_server, "app", "tenant-1", registry=redis_registry
    )
