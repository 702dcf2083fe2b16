"""
Cache Provider Bootstrap

Builds the process-wide cache provider from settings: picks the backend
variant once, then applies default expiration, backend target and
namespace.

Usage:
    from cache_provider.factory import get_cache_provider

    cache = get_cache_provider()
    widget = cache.cache_processor(Widget, options)

Author: System Architect
Date: 2025-12-12
"""

from collections.abc import Callable

from cache_provider.core.config.constants import CacheBackendKind
from cache_provider.core.config.settings import Settings, get_settings
from cache_provider.core.exceptions import UnsupportedBackendError
from cache_provider.core.logging import get_logger
from cache_provider.infrastructure.cache.base_provider import BaseCacheProvider
from cache_provider.infrastructure.cache.memory_provider import MemoryCacheProvider
from cache_provider.infrastructure.cache.memory_store import ExpiringMemoryStore
from cache_provider.infrastructure.cache.redis_connection import RedisConnectionRegistry
from cache_provider.infrastructure.cache.redis_provider import RedisCacheProvider

logger = get_logger(__name__)


def build_cache_provider(
    settings: Settings | None = None,
    *,
    backend: CacheBackendKind | str | None = None,
    registry: RedisConnectionRegistry | None = None,
    memory_store: ExpiringMemoryStore | None = None,
) -> BaseCacheProvider:
    """
    Build and configure a cache provider.

    Args:
        settings: Settings to read (defaults to the global settings)
        backend: Overrides ``settings.CACHE_BACKEND``
        registry: Redis connection registry (defaults to the process-wide one)
        memory_store: Local store (defaults to the process-wide one)

    Returns:
        Configured provider; unavailable (no-op) if the prefix or redis
        target is missing

    Raises:
        UnsupportedBackendError: If the backend is not a known variant
    """
    if settings is None:
        settings = get_settings()
    selected = backend if backend is not None else settings.CACHE_BACKEND

    variants: dict[CacheBackendKind, Callable[[], BaseCacheProvider]] = {
        CacheBackendKind.MEMORY: lambda: MemoryCacheProvider(store=memory_store),
        CacheBackendKind.REDIS: lambda: RedisCacheProvider(registry=registry),
    }

    try:
        kind = CacheBackendKind(selected)
    except ValueError as e:
        raise UnsupportedBackendError(
            f"Unsupported cache backend: {selected!r}",
            details={"supported": [variant.value for variant in CacheBackendKind]},
        ) from e

    provider = variants[kind]()
    provider.set_default_expiration(settings.default_expiration)
    provider.configure_target(settings.REDIS_CONNECTION_STRING, settings.REDIS_DATABASE_INSTANCE)
    provider.configure(settings.CACHE_PREFIX, *settings.CACHE_UNIQUE_KEYS)

    logger.info(
        "Cache provider built",
        backend=kind.value,
        prefix=settings.CACHE_PREFIX,
        default_expiration_seconds=settings.CACHE_DEFAULT_EXPIRATION,
    )
    return provider


# =============================================================================
# GLOBAL PROVIDER
# =============================================================================

_cache_provider: BaseCacheProvider | None = None


def get_cache_provider() -> BaseCacheProvider:
    """
    Get the global cache provider (singleton).

    Returns:
        BaseCacheProvider: Provider built from ``get_settings()``
    """
    global _cache_provider

    if _cache_provider is None:
        _cache_provider = build_cache_provider()

    return _cache_provider


def close_cache_provider() -> None:
    """Close and forget the global provider."""
    global _cache_provider

    if _cache_provider is not None:
        _cache_provider.close()
        _cache_provider = None


async def aclose_cache_provider() -> None:
    """Async form of ``close_cache_provider``."""
    global _cache_provider

    if _cache_provider is not None:
        await _cache_provider.aclose()
        _cache_provider = None
