"""
Cache Provider

Cache-aside abstraction over a local expiring map and a shared Redis store.

Usage:
    from cache_provider import CacheOptions, get_cache_provider

    cache = get_cache_provider()
    options = CacheOptions[Widget]().set_function(load_widget).set_unique_parameters("id:7")
    widget = cache.cache_processor(Widget, options)
"""

from cache_provider.core.config.constants import CacheBackendKind
from cache_provider.core.interfaces.cache import CacheProvider, Expiry
from cache_provider.core.keys import CacheNamespace, InvalidationPattern
from cache_provider.core.metadata import CacheMetadata
from cache_provider.core.processing import (
    CacheAsideProcessor,
    CacheOptions,
    ProbeOutcome,
    ProbeResult,
    StoreOutcome,
)
from cache_provider.factory import (
    aclose_cache_provider,
    build_cache_provider,
    close_cache_provider,
    get_cache_provider,
)
from cache_provider.infrastructure.cache import (
    MemoryCacheProvider,
    RedisCacheProvider,
    RedisConnectionRegistry,
)

__version__ = "1.0.0"

__all__ = [
    "CacheBackendKind",
    "CacheProvider",
    "Expiry",
    "CacheNamespace",
    "InvalidationPattern",
    "CacheMetadata",
    "CacheOptions",
    "CacheAsideProcessor",
    "ProbeOutcome",
    "ProbeResult",
    "StoreOutcome",
    "MemoryCacheProvider",
    "RedisCacheProvider",
    "RedisConnectionRegistry",
    "build_cache_provider",
    "get_cache_provider",
    "close_cache_provider",
    "aclose_cache_provider",
]
