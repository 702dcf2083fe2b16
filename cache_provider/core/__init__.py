"""
Core Module

Foundational components: configuration, logging, exceptions, the key codec
and the cache-aside processor.
"""

from .exceptions import (
    CacheConnectionError,
    CacheError,
    CacheOperationError,
    CacheProviderBaseError,
    CacheSerializationError,
    ConfigurationError,
    MissingComputeFunctionError,
    UnsupportedBackendError,
)
from .logging import (
    bind_cache_context,
    clear_cache_context,
    get_logger,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "bind_cache_context",
    "clear_cache_context",
    "CacheProviderBaseError",
    "ConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "CacheOperationError",
    "CacheSerializationError",
    "MissingComputeFunctionError",
    "UnsupportedBackendError",
]
