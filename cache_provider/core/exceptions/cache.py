"""
Cache-Related Exceptions

Backend, codec and wiring errors. An unconfigured provider is NOT an error:
it reports itself unavailable and every operation becomes a no-op.

Author: System Architect
Date: 2025-12-08
"""

from cache_provider.core.exceptions.base import CacheProviderBaseError, ConfigurationError


class CacheError(CacheProviderBaseError):
    """Base exception for cache backend errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to reach the cache backend.

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Malformed connection string
    """
    pass


class CacheOperationError(CacheError):
    """
    Raised when a backend read, write or scan fails.

    Direct provider calls propagate it; the cache-aside processor converts it
    into a forced miss.
    """
    pass


class CacheSerializationError(CacheError):
    """Raised when a value cannot be encoded for storage."""
    pass


class UnsupportedBackendError(ConfigurationError):
    """Raised when bootstrap wiring selects a backend that does not exist."""
    pass


class MissingComputeFunctionError(ConfigurationError):
    """Raised when a cache miss occurs and no compute function was supplied."""
    pass
