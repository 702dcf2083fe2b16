"""
Cache Provider Protocol

This module defines the contract every cache backend (local or distributed)
satisfies, so application code and the cache-aside processor never know
which backend is active.

Architectural Decision: Protocol-based abstraction
- Enables multiple backend implementations (in-process map, Redis)
- Facilitates testing with mock implementations
- Type-safe interface with runtime checking

Contract rules shared by all implementations:
- Every operation has a blocking form and an ``async`` form with identical
  results; only the calling convention differs
- While ``is_available`` is false every operation is a no-op returning
  ``None`` (reads) or ``0`` (invalidations) and writing nothing
- Reads return ``None`` on a miss and on a decode failure
- Backend failures raise ``CacheError`` subclasses from direct calls

Author: System Architect
Date: 2025-12-08
"""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from cache_provider.core.metadata import CacheMetadata

if TYPE_CHECKING:
    from cache_provider.core.processing import CacheOptions

T = TypeVar("T")

# Duration from now, absolute instant, or None for the provider default
Expiry = timedelta | datetime | None


@runtime_checkable
class CacheProvider(Protocol):
    """
    Protocol defining the interface for cache provider implementations.

    Implementations:
    - MemoryCacheProvider: Process-wide expiring map
    - RedisCacheProvider: Shared redis store over a registry-owned connection

    Usage:
        def load_widget(cache: CacheProvider, widget_id: str) -> Widget | None:
            return cache.retrieve(Widget, f"id:{widget_id}")
    """

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def configure(self, prefix: str | None, *static_keys: str) -> None:
        """
        Set the namespace prefix and static uniqueness keys.

        Args:
            prefix: Top-level key prefix; blank leaves the provider unavailable
            *static_keys: Tokens such as tenant id or environment
        """
        ...

    def configure_target(self, connection_string: str | None, database_instance: int = 0) -> None:
        """
        Set the backend target.

        Args:
            connection_string: Backend connection string (ignored by local backends)
            database_instance: Numeric database selector
        """
        ...

    def set_default_expiration(self, value: timedelta) -> None:
        """Expiry used by ``add`` when no expiry is given."""
        ...

    @property
    def is_available(self) -> bool:
        """True when namespace and target are configured and the backend is reachable."""
        ...

    async def is_available_async(self) -> bool:
        """Async form of ``is_available``."""
        ...

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    def add(
        self, value: Any, expiry: Expiry = None, *additional_keys: str, value_type: Any = None
    ) -> None:
        """
        Store a value and its freshness envelope with the same expiry.

        Args:
            value: Value to cache
            expiry: Duration from now, absolute instant, or None for the default
            *additional_keys: Call-site uniqueness keys
            value_type: Type the value is tagged with (defaults to ``type(value)``)
        """
        ...

    async def add_async(
        self, value: Any, expiry: Expiry = None, *additional_keys: str, value_type: Any = None
    ) -> None:
        ...

    def retrieve(self, value_type: type[T] | Any, *additional_keys: str) -> T | None:
        """
        Read a cached value.

        Returns:
            The decoded value, or None on a miss or decode failure
        """
        ...

    async def retrieve_async(self, value_type: type[T] | Any, *additional_keys: str) -> T | None:
        ...

    def retrieve_metadata(self, value_type: Any, *additional_keys: str) -> CacheMetadata | None:
        """Read the freshness envelope stored beside a value."""
        ...

    async def retrieve_metadata_async(
        self, value_type: Any, *additional_keys: str
    ) -> CacheMetadata | None:
        ...

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def invalidate(self, *additional_keys: str, value_type: Any = None) -> int:
        """
        Expire every key under the pattern derived from the given keys.

        Args:
            *additional_keys: Keys narrowing the pattern
            value_type: When given, the pattern includes the type tag

        Returns:
            int: Number of keys removed
        """
        ...

    async def invalidate_async(self, *additional_keys: str, value_type: Any = None) -> int:
        ...

    def invalidate_by_type(self, value_type: Any) -> int:
        """Expire every cached form of a type."""
        ...

    async def invalidate_by_type_async(self, value_type: Any) -> int:
        ...

    # -------------------------------------------------------------------------
    # Cache-aside
    # -------------------------------------------------------------------------

    def cache_processor(self, value_type: type[T] | Any, options: "CacheOptions[T]") -> T | None:
        """Return the cached value, or compute, conditionally store and return it."""
        ...

    async def cache_processor_async(
        self, value_type: type[T] | Any, options: "CacheOptions[T]"
    ) -> T | None:
        ...

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        ...

    async def aclose(self) -> None:
        ...
