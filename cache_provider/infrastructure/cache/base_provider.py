"""
Base Cache Provider

Shared semantics of every cache backend, written once over a small set of
storage primitives (read, write with TTL, remove, remove-by-pattern).
Backends only say how to talk to their store; key derivation, freshness
envelopes, availability guards, encoding and cache-aside processing live
here.

Architectural Decision: Template method over backend primitives
- Local and distributed backends cannot drift apart in key layout or expiry
- Each primitive has a blocking and an async form
- Tests exercise the shared logic through the cheapest backend

Author: System Architect
Date: 2025-12-10
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, TypeVar

from cache_provider.core.config.constants import DEFAULT_EXPIRATION
from cache_provider.core.exceptions import CacheOperationError, ConfigurationError
from cache_provider.core.interfaces.cache import Expiry
from cache_provider.core.keys import (
    CacheNamespace,
    InvalidationPattern,
    derive_key,
    derive_keys_pattern,
    derive_metadata_key,
    derive_type_pattern,
)
from cache_provider.core.logging import get_logger
from cache_provider.core.metadata import CacheMetadata
from cache_provider.core.processing import CacheAsideProcessor, CacheOptions
from cache_provider.infrastructure.serialization import decode, encode

logger = get_logger(__name__)

T = TypeVar("T")


class _PreparedWrite:
    """Keys, envelope and TTL of a single ``add`` call."""

    __slots__ = ("key", "metadata_key", "metadata", "ttl")

    def __init__(self, key: str, metadata_key: str, metadata: CacheMetadata):
        self.key = key
        self.metadata_key = metadata_key
        self.metadata = metadata
        self.ttl = metadata.expires_on - metadata.cached_on


class BaseCacheProvider(ABC):
    """
    Abstract cache provider implementing the ``CacheProvider`` protocol.

    Subclasses implement the storage primitives:
    - ``_target_available`` / ``_target_available_async``
    - ``_read`` / ``_read_async``
    - ``_write`` / ``_write_async``
    - ``_remove`` / ``_remove_async``
    - ``_remove_matching`` / ``_remove_matching_async``

    Every public operation is a no-op (``None`` / ``0``) while the provider
    is unavailable. Storage failures surface as ``CacheError`` subclasses.
    """

    def __init__(self):
        self._namespace = CacheNamespace()
        self._default_expiration = DEFAULT_EXPIRATION
        self._processor = CacheAsideProcessor(self)

    # =========================================================================
    # Storage primitives
    # =========================================================================

    @abstractmethod
    def _target_available(self) -> bool:
        ...

    @abstractmethod
    async def _target_available_async(self) -> bool:
        ...

    @abstractmethod
    def _read(self, key: str) -> str | None:
        ...

    @abstractmethod
    async def _read_async(self, key: str) -> str | None:
        ...

    @abstractmethod
    def _write(self, key: str, text: str, ttl: timedelta) -> None:
        ...

    @abstractmethod
    async def _write_async(self, key: str, text: str, ttl: timedelta) -> None:
        ...

    @abstractmethod
    def _remove(self, *keys: str) -> int:
        ...

    @abstractmethod
    async def _remove_async(self, *keys: str) -> int:
        ...

    @abstractmethod
    def _remove_matching(self, pattern: InvalidationPattern) -> int:
        ...

    @abstractmethod
    async def _remove_matching_async(self, pattern: InvalidationPattern) -> int:
        ...

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def namespace(self) -> CacheNamespace:
        return self._namespace

    @property
    def default_expiration(self) -> timedelta:
        return self._default_expiration

    def configure(self, prefix: str | None, *static_keys: str) -> None:
        self._namespace = CacheNamespace(prefix=prefix, static_keys=tuple(static_keys))
        logger.info(
            "Cache namespace configured",
            provider=type(self).__name__,
            prefix=prefix,
            static_keys=list(static_keys),
        )

    def configure_target(self, connection_string: str | None, database_instance: int = 0) -> None:
        """Local backends have no target; distributed backends override this."""

    def set_default_expiration(self, value: timedelta) -> None:
        if value <= timedelta(0):
            raise ConfigurationError(
                "Default expiration must be positive",
                details={"expiration_seconds": value.total_seconds()},
            )
        self._default_expiration = value

    @property
    def is_available(self) -> bool:
        return self._namespace.is_configured and self._target_available()

    async def is_available_async(self) -> bool:
        return self._namespace.is_configured and await self._target_available_async()

    # =========================================================================
    # Values
    # =========================================================================

    def _envelope(self, expiry: Expiry) -> CacheMetadata:
        if expiry is None:
            expiry = self._default_expiration
        if isinstance(expiry, datetime):
            return CacheMetadata.expiring_at(expiry)
        try:
            return CacheMetadata.expiring_after(expiry)
        except OverflowError as e:
            raise CacheOperationError.from_exception(
                e, message="Expiration is out of range", expiration_seconds=expiry.total_seconds()
            ) from e

    def _prepare(
        self, value: Any, expiry: Expiry, additional_keys: tuple[str, ...], value_type: Any
    ) -> _PreparedWrite:
        if value_type is None:
            value_type = type(value)
        return _PreparedWrite(
            key=derive_key(self._namespace, value_type, *additional_keys),
            metadata_key=derive_metadata_key(self._namespace, value_type, *additional_keys),
            metadata=self._envelope(expiry),
        )

    def add(
        self, value: Any, expiry: Expiry = None, *additional_keys: str, value_type: Any = None
    ) -> None:
        if not self.is_available:
            return

        write = self._prepare(value, expiry, additional_keys, value_type)
        if write.ttl <= timedelta(0):
            self._remove(write.key, write.metadata_key)
            logger.debug("Cache write already expired, entry removed", key=write.key)
            return

        text = encode(value)
        self._write(write.key, text, write.ttl)
        self._write(write.metadata_key, encode(write.metadata), write.ttl)
        logger.debug("Cache entry written", key=write.key, ttl_seconds=write.ttl.total_seconds())

    async def add_async(
        self, value: Any, expiry: Expiry = None, *additional_keys: str, value_type: Any = None
    ) -> None:
        if not await self.is_available_async():
            return

        write = self._prepare(value, expiry, additional_keys, value_type)
        if write.ttl <= timedelta(0):
            await self._remove_async(write.key, write.metadata_key)
            logger.debug("Cache write already expired, entry removed", key=write.key)
            return

        text = encode(value)
        await self._write_async(write.key, text, write.ttl)
        await self._write_async(write.metadata_key, encode(write.metadata), write.ttl)
        logger.debug("Cache entry written", key=write.key, ttl_seconds=write.ttl.total_seconds())

    def retrieve(self, value_type: type[T] | Any, *additional_keys: str) -> T | None:
        if not self.is_available:
            return None
        text = self._read(derive_key(self._namespace, value_type, *additional_keys))
        return decode(text, value_type)

    async def retrieve_async(self, value_type: type[T] | Any, *additional_keys: str) -> T | None:
        if not await self.is_available_async():
            return None
        text = await self._read_async(derive_key(self._namespace, value_type, *additional_keys))
        return decode(text, value_type)

    def retrieve_metadata(self, value_type: Any, *additional_keys: str) -> CacheMetadata | None:
        if not self.is_available:
            return None
        text = self._read(derive_metadata_key(self._namespace, value_type, *additional_keys))
        return decode(text, CacheMetadata)

    async def retrieve_metadata_async(
        self, value_type: Any, *additional_keys: str
    ) -> CacheMetadata | None:
        if not await self.is_available_async():
            return None
        text = await self._read_async(
            derive_metadata_key(self._namespace, value_type, *additional_keys)
        )
        return decode(text, CacheMetadata)

    # =========================================================================
    # Invalidation
    # =========================================================================

    def _pattern(self, additional_keys: tuple[str, ...], value_type: Any) -> InvalidationPattern:
        if value_type is not None:
            return derive_type_pattern(self._namespace, value_type, *additional_keys)
        return derive_keys_pattern(self._namespace, *additional_keys)

    def invalidate(self, *additional_keys: str, value_type: Any = None) -> int:
        if not self.is_available:
            return 0
        pattern = self._pattern(additional_keys, value_type)
        removed = self._remove_matching(pattern)
        logger.info("Cache invalidated", pattern=str(pattern), removed=removed)
        return removed

    async def invalidate_async(self, *additional_keys: str, value_type: Any = None) -> int:
        if not await self.is_available_async():
            return 0
        pattern = self._pattern(additional_keys, value_type)
        removed = await self._remove_matching_async(pattern)
        logger.info("Cache invalidated", pattern=str(pattern), removed=removed)
        return removed

    def invalidate_by_type(self, value_type: Any) -> int:
        return self.invalidate(value_type=value_type)

    async def invalidate_by_type_async(self, value_type: Any) -> int:
        return await self.invalidate_async(value_type=value_type)

    # =========================================================================
    # Cache-aside
    # =========================================================================

    def cache_processor(self, value_type: type[T] | Any, options: CacheOptions[T]) -> T | None:
        return self._processor.process(value_type, options)

    async def cache_processor_async(
        self, value_type: type[T] | Any, options: CacheOptions[T]
    ) -> T | None:
        return await self._processor.process_async(value_type, options)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Release per-provider resources. Shared connections belong to their registry."""

    async def aclose(self) -> None:
        self.close()
