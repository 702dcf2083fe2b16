#!/usr/bin/env python3
"""
Cache-Aside Processor

Populate-on-miss engine shared by every provider:

    probe  ->  HIT            -> return cached value
           ->  MISS           -> compute -> store (if accepted) -> return
           ->  BACKEND_ERROR  -> compute -------------------------> return

The probe and the store are the only places cache failures can surface.
Both convert any exception raised inside the provider, not only
``CacheError``, into an explicit outcome, so a broken cache only
costs latency: the caller always gets the computed value. Errors raised by
the compute function or the cache condition are never caught.

No state survives between calls and concurrent misses may each compute
(there is no single-flight guard).

Author: System Architect
Date: 2025-12-13
"""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

from cache_provider.core.exceptions import CacheError, MissingComputeFunctionError
from cache_provider.core.interfaces.cache import CacheProvider, Expiry
from cache_provider.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# OPTIONS
# =============================================================================


@dataclass
class CacheOptions(Generic[T]):
    """
    Per-call cache-aside options.

    Attributes:
        function: Blocking compute function
        async_function: Coroutine function, preferred on the async path
        unique_parameters: Additional keys the value is cached under
        expiration: Duration from now
        expires_at: Absolute expiry instant, preferred over ``expiration``
        cache_condition: Predicate a computed value must satisfy to be stored

    Usage:
        options = (
            CacheOptions[Widget]()
            .set_function(lambda: repository.load(widget_id))
            .set_unique_parameters(f"id:{widget_id}")
            .set_expiration(timedelta(minutes=5))
            .set_cache_condition(lambda widget: widget.published)
        )
    """

    function: Callable[[], T] | None = None
    async_function: Callable[[], Awaitable[T]] | None = None
    unique_parameters: tuple[str, ...] = field(default_factory=tuple)
    expiration: timedelta | None = None
    expires_at: datetime | None = None
    cache_condition: Callable[[T], bool] | None = None

    def set_function(
        self, value: Callable[[], T] | Callable[[], Awaitable[T]]
    ) -> "CacheOptions[T]":
        if inspect.iscoroutinefunction(value):
            self.async_function = value
        else:
            self.function = value
        return self

    def set_cache_condition(self, value: Callable[[T], bool]) -> "CacheOptions[T]":
        self.cache_condition = value
        return self

    def set_expiration(self, value: timedelta | datetime) -> "CacheOptions[T]":
        if isinstance(value, datetime):
            self.expires_at = value
        else:
            self.expiration = value
        return self

    def set_unique_parameters(self, *values: str) -> "CacheOptions[T]":
        self.unique_parameters = tuple(values)
        return self

    @property
    def expiry(self) -> Expiry:
        """Absolute instant when set, otherwise the duration (None = provider default)."""
        return self.expires_at if self.expires_at is not None else self.expiration


# =============================================================================
# OUTCOMES
# =============================================================================


class ProbeOutcome(str, Enum):
    HIT = "hit"
    MISS = "miss"
    BACKEND_ERROR = "backend_error"


class StoreOutcome(str, Enum):
    STORED = "stored"
    SKIPPED = "skipped"
    BACKEND_ERROR = "backend_error"


@dataclass(frozen=True)
class ProbeResult(Generic[T]):
    """Result of reading the cache before computing."""

    outcome: ProbeOutcome
    value: T | None = None
    error: Exception | None = None

    @classmethod
    def from_value(cls, value: T | None) -> "ProbeResult[T]":
        if value is None:
            return cls(ProbeOutcome.MISS)
        return cls(ProbeOutcome.HIT, value=value)

    @classmethod
    def failed(cls, error: Exception) -> "ProbeResult[T]":
        return cls(ProbeOutcome.BACKEND_ERROR, error=error)


# =============================================================================
# PROCESSOR
# =============================================================================


class CacheAsideProcessor:
    """
    Retrieve-or-compute-and-store against any ``CacheProvider``.

    Usage:
        processor = CacheAsideProcessor(provider)
        widget = processor.process(Widget, options)
        widget = await processor.process_async(Widget, options)
    """

    def __init__(self, provider: CacheProvider):
        self._provider = provider

    def process(self, value_type: Any, options: CacheOptions[T]) -> T | None:
        """
        Blocking cache-aside call.

        A computed value is stored only when ``cache_condition`` is set and
        accepts it.

        Raises:
            MissingComputeFunctionError: On a miss without ``function``
        """
        probe = self._probe(value_type, options)
        if probe.outcome is ProbeOutcome.HIT:
            return probe.value

        value = self._compute(options)

        if probe.outcome is ProbeOutcome.MISS:
            self._store(value_type, value, options, default_condition=False)
        return value

    async def process_async(self, value_type: Any, options: CacheOptions[T]) -> T | None:
        """
        Async cache-aside call.

        ``async_function`` is preferred over ``function``. A computed value is
        stored unless ``cache_condition`` is set and rejects it.

        Raises:
            MissingComputeFunctionError: On a miss without any compute function
        """
        probe = await self._probe_async(value_type, options)
        if probe.outcome is ProbeOutcome.HIT:
            return probe.value

        value = await self._compute_async(options)

        if probe.outcome is ProbeOutcome.MISS:
            await self._store_async(value_type, value, options, default_condition=True)
        return value

    # -------------------------------------------------------------------------
    # Probe
    # -------------------------------------------------------------------------

    def _probe(self, value_type: Any, options: CacheOptions[T]) -> ProbeResult[T]:
        try:
            value = self._provider.retrieve(value_type, *options.unique_parameters)
        except Exception as e:
            self._log_failure("probe", options, e)
            return ProbeResult.failed(e)
        return self._record(ProbeResult.from_value(value), options)

    async def _probe_async(self, value_type: Any, options: CacheOptions[T]) -> ProbeResult[T]:
        try:
            value = await self._provider.retrieve_async(value_type, *options.unique_parameters)
        except Exception as e:
            self._log_failure("probe", options, e)
            return ProbeResult.failed(e)
        return self._record(ProbeResult.from_value(value), options)

    @staticmethod
    def _record(probe: ProbeResult[T], options: CacheOptions[T]) -> ProbeResult[T]:
        logger.debug(
            "Cache probe",
            outcome=probe.outcome.value,
            unique_parameters=list(options.unique_parameters),
        )
        return probe

    # -------------------------------------------------------------------------
    # Compute
    # -------------------------------------------------------------------------

    @staticmethod
    def _missing_function(options: CacheOptions[T]) -> MissingComputeFunctionError:
        return MissingComputeFunctionError(
            "Cache miss without a compute function",
            details={"unique_parameters": list(options.unique_parameters)},
        )

    def _compute(self, options: CacheOptions[T]) -> T:
        if options.function is None:
            raise self._missing_function(options)
        return options.function()

    async def _compute_async(self, options: CacheOptions[T]) -> T:
        if options.async_function is not None:
            return await options.async_function()
        if options.function is not None:
            return options.function()
        raise self._missing_function(options)

    # -------------------------------------------------------------------------
    # Store
    # -------------------------------------------------------------------------

    @staticmethod
    def _accepts(value: T | None, options: CacheOptions[T], default_condition: bool) -> bool:
        if value is None:
            return False
        if options.cache_condition is None:
            return default_condition
        return bool(options.cache_condition(value))

    def _store(
        self, value_type: Any, value: T | None, options: CacheOptions[T], default_condition: bool
    ) -> StoreOutcome:
        if not self._accepts(value, options, default_condition):
            return StoreOutcome.SKIPPED
        try:
            self._provider.add(
                value, options.expiry, *options.unique_parameters, value_type=value_type
            )
        except Exception as e:
            self._log_failure("store", options, e)
            return StoreOutcome.BACKEND_ERROR
        return StoreOutcome.STORED

    async def _store_async(
        self, value_type: Any, value: T | None, options: CacheOptions[T], default_condition: bool
    ) -> StoreOutcome:
        if not self._accepts(value, options, default_condition):
            return StoreOutcome.SKIPPED
        try:
            await self._provider.add_async(
                value, options.expiry, *options.unique_parameters, value_type=value_type
            )
        except Exception as e:
            self._log_failure("store", options, e)
            return StoreOutcome.BACKEND_ERROR
        return StoreOutcome.STORED

    @staticmethod
    def _log_failure(step: str, options: CacheOptions[T], error: Exception) -> None:
        logger.warning(
            "Cache unavailable, serving uncached value",
            step=step,
            unique_parameters=list(options.unique_parameters),
            error_type=error.__class__.__name__,
            error=error.message if isinstance(error, CacheError) else str(error),
        )
