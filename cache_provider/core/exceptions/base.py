"""
Base Exception Class

This module contains the base exception class that all cache provider
exceptions inherit from, plus the configuration error used for caller
programming errors.

Author: System Architect
Date: 2025-12-08
"""

from typing import Any


class CacheProviderBaseError(Exception):
    """
    Base exception for all cache provider errors.

    Attributes:
        message: Error message
        details: Additional error details (dict)

    Example:
        raise CacheOperationError(
            "Redis SET failed",
            details={"key": "app.v1.Widget.7", "operation": "set"}
        )
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dict with error_type, message and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def with_context(self, **context) -> "CacheProviderBaseError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        return f"{self.__class__.__name__}(message='{self.message}'{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        **details
    ) -> "CacheProviderBaseError":
        """
        Create an error from another exception.

        Useful for wrapping redis or codec exceptions with cache context.

        Args:
            exc: Original exception to wrap
            message: Custom message (defaults to original exception message)
            **details: Additional context to include

        Example:
            >>> try:
            ...     client.set(key, text, px=ttl_ms)
            ... except RedisError as e:
            ...     raise CacheOperationError.from_exception(e, key=key) from e
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, details=error_details)


class ConfigurationError(CacheProviderBaseError):
    """Raised when the cache provider is wired or called incorrectly."""
    pass
