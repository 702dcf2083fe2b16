#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the cache
provider: backend selection, namespace, default expiration, redis target and
logging.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Author: System Architect
Date: 2025-12-05
"""

from datetime import timedelta
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cache_provider.core.config.constants import (
    DEFAULT_EXPIRATION,
    WIRING_DATABASE_INSTANCE,
    CacheBackendKind,
)


class Settings(BaseSettings):
    """
    Cache provider settings.

    Usage:
        from cache_provider.core.config.settings import get_settings

        settings = get_settings()
        prefix = settings.CACHE_PREFIX
        ttl = settings.default_expiration
    """

    # Backend selection
    CACHE_BACKEND: CacheBackendKind = Field(
        default=CacheBackendKind.MEMORY, description="Cache backend (memory or redis)"
    )

    # Namespace
    CACHE_PREFIX: str | None = Field(
        default=None, description="Namespace prefix; caching is disabled while unset"
    )
    CACHE_UNIQUE_KEYS: list[str] = Field(
        default_factory=list, description="Static uniqueness tokens (tenant, environment...)"
    )

    # Expiry
    CACHE_DEFAULT_EXPIRATION: int = Field(
        default=int(DEFAULT_EXPIRATION.total_seconds()),
        description="Default expiration in seconds (10 minutes)",
    )
    CACHE_HEALTH_CHECK_INTERVAL: float = Field(
        default=30.0, description="Seconds a redis liveness probe result is reused"
    )

    # Redis target
    REDIS_CONNECTION_STRING: str | None = Field(
        default=None, description="Redis URL, e.g. redis://localhost:6379"
    )
    REDIS_DATABASE_INSTANCE: int = Field(
        default=WIRING_DATABASE_INSTANCE, description="Redis database number"
    )
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(
        default=5, description="Connection timeout in seconds"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", case_sensitive=True, extra="ignore"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("CACHE_DEFAULT_EXPIRATION")
    @classmethod
    def validate_default_expiration(cls, v):
        """Default expiration must be positive."""
        if v <= 0:
            raise ValueError("CACHE_DEFAULT_EXPIRATION must be greater than zero")
        return v

    @property
    def default_expiration(self) -> timedelta:
        """Default expiration as a timedelta."""
        return timedelta(seconds=self.CACHE_DEFAULT_EXPIRATION)


_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings from the environment (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
