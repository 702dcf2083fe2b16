from .logger import (
    bind_cache_context,
    clear_cache_context,
    get_logger,
    redact_credentials,
    setup_logging,
)

__all__ = [
    "bind_cache_context",
    "clear_cache_context",
    "get_logger",
    "redact_credentials",
    "setup_logging",
]
