"""
Exception Module

Structured exception hierarchy for the cache provider.

Module Structure:
-----------------
- **base.py**: CacheProviderBaseError base class + ConfigurationError
- **cache.py**: Backend, codec and wiring exceptions

Usage:
------
```python
from cache_provider.core.exceptions import CacheOperationError, UnsupportedBackendError
```
"""

from cache_provider.core.exceptions.base import CacheProviderBaseError, ConfigurationError
from cache_provider.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheOperationError,
    CacheSerializationError,
    MissingComputeFunctionError,
    UnsupportedBackendError,
)

__all__ = [
    "CacheProviderBaseError",
    "ConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "CacheOperationError",
    "CacheSerializationError",
    "MissingComputeFunctionError",
    "UnsupportedBackendError",
]
