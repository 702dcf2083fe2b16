"""
Configuration Module

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Key layout tokens, expiry defaults and the backend enum

Usage:
------
```python
from cache_provider.core.config import get_settings
from cache_provider.core.config.constants import CacheBackendKind

settings = get_settings()
if settings.CACHE_BACKEND is CacheBackendKind.REDIS:
    url = settings.REDIS_CONNECTION_STRING
```

Environment Variables:
---------------------
```bash
CACHE_BACKEND=redis
CACHE_PREFIX=app
CACHE_UNIQUE_KEYS='["tenant-7", "prod"]'
CACHE_DEFAULT_EXPIRATION=600
REDIS_CONNECTION_STRING=redis://localhost:6379
REDIS_DATABASE_INSTANCE=10
LOG_LEVEL=INFO
LOG_FORMAT=json
```
"""

from cache_provider.core.config.constants import CacheBackendKind
from cache_provider.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    "CacheBackendKind",
    "Settings",
    "get_settings",
    "reload_settings",
]
