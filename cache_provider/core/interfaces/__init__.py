from .cache import CacheProvider, Expiry

__all__ = [
    "CacheProvider",
    "Expiry",
]
