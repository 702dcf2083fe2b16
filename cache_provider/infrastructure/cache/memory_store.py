"""
Process-Wide Expiring Map

Thread-safe key/value map where every entry carries an absolute expiry.
Expired entries are invisible to readers and purged lazily on access.
There is no size bound or eviction policy beyond expiry.
"""

import threading
from dataclasses import dataclass
from datetime import datetime

from cache_provider.core.metadata import as_utc, utc_now


@dataclass(frozen=True)
class _Entry:
    value: str
    expires_at: datetime


class ExpiringMemoryStore:
    """
    In-process expiring map shared by local providers.

    Usage:
        store = ExpiringMemoryStore()
        store.set("app.Widget.7", "{...}", expires_at)
        text = store.get("app.Widget.7")
    """

    def __init__(self):
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= utc_now():
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: str, expires_at: datetime) -> None:
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=as_utc(expires_at))

    def remove(self, key: str) -> bool:
        """Remove a key. Returns True if a live entry was removed."""
        with self._lock:
            entry = self._entries.pop(key, None)
            return entry is not None and entry.expires_at > utc_now()

    def keys(self) -> list[str]:
        """Snapshot of live keys."""
        with self._lock:
            self._purge_expired()
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _purge_expired(self) -> None:
        now = utc_now()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


_memory_store: ExpiringMemoryStore | None = None
_memory_store_lock = threading.Lock()


def default_memory_store() -> ExpiringMemoryStore:
    """
    Get the process-wide memory store (singleton).

    Returns:
        ExpiringMemoryStore: Shared store instance
    """
    global _memory_store

    if _memory_store is None:
        with _memory_store_lock:
            if _memory_store is None:
                _memory_store = ExpiringMemoryStore()

    return _memory_store
