"""
Freshness Envelope

Records when a cache entry was written and when it expires. It is stored
under the value's key plus the ``MetaData`` suffix with the same expiry as
the value, so callers can inspect an entry's age without decoding it.
"""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class CacheMetadata(BaseModel):
    """
    Freshness envelope of a cached value.

    Attributes:
        cached_on: When the value was written (UTC)
        expires_on: When the value expires (UTC)
    """

    cached_on: datetime = Field(default_factory=utc_now)
    expires_on: datetime

    @classmethod
    def expiring_after(cls, duration: timedelta) -> "CacheMetadata":
        """Envelope for a value that lives ``duration`` from now."""
        now = utc_now()
        return cls(cached_on=now, expires_on=now + duration)

    @classmethod
    def expiring_at(cls, moment: datetime) -> "CacheMetadata":
        """Envelope for a value that expires at an absolute instant."""
        return cls(cached_on=utc_now(), expires_on=as_utc(moment))

    @property
    def time_to_live(self) -> timedelta:
        """Remaining lifetime, zero once expired."""
        return max(as_utc(self.expires_on) - utc_now(), timedelta(0))

    @property
    def is_expired(self) -> bool:
        return as_utc(self.expires_on) <= utc_now()
