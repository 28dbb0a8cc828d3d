"""Freshness judgement for cached entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Generic, TypeVar

from branch_stats.time_utils import as_utc

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached payload plus the time it was persisted."""

    payload: T
    cached_at: datetime | None

    def expires_at(self, ttl: timedelta) -> datetime | None:
        if self.cached_at is None:
            return None
        return as_utc(self.cached_at) + ttl


def is_fresh(entry: CacheEntry[T] | None, ttl: timedelta, now: datetime) -> bool:
    """Return True iff ``entry`` exists and ``now <= cached_at + ttl``.

    An entry without a timestamp is never fresh.
    """
    if entry is None:
        return False
    expires_at = entry.expires_at(ttl)
    if expires_at is None:
        return False
    return as_utc(now) <= expires_at
