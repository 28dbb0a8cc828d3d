"""Per-key in-process locks for de-duplicating concurrent refreshes."""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class KeyedLocks:
    """Hand out one lock per key; idle locks are dropped."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def waiters(self, key: Hashable) -> int:
        """Number of callers holding or queued on ``key``."""
        with self._guard:
            return self._waiters.get(key, 0)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
