"""Thread-safe in-memory LRU cache with per-key TTL expiry."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Callable


class LRUCache:
    """
    Bounded cache for raw tables and boundary payloads.

    Constructed once per process and handed to whoever loads data, so the
    lifetime and capacity policy are explicit instead of living in module
    globals. ``clock`` is injectable for tests.
    """

    def __init__(
        self,
        max_entries: int = 8,
        default_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self._store: OrderedDict[str, tuple[Any, float | None]] = OrderedDict()
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._default_ttl = default_ttl
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        # membership never touches recency
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            expires_at = entry[1]
            return expires_at is None or self._clock() <= expires_at

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() > expires_at:
                del self._store[key]
                return None
            self._store.move_to_end(key)
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        expires_at = self._clock() + ttl if ttl is not None else None
        with self._lock:
            self._store[key] = (value, expires_at)
            self._store.move_to_end(key)
            while len(self._store) > self._max_entries:
                self._store.popitem(last=False)

    def get_or_load(self, key: str, loader: Callable[[], Any], ttl: float | None = None) -> Any:
        value = self.get(key)
        if value is None:
            value = loader()
            self.set(key, value, ttl=ttl)
        return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def evict_expired(self) -> int:
        """Remove all expired entries. Returns count of evicted keys."""
        now = self._clock()
        with self._lock:
            expired = [k for k, (_, exp) in self._store.items() if exp is not None and now > exp]
            for k in expired:
                del self._store[k]
            return len(expired)
