"""TTL read cache for data snapshots fetched from the database.

One entry per data kind ("ingredients", "recipes", "waste"). The cache is
constructed once by the application and handed to request handlers through a
dependency, so tests can build their own.

Usage:
    cache = DataCache(ttl=300)
    ingredients = cache.get_or_fetch("ingredients", data.fetch_ingredients)
    ...
    cache.invalidate("ingredients")  # after a write
"""
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


class DataCache:
    """Thread-safe in-memory cache keyed by data kind, with a fixed TTL."""

    def __init__(self, ttl: float = 300, clock: Callable[[], float] = time.time):
        self._store: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, kind: str) -> Optional[Any]:
        """Return the cached value for kind, or None when missing or stale."""
        with self._lock:
            entry = self._store.get(kind)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self._ttl:
                del self._store[kind]
                return None
            return value

    def set(self, kind: str, value: Any) -> None:
        with self._lock:
            self._store[kind] = (self._clock(), value)

    def get_or_fetch(self, kind: str, fetch: Callable[[], Any]) -> Any:
        """Return the cached value, calling fetch() and storing its result on a miss.

        The fetch runs outside the lock; two concurrent misses may both fetch,
        and the later result wins.
        """
        cached = self.get(kind)
        if cached is not None:
            return cached
        value = fetch()
        self.set(kind, value)
        return value

    def invalidate(self, kind: Optional[str] = None) -> int:
        """Drop one kind, or everything when kind is None. Returns count removed."""
        with self._lock:
            if kind is None:
                removed = len(self._store)
                self._store.clear()
                return removed
            return 1 if self._store.pop(kind, None) is not None else 0

    def status(self) -> Dict[str, Any]:
        """Cache state for the status endpoint."""
        now = self._clock()
        with self._lock:
            entries = {
                kind: {"age_seconds": round(now - stored_at, 1), "fresh": now - stored_at < self._ttl}
                for kind, (stored_at, _) in self._store.items()
            }
        return {"ttl_seconds": self._ttl, "entries": entries}
