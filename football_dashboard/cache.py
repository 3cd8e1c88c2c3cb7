"""In-memory TTL cache used by the Sportradar client."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .config import CACHE_DEFAULT_TTL


@dataclass
class CacheEntry:
    value: Any
    timestamp: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return (now - self.timestamp) < self.ttl


class TTLCache:
    """A thread-safe mapping of key -> value that forgets entries after their TTL.

    Expired entries are evicted lazily on read. There is no size bound; the
    working set is one dashboard session.
    """

    def __init__(
        self,
        default_ttl: float = CACHE_DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = float(default_ttl)
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl is None else float(ttl)
        with self._lock:
            self._store[key] = CacheEntry(value=value, timestamp=self._clock(), ttl=ttl)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return default
            if not entry.is_fresh(self._clock()):
                del self._store[key]
                self._misses += 1
                return default
            self._hits += 1
            return entry.value

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if not entry.is_fresh(self._clock()):
                del self._store[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, int]:
        """Size plus hit/miss counts and whole-number percentages."""

        with self._lock:
            hits, misses, size = self._hits, self._misses, len(self._store)
        total = hits + misses
        return {
            "size": size,
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / total * 100) if total else 0,
            "miss_rate": round(misses / total * 100) if total else 0,
        }
