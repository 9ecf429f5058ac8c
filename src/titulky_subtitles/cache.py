from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional, Tuple

_MISSING = object()


class SearchCache:
    """In-memory cache for search responses.

    Non-empty results and empty results expire independently (a miss is
    re-checked sooner than a hit). ``max_size`` bounds the number of keys;
    entries closest to expiry are evicted first.
    """

    def __init__(self, result_ttl: float = 1800.0, empty_ttl: float = 300.0, max_size: Optional[int] = None) -> None:
        self.result_ttl = result_ttl
        self.empty_ttl = empty_ttl
        self.max_size = max_size
        self._lock = threading.Lock()
        self._store: Dict[str, Tuple[float, Any]] = {}

    def _now(self) -> float:
        return time.monotonic()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return default
            expiry, value = item
            if expiry < self._now():
                del self._store[key]
                return default
            return value

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def put(self, key: str, value: Any) -> None:
        ttl = self.result_ttl if value else self.empty_ttl
        with self._lock:
            now = self._now()
            self._store[key] = (now + ttl, value)
            if self.max_size is None or len(self._store) <= self.max_size:
                return
            for stale in [k for k, (expiry, _v) in self._store.items() if expiry < now]:
                del self._store[stale]
            overflow = len(self._store) - self.max_size
            if overflow > 0:
                by_expiry = sorted(self._store, key=lambda k: self._store[k][0])
                for k in by_expiry[:overflow]:
                    del self._store[k]

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
