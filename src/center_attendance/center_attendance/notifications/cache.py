from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable, Generic, Hashable, Optional, TypeVar

from ..core.constants import CREDENTIALS_CACHE_MAX_ENTRIES, CREDENTIALS_CACHE_TTL_SECONDS

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Small thread-safe cache with per-entry expiry.

    When full, the entry inserted first is evicted. None results are never
    stored, so a missing value is looked up again on the next call.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = CREDENTIALS_CACHE_TTL_SECONDS,
        max_entries: int = CREDENTIALS_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._ttl = float(ttl_seconds)
        self._max_entries = int(max_entries)
        self._clock = clock
        self._entries: "OrderedDict[Hashable, tuple[float, V]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: Hashable) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: Hashable, value: V) -> None:
        with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self._max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = (self._clock() + self._ttl, value)

    def get_or_compute(self, key: Hashable, compute: Callable[[], Optional[V]]) -> Optional[V]:
        cached = self.get(key)
        if cached is not None:
            return cached
        # Computed outside the lock; two threads may both compute, last write wins.
        value = compute()
        if value is not None:
            self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
