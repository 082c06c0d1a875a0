from __future__ import annotations

import threading
import time
from typing import Any

from fx_platform.services.cache.interface import CacheInterface


class MemoryCache(CacheInterface):
    """In-process cache with lazy TTL eviction.

    Each key has its own lock, so requests touching different entries never
    serialize on each other. Value and expiry are stored as one tuple and
    always read together.
    """

    def __init__(self) -> None:
        # key -> (value, expiry_timestamp_or_none)
        self._data: dict[str, tuple[Any, float | None]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        lock = self._locks.get(key)
        if lock is None:
            with self._locks_guard:
                lock = self._locks.setdefault(key, threading.Lock())
        return lock

    def get(self, key: str) -> Any | None:
        with self._lock_for(key):
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expiry = entry
            if expiry is not None and time.monotonic() >= expiry:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        with self._lock_for(key):
            expiry = time.monotonic() + ttl if ttl is not None else None
            self._data[key] = (value, expiry)

    def delete(self, key: str) -> bool:
        with self._lock_for(key):
            return self._data.pop(key, None) is not None

    def flush(self) -> None:
        with self._locks_guard:
            keys = list(self._locks)
        for key in keys:
            self.delete(key)

    def health_check(self) -> bool:
        return True
