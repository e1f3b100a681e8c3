"""Bounded in-memory TTL cache."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Tuple

_MISSING = object()


class TTLCache:
    """Small TTL cache with a size bound.

    Instances are owned by the process context and handed to the components
    that need them, so each test can build its own.
    """

    def __init__(
        self,
        maxsize: int = 4096,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._maxsize = max(int(maxsize), 1)
        self._clock = clock
        self._data: Dict[str, Tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        if key not in self._data and len(self._data) >= self._maxsize:
            self._evict()
        self._data[key] = (self._clock() + max(float(ttl_seconds), 0.0), value)

    def pop(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def _lookup(self, key: str) -> Any:
        item = self._data.get(key)
        if item is None:
            return _MISSING
        expires_at, value = item
        if expires_at <= self._clock():
            del self._data[key]
            return _MISSING
        return value

    def _evict(self) -> None:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]
        if len(self._data) >= self._maxsize:
            # Oldest insertion goes first.
            self._data.pop(next(iter(self._data)))


__all__ = ["TTLCache"]
