"""In-memory TTL cache with LRU eviction.

Backs the tool-result cache. The server runs on a single event loop, so no
locking is needed; each worker process keeps its own copy.
"""

from __future__ import annotations

import json
import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from . import defaults as D

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry:
    value: Any
    expires_at: float
    size: int


class TTLCache:
    """Key/value store with per-entry expiry, an entry cap, and a size cap.

    Entries larger than 10% of ``max_size`` are never stored.
    """

    def __init__(
        self,
        default_ttl: float = D.DEFAULT_TOOL_CACHE_TTL,
        max_entries: int = D.DEFAULT_TOOL_CACHE_MAX_ENTRIES,
        max_size: int = D.DEFAULT_TOOL_CACHE_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self.max_size = max_size
        self._clock = clock
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._size = 0

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return default
        if self._clock() > entry.expires_at:
            self.delete(key)
            return default
        self._store.move_to_end(key)
        return entry.value

    def has(self, key: str) -> bool:
        entry = self._store.get(key)
        if entry is None:
            return False
        if self._clock() > entry.expires_at:
            self.delete(key)
            return False
        return True

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Store a value. Returns False if it was too large to cache."""
        size = _estimate_size(value)
        if size > self.max_size * 0.1:
            logger.debug("Not caching %s: %d bytes exceeds entry limit", key, size)
            return False

        self._purge_expired()
        self.delete(key)

        while self._store and (
            self._size + size > self.max_size or len(self._store) >= self.max_entries
        ):
            self._evict_lru()

        expires_at = self._clock() + (ttl if ttl is not None else self.default_ttl)
        self._store[key] = CacheEntry(value=value, expires_at=expires_at, size=size)
        self._size += size
        return True

    def delete(self, key: str) -> bool:
        entry = self._store.pop(key, None)
        if entry is None:
            return False
        self._size -= entry.size
        return True

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        """Return the cached value, computing and storing it on a miss.

        Exceptions from ``factory`` propagate and nothing is cached.
        """
        missing = object()
        cached = self.get(key, missing)
        if cached is not missing:
            return cached
        value = await factory()
        self.set(key, value, ttl)
        return value

    def clear(self) -> None:
        self._store.clear()
        self._size = 0

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._store), "size": self._size, "max_size": self.max_size}

    def _evict_lru(self) -> None:
        key, entry = self._store.popitem(last=False)
        self._size -= entry.size
        logger.debug("Evicted cache entry %s", key)

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, e in self._store.items() if now > e.expires_at]:
            self.delete(key)


def _estimate_size(value: Any) -> int:
    try:
        return len(json.dumps(value, default=str).encode("utf-8"))
    except (TypeError, ValueError):
        return 1024
