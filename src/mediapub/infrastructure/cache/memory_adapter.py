"""In-process TTL cache - default backend, no persistence."""

from __future__ import annotations

import time
from typing import Any, Callable

import structlog

log = structlog.get_logger(__name__)

# Evict expired entries every N set() calls
_EVICT_INTERVAL = 256


class _CacheEntry:
    """Time-bounded cache entry."""

    __slots__ = ("value", "expires_at")

    def __init__(self, value: Any, expires_at: float) -> None:
        self.value = value
        self.expires_at = expires_at


class MemoryCacheAdapter:
    """Dict-backed cache whose entries expire after their TTL.

    Expired entries are dropped lazily on access and swept periodically
    on writes.  Safe for single-threaded asyncio: every operation
    completes within one event loop tick.

    Args:
        ttl_ms: Default TTL for ``set()`` without explicit value.
        clock: Monotonic clock in seconds (injectable for tests).
    """

    def __init__(
        self,
        ttl_ms: int = 3_600_000,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl_ms = ttl_ms
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._writes = 0

    async def __aenter__(self) -> MemoryCacheAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _live(self, key: str) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Any | None:
        entry = self._live(key)
        log.debug("cache_get", key=key, hit=entry is not None)
        return entry.value if entry is not None else None

    async def set(self, key: str, value: Any, *, ttl_ms: int | None = None) -> None:
        expire_ms = ttl_ms if ttl_ms is not None else self.default_ttl_ms
        self._entries[key] = _CacheEntry(value, self._clock() + expire_ms / 1000)
        log.debug("cache_set", key=key, ttl_ms=expire_ms)

        self._writes += 1
        if self._writes % _EVICT_INTERVAL == 0:
            self._evict_expired()

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def clear(self) -> None:
        self._entries.clear()
        log.warning("cache_cleared", backend="memory")

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [k for k, v in self._entries.items() if now >= v.expires_at]
        for k in expired:
            del self._entries[k]
        log.debug("cache_evict", evicted=len(expired), size=len(self._entries))
