"""Persistent response cache on diskcache (SQLite file, no server)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)


class DiskcacheAdapter:
    """``CachePort`` over the synchronous ``diskcache.Cache``.

    Every call runs in a worker thread; a semaphore bounds how many run
    at once against the SQLite file.  The port speaks milliseconds,
    diskcache expects seconds.

    Args:
        directory: Cache directory (created on open).
        ttl_ms: Default TTL for `set()` without explicit value.
        max_concurrent: Upper bound on concurrent disk operations.
    """

    def __init__(
        self,
        directory: str | Path = "./cache",
        ttl_ms: int = 3_600_000,
        max_concurrent: int = 10,
    ) -> None:
        self.directory = Path(directory)
        self.default_ttl_ms = ttl_ms
        self._cache: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

        log.info(
            "diskcache_adapter_init",
            directory=str(self.directory),
            default_ttl_ms=ttl_ms,
            max_concurrent=max_concurrent,
        )

    async def __aenter__(self) -> DiskcacheAdapter:
        if self._cache is None:
            self._cache = await asyncio.to_thread(DiskCache, str(self.directory))
            log.info("diskcache_opened", path=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("diskcache_closed", directory=str(self.directory))

    def _require_open(self) -> DiskCache:
        if self._cache is None:
            raise RuntimeError(
                "Cache not initialized. "
                "Use 'async with cache:' or await cache.__aenter__()"
            )
        return self._cache

    async def get(self, key: str) -> Optional[Any]:
        cache = self._require_open()
        async with self._semaphore:
            value = await asyncio.to_thread(cache.get, key, default=None)
        log.debug("cache_get", key=key, hit=value is not None)
        return value

    async def set(self, key: str, value: Any, *, ttl_ms: int | None = None) -> None:
        cache = self._require_open()
        expire_ms = ttl_ms if ttl_ms is not None else self.default_ttl_ms

        async with self._semaphore:
            await asyncio.to_thread(cache.set, key, value, expire=expire_ms / 1000)
        log.debug("cache_set", key=key, ttl_ms=expire_ms)

    async def delete(self, key: str) -> bool:
        if self._cache is None:
            return False

        async with self._semaphore:
            deleted = await asyncio.to_thread(self._cache.delete, key)
        log.debug("cache_delete", key=key, deleted=deleted)
        return bool(deleted)

    async def exists(self, key: str) -> bool:
        if self._cache is None:
            return False

        cache = self._cache
        async with self._semaphore:
            # membership honors expiry
            return await asyncio.to_thread(lambda: key in cache)

    async def clear(self) -> None:
        if self._cache is None:
            return

        async with self._semaphore:
            await asyncio.to_thread(self._cache.clear)
        log.warning("cache_cleared", backend="diskcache", directory=str(self.directory))
