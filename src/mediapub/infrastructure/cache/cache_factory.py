"""Cache factory - creates the configured CachePort adapter."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import structlog

from mediapub.domain.ports.cache import CachePort
from mediapub.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from mediapub.infrastructure.cache.memory_adapter import MemoryCacheAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["memory", "diskcache"]


def create_cache(
    backend: CacheBackend = "memory",
    *,
    directory: str | Path = "./cache",
    ttl_ms: int = 3_600_000,
    max_concurrent: int = 10,
) -> CachePort:
    """Create a cache adapter for *backend*.

    Args:
        backend: "memory" (in-process) or "diskcache" (SQLite).
        directory: Diskcache path.
        ttl_ms: Default TTL for entries stored without one.
        max_concurrent: Diskcache semaphore limit.

    Raises:
        ValueError: If `backend` is unknown.
    """
    log.info("cache_factory_create", backend=backend, ttl_ms=ttl_ms)
    if backend == "memory":
        return MemoryCacheAdapter(ttl_ms=ttl_ms)
    if backend == "diskcache":
        return DiskcacheAdapter(
            directory=directory,
            ttl_ms=ttl_ms,
            max_concurrent=max_concurrent,
        )
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'memory' or 'diskcache'."
    )
