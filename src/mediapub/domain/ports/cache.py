"""Cache port used by the response cache."""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Async key-value store whose entries expire.

    TTLs are milliseconds.  ``get`` answers ``None`` for missing and for
    expired keys alike, so ``None`` itself is never stored.  Adapters are
    async context managers; the owner opens one per process:

        async with create_cache("diskcache", directory=path) as cache:
            await resolve_publisher(url, options, cache=cache)
    """

    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any, *, ttl_ms: int | None = None) -> None:
        """Store *value*; the adapter's default TTL applies when *ttl_ms* is None."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove *key*; ``False`` if it was not present."""
        ...

    async def exists(self, key: str) -> bool: ...

    async def clear(self) -> None: ...

    async def aclose(self) -> None:
        """Release the backend (file handles, memory)."""
        ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...
