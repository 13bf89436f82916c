"""TTL response cache in front of the retry controller."""

from __future__ import annotations

import asyncio
import time
from typing import Callable

import structlog

from mediapub.domain.entities.http import RequestParams, TransportResponse
from mediapub.domain.ports.cache import CachePort
from mediapub.domain.ports.http import HttpFetcherPort
from mediapub.infrastructure.http.cache_control import DEFAULT_TTL_MS, compute_ttl_ms

log = structlog.get_logger(__name__)


class ResponseCache:
    """Serves payloads from *cache* while fresh, else fetches and stores.

    Entries are keyed by ``"url:" + server + path``.  A hit never reaches
    the retry controller or the transport and is returned with empty
    metadata (``status_code=None``).  Only error-free responses are
    written, with a TTL derived from their cache headers.

    Without a cache the layer is a plain pass-through.
    """

    def __init__(
        self,
        fetcher: HttpFetcherPort,
        cache: CachePort | None,
        *,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        honor_no_store: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._default_ttl_ms = default_ttl_ms
        self._honor_no_store = honor_no_store
        self._clock = clock

    async def fetch(self, params: RequestParams) -> TransportResponse:
        if self._cache is None:
            return await self._fetcher.fetch(params)

        key = params.cache_key
        cached = await self._cache.get(key)
        if cached is not None:
            log.debug("response_cache_hit", key=key)
            # hits complete on a later loop iteration, like misses
            await asyncio.sleep(0)
            return TransportResponse(status_code=None, payload=cached, from_cache=True)

        response = await self._fetcher.fetch(params)

        ttl_ms = compute_ttl_ms(
            response.headers,
            default_ttl_ms=self._default_ttl_ms,
            honor_no_store=self._honor_no_store,
            clock=self._clock,
        )
        if ttl_ms is None or response.payload is None:
            log.debug("response_cache_skip", key=key, ttl_ms=ttl_ms)
        else:
            await self._cache.set(key, response.payload, ttl_ms=ttl_ms)
            log.debug("response_cache_store", key=key, ttl_ms=ttl_ms)
        return response
