"""Composition root: wires the request pipeline for one resolution call."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack

import httpx
import structlog

from mediapub.application.use_cases import (
    FaviconNormalizer,
    PropertiesLookup,
    ResolvePublisherUseCase,
)
from mediapub.domain.entities.errors import ResolutionTimeoutError
from mediapub.domain.entities.options import ResolveOptions
from mediapub.domain.entities.publisher import PublisherInfo
from mediapub.domain.ports.cache import CachePort
from mediapub.domain.ports.http import RoundTripPort
from mediapub.domain.ports.image_codec import ImageCodecPort
from mediapub.domain.ports.metadata_scraper import MetadataScraperPort
from mediapub.infrastructure.http import HttpxRoundTrip, ResponseCache, RetryController
from mediapub.infrastructure.http.cache_control import DEFAULT_TTL_MS
from mediapub.infrastructure.imaging import PillowImageCodec
from mediapub.infrastructure.provider_resolvers import (
    ProviderResolverRegistry,
    YouTubeResolver,
)
from mediapub.infrastructure.ruleset import bundled_ruleset
from mediapub.infrastructure.scraping import HtmlMetadataScraper

log = structlog.get_logger(__name__)


def build_use_case(
    options: ResolveOptions,
    roundtrip: RoundTripPort,
    *,
    cache: CachePort | None = None,
    scraper: MetadataScraperPort | None = None,
    codec: ImageCodecPort | None = None,
    default_ttl_ms: int = DEFAULT_TTL_MS,
    honor_no_store: bool = True,
) -> ResolvePublisherUseCase:
    """Assemble transport -> retry -> cache -> resolvers -> stages.

    Order matters:
        1. Retry controller around the round trip (discovery, identity)
        2. Response cache around the retry controller (pages, favicons)
        3. Resolver registry (uses the response cache)
        4. Enrichment stages
    """
    retry = RetryController(roundtrip, options.backoff)
    cached = ResponseCache(
        retry,
        cache,
        default_ttl_ms=default_ttl_ms,
        honor_no_store=honor_no_store,
    )

    registry = ProviderResolverRegistry(
        [YouTubeResolver(cached, scraper or HtmlMetadataScraper())]
    )

    return ResolvePublisherUseCase(
        ruleset=options.ruleset if options.ruleset is not None else bundled_ruleset(),
        registry=registry,
        discovery=retry,
        favicon=FaviconNormalizer(
            cached, codec or PillowImageCodec(), timeout_ms=options.timeout_ms
        ),
        properties=PropertiesLookup(
            retry, options.identity_server, timeout_ms=options.timeout_ms
        ),
        timeout_ms=options.timeout_ms,
    )


async def resolve_publisher(
    media_url: str,
    options: ResolveOptions | None = None,
    *,
    cache: CachePort | None = None,
    default_ttl_ms: int = DEFAULT_TTL_MS,
    honor_no_store: bool = True,
) -> PublisherInfo:
    """Resolve the publisher of *media_url*.

    *cache* is shared across calls by the caller (create it once per
    process); ``None`` disables response caching.  Options are validated
    before any request: an invalid configuration raises ``ConfigError``.

    Raises:
        PublisherError: The first provider error, ``NotFoundError``, a
            favicon failure, or ``ResolutionTimeoutError``.
    """
    options = (options or ResolveOptions()).validated()

    async with AsyncExitStack() as stack:
        roundtrip = options.roundtrip
        if roundtrip is None:
            # debug only: validated() rejects a missing roundtrip otherwise
            client = await stack.enter_async_context(httpx.AsyncClient())
            roundtrip = HttpxRoundTrip(client, verbose=options.verbose)
            log.debug("default_roundtrip_enabled", media_url=media_url)

        use_case = build_use_case(
            options,
            roundtrip,
            cache=cache,
            default_ttl_ms=default_ttl_ms,
            honor_no_store=honor_no_store,
        )

        if options.deadline_ms is None:
            return await use_case.execute(media_url)
        try:
            return await asyncio.wait_for(
                use_case.execute(media_url), timeout=options.deadline_ms / 1000
            )
        except asyncio.TimeoutError as exc:
            raise ResolutionTimeoutError(
                f"resolution of {media_url} exceeded {options.deadline_ms} ms"
            ) from exc
