"""Publisher resolution use case: ordered provider fallback plus enrichment."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urlencode

import structlog

from mediapub.application.use_cases.enrich_publisher import (
    FaviconNormalizer,
    PropertiesLookup,
)
from mediapub.domain.entities.errors import NotFoundError, PublisherError
from mediapub.domain.entities.http import RequestParams
from mediapub.domain.entities.publisher import (
    ProviderRule,
    PublisherInfo,
    match_providers,
)
from mediapub.domain.ports.http import HttpFetcherPort
from mediapub.domain.ports.provider_resolver import ProviderResolverRegistryPort

log = structlog.get_logger(__name__)


def discovery_params(
    rule: ProviderRule, media_url: str, timeout_ms: int | None = None
) -> RequestParams:
    """``GET <rule.url>?format=json&url=<media_url>``."""
    separator = "&" if "?" in rule.url else "?"
    query = urlencode({"format": "json", "url": media_url})
    return RequestParams.from_url(rule.url + separator + query, timeout_ms=timeout_ms)


class ResolvePublisherUseCase:
    """Resolves a media URL to a publisher record.

    Flow:
        1. Filter the ruleset down to candidate providers for the URL
        2. For each candidate, in order:
           a. look up its resolver
           b. call the discovery endpoint (retried, not cached)
           c. let the resolver build the record
           Any failure moves on to the next candidate.
        3. Normalize the favicon (failure is fatal)
        4. Attach identity properties (failure is ignored)

    When every candidate fails, the *first* recorded error is raised;
    ``NotFoundError`` when no candidate produced one.
    """

    def __init__(
        self,
        *,
        ruleset: Sequence[ProviderRule],
        registry: ProviderResolverRegistryPort,
        discovery: HttpFetcherPort,
        favicon: FaviconNormalizer,
        properties: PropertiesLookup,
        timeout_ms: int | None = None,
    ) -> None:
        self._ruleset = tuple(ruleset)
        self._registry = registry
        self._discovery = discovery
        self._favicon = favicon
        self._properties = properties
        self._timeout_ms = timeout_ms

    async def execute(self, media_url: str) -> PublisherInfo:
        candidates = match_providers(self._ruleset, media_url)
        log.debug(
            "publisher_candidates",
            media_url=media_url,
            providers=[c.provider_name for c in candidates],
        )

        first_error: PublisherError | None = None
        for rule in candidates:
            try:
                info = await self._try_provider(rule, media_url)
            except PublisherError as exc:
                log.info(
                    "publisher_provider_failed",
                    provider=rule.provider_name,
                    media_url=media_url,
                    error=str(exc),
                )
                if first_error is None:
                    first_error = exc
                continue

            info = await self._favicon.apply(info)
            info = await self._properties.apply(info)
            log.info(
                "publisher_resolved",
                media_url=media_url,
                provider=rule.provider_name,
                publisher=info.publisher,
            )
            return info

        if first_error is not None:
            raise first_error
        raise NotFoundError(media_url)

    async def _try_provider(self, rule: ProviderRule, media_url: str) -> PublisherInfo:
        resolver = self._registry.get(rule.provider_name)
        response = await self._discovery.fetch(
            discovery_params(rule, media_url, self._timeout_ms)
        )
        return await resolver.resolve(
            response.payload, rule, timeout_ms=self._timeout_ms
        )
