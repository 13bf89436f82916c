"""YouTube provider resolver: channel identity from oEmbed discovery.

The oEmbed payload names the channel via ``author_url``, expected as
    https://www.youtube.com/channel/{channel_id}

The author page is fetched (cached) and scraped for the channel's
canonical title and avatar, which become the favicon name and source.
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlsplit

import structlog

from mediapub.domain.entities.errors import InvalidAuthorUrlError, ScrapeError
from mediapub.domain.entities.http import RequestParams
from mediapub.domain.entities.publisher import ProviderRule, PublisherInfo
from mediapub.domain.ports.http import HttpFetcherPort
from mediapub.domain.ports.metadata_scraper import MetadataScraperPort

log = structlog.get_logger(__name__)

_PUBLISHER_PREFIX = "youtube#channel:"


def _channel_id(author_url: object) -> str:
    """Third path segment of ``/channel/<id>``-shaped author URLs."""
    if not isinstance(author_url, str) or not author_url:
        raise InvalidAuthorUrlError(author_url)
    try:
        segments = urlsplit(author_url).path.split("/")
    except ValueError as exc:
        raise InvalidAuthorUrlError(author_url) from exc
    if len(segments) != 3 or not segments[2]:
        raise InvalidAuthorUrlError(author_url)
    return segments[2]


class YouTubeResolver:
    """Resolves YouTube oEmbed payloads to ``youtube#channel:`` publishers."""

    def __init__(
        self,
        fetcher: HttpFetcherPort,
        scraper: MetadataScraperPort,
    ) -> None:
        self._fetcher = fetcher
        self._scraper = scraper

    @property
    def name(self) -> str:
        return "YouTube"

    async def resolve(
        self,
        payload: Mapping[str, Any],
        rule: ProviderRule,
        *,
        timeout_ms: int | None = None,
    ) -> PublisherInfo:
        if not isinstance(payload, Mapping):
            raise InvalidAuthorUrlError(None)
        author_url = payload.get("author_url")
        channel_id = _channel_id(author_url)

        response = await self._fetcher.fetch(
            RequestParams.from_url(author_url, is_raw=True, timeout_ms=timeout_ms)
        )
        try:
            scraped = self._scraper.scrape(response.payload, base_url=author_url)
        except ScrapeError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ScrapeError(f"cannot scrape {author_url}: {exc}") from exc

        log.debug("youtube_channel_resolved", channel_id=channel_id)
        return PublisherInfo(
            publisher=_PUBLISHER_PREFIX + channel_id,
            publisher_url=author_url + "/videos",
            favicon_name=scraped.title or payload.get("author_name"),
            favicon_url=scraped.image or payload.get("thumbnail_url"),
            provider_name=rule.provider_name,
        )
