"""Shared test fixtures for the mediapub test suite."""

from __future__ import annotations

from io import BytesIO
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from mediapub.domain.entities.http import RequestParams, TransportResponse
from mediapub.domain.entities.publisher import ProviderRule, PublisherInfo

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------

CHANNEL_URL = "https://www.youtube.com/channel/UC4aBc"


@pytest.fixture()
def youtube_rule() -> ProviderRule:
    """YouTube rule as shipped in the bundled ruleset."""
    return ProviderRule(
        provider_name="YouTube",
        url="https://www.youtube.com/oembed",
        domain="youtube.com",
        schemes=("https://*.youtube.com/watch*", "https://youtu.be/*"),
    )


@pytest.fixture()
def oembed_payload() -> dict[str, Any]:
    """Discovery payload for a YouTube video."""
    return {
        "type": "video",
        "author_name": "Tech Channel",
        "author_url": CHANNEL_URL,
        "provider_name": "YouTube",
        "thumbnail_url": "https://i.ytimg.com/vi/abc/hqdefault.jpg",
    }


@pytest.fixture()
def publisher_info() -> PublisherInfo:
    """Resolved record before enrichment."""
    return PublisherInfo(
        publisher="youtube#channel:UC4aBc",
        publisher_url=CHANNEL_URL + "/videos",
        provider_name="YouTube",
        favicon_name="Tech Channel",
        favicon_url="https://yt3.ggpht.com/avatar.png",
    )


@pytest.fixture()
def channel_html() -> str:
    """Author page with Open Graph metadata."""
    return (
        "<html><head>"
        "<title>Tech Channel - YouTube</title>"
        '<meta property="og:title" content="Tech Channel Official">'
        '<meta property="og:image" content="https://yt3.ggpht.com/avatar.png">'
        "</head><body></body></html>"
    )


# ---------------------------------------------------------------------------
# Image fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_png() -> Callable[[int, int], bytes]:
    """Factory for PNG bytes of a given size."""

    def _make(width: int, height: int) -> bytes:
        buffer = BytesIO()
        Image.new("RGBA", (width, height), (255, 0, 0, 255)).save(buffer, format="PNG")
        return buffer.getvalue()

    return _make


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_fetcher() -> Callable[..., AsyncMock]:
    """Factory for an HttpFetcherPort stub.

    *routes* maps URLs to a payload, a ``TransportResponse`` or an
    exception to raise. Unknown URLs raise ``AssertionError``.
    """

    def _make(routes: dict[str, Any]) -> AsyncMock:
        async def _fetch(params: RequestParams) -> TransportResponse:
            if params.url not in routes:
                raise AssertionError(f"unexpected request: {params.url}")
            outcome = routes[params.url]
            if isinstance(outcome, BaseException):
                raise outcome
            if isinstance(outcome, TransportResponse):
                return outcome
            return TransportResponse(200, {}, outcome)

        fetcher = AsyncMock()
        fetcher.fetch = AsyncMock(side_effect=_fetch)
        return fetcher

    return _make
