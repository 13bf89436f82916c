"""Canonical title/image extraction from HTML with selector fallback chains.

Each field is read from the first selector in its chain that yields a
non-empty value, so Open Graph wins over Twitter cards, which win over
plain HTML.
"""

from __future__ import annotations

from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag

from mediapub.domain.entities.errors import ScrapeError
from mediapub.domain.entities.publisher import ScrapedMetadata

log = structlog.get_logger(__name__)

# (selector, attribute); attribute None = element text
_TITLE_CHAIN: tuple[tuple[str, str | None], ...] = (
    ('meta[property="og:title"]', "content"),
    ('meta[name="twitter:title"]', "content"),
    ('meta[name="title"]', "content"),
    ('meta[itemprop="name"]', "content"),
    ("title", None),
)

_IMAGE_CHAIN: tuple[tuple[str, str | None], ...] = (
    ('meta[property="og:image:secure_url"]', "content"),
    ('meta[property="og:image:url"]', "content"),
    ('meta[property="og:image"]', "content"),
    ('meta[name="twitter:image:src"]', "content"),
    ('meta[name="twitter:image"]', "content"),
    ('meta[itemprop="image"]', "content"),
    ('link[rel="image_src"]', "href"),
    ('link[itemprop="thumbnailUrl"]', "href"),
)


def parse_html(html: str | bytes) -> BeautifulSoup:
    """Parse HTML with the ``lxml`` parser."""
    return BeautifulSoup(html, "lxml")


def _first_value(
    root: BeautifulSoup | Tag,
    chain: tuple[tuple[str, str | None], ...],
) -> str | None:
    for selector, attr in chain:
        for match in root.select(selector):
            value = match.get_text(strip=True) if attr is None else match.get(attr)
            if isinstance(value, list):
                value = " ".join(value)
            if value and value.strip():
                return " ".join(value.split())
    return None


class HtmlMetadataScraper:
    """Extracts ``ScrapedMetadata`` from a page's meta tags."""

    def scrape(
        self, html: str | bytes, *, base_url: str | None = None
    ) -> ScrapedMetadata:
        try:
            soup = parse_html(html)
        except Exception as exc:  # noqa: BLE001
            raise ScrapeError(f"unparseable HTML: {exc}") from exc

        title = _first_value(soup, _TITLE_CHAIN)
        image = _first_value(soup, _IMAGE_CHAIN)
        if image and base_url:
            image = urljoin(base_url, image)

        log.debug("metadata_scraped", title=title, image=image)
        return ScrapedMetadata(title=title, image=image)
