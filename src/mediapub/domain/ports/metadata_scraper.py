"""Port for extracting canonical metadata from an HTML page."""

from __future__ import annotations

from typing import Protocol

from mediapub.domain.entities.publisher import ScrapedMetadata


class MetadataScraperPort(Protocol):
    def scrape(
        self, html: str | bytes, *, base_url: str | None = None
    ) -> ScrapedMetadata:
        """Extract title and image; relative image URLs resolve against
        *base_url*.  Raises ``ScrapeError``."""
        ...
