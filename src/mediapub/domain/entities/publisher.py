"""Domain entities for publisher resolution.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


def _scheme_pattern(scheme: str) -> re.Pattern[str]:
    """Compile a glob-style scheme (``*`` = wildcard) into a regex."""
    parts = (re.escape(chunk) for chunk in scheme.split("*"))
    return re.compile("(.*)".join(parts), re.IGNORECASE)


@dataclass(frozen=True)
class ProviderRule:
    """One provider entry of the ruleset."""

    provider_name: str
    url: str  # discovery endpoint
    domain: str = ""
    schemes: tuple[str, ...] = ()
    _patterns: tuple[re.Pattern[str], ...] = field(
        init=False, repr=False, compare=False, default=()
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "schemes", tuple(self.schemes))
        object.__setattr__(
            self, "_patterns", tuple(_scheme_pattern(s) for s in self.schemes)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProviderRule:
        return cls(
            provider_name=data["provider_name"],
            url=data["url"],
            domain=data.get("domain", ""),
            schemes=tuple(data.get("schemes") or ()),
        )

    def matches(self, media_url: str) -> bool:
        """Literal domain match without schemes, else any scheme match."""
        if not self._patterns:
            return bool(self.domain) and self.domain in media_url
        return any(p.search(media_url) for p in self._patterns)


def match_providers(
    ruleset: Iterable[ProviderRule], media_url: str
) -> list[ProviderRule]:
    """Candidate rules for *media_url*, in ruleset order."""
    return [rule for rule in ruleset if rule.matches(media_url)]


@dataclass(frozen=True)
class ScrapedMetadata:
    """Canonical title/image extracted from an HTML page."""

    title: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class PublisherInfo:
    """Publisher record, refined stage by stage via ``dataclasses.replace``."""

    publisher: str
    publisher_url: str
    provider_name: str
    favicon_name: str | None = None
    favicon_url: str | None = None
    properties: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render the record with its wire field names."""
        data: dict[str, Any] = {
            "publisher": self.publisher,
            "publisherURL": self.publisher_url,
            "faviconName": self.favicon_name,
            "faviconURL": self.favicon_url,
            "providerName": self.provider_name,
        }
        if self.properties is not None:
            data["properties"] = dict(self.properties)
        return data
