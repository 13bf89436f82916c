"""Error taxonomy for publisher resolution.

Every failure surfaced by the pipeline derives from ``PublisherError`` so
callers can catch one type.  Retry and fallback decisions are made on the
concrete subclass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mediapub.domain.entities.http import TransportResponse


class PublisherError(Exception):
    """Base error for publisher resolution."""


class ConfigError(PublisherError):
    """Invalid options, backoff parameters or unknown backoff algorithm."""


class TransportError(PublisherError):
    """Connection-level fault raised before any status classification."""

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class HttpStatusError(PublisherError):
    """Non-2xx HTTP response."""

    def __init__(
        self,
        status_code: int,
        *,
        url: str = "",
        response: TransportResponse | None = None,
    ) -> None:
        suffix = f" for {url}" if url else ""
        super().__init__(f"HTTP response {status_code}{suffix}")
        self.status_code = status_code
        self.url = url
        self.response = response

    @property
    def status_class(self) -> int:
        return self.status_code // 100


class DecodeError(PublisherError):
    """Response body could not be decoded into the expected payload."""


class NoResolverError(PublisherError):
    def __init__(self, provider_name: str) -> None:
        super().__init__(f"no resolver for {provider_name}")
        self.provider_name = provider_name


class InvalidAuthorUrlError(PublisherError):
    """Discovery payload carried an author URL of unexpected shape."""

    def __init__(self, author_url: object) -> None:
        super().__init__(f"invalid author_url: {author_url}")
        self.author_url = author_url


class ScrapeError(PublisherError):
    """Author page could not be scraped for metadata."""


class ImageDecodeError(PublisherError):
    """Favicon bytes could not be decoded or re-encoded as an image."""


class NotFoundError(PublisherError):
    """No provider matched the media URL."""

    def __init__(self, media_url: str) -> None:
        super().__init__(f"no publisher found for {media_url}")
        self.media_url = media_url


class ResolutionTimeoutError(PublisherError):
    """The end-to-end resolution deadline elapsed."""


def is_server_fault(exc: BaseException) -> bool:
    """Return ``True`` for errors the retry controller may retry.

    Server-side faults are transport faults and HTTP 5xx responses.
    """
    if isinstance(exc, TransportError):
        return True
    return isinstance(exc, HttpStatusError) and exc.status_class == 5
