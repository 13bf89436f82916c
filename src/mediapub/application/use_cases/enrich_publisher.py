"""Post-resolution stages: favicon normalization and identity properties."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from urllib.parse import urlencode

import structlog

from mediapub.domain.entities.errors import ImageDecodeError, PublisherError
from mediapub.domain.entities.http import RequestParams
from mediapub.domain.entities.publisher import PublisherInfo
from mediapub.domain.ports.http import HttpFetcherPort
from mediapub.domain.ports.image_codec import ImageCodecPort

log = structlog.get_logger(__name__)

FAVICON_SIZE = 32
IDENTITY_PATH = "/v3/publisher/identity"


class FaviconNormalizer:
    """Replaces ``favicon_url`` with a 32x32 (at most) data URL.

    Images with either side ``<= 32`` are re-encoded unchanged; larger
    ones are resized to exactly 32x32.  Fetch and decode failures
    propagate: a broken favicon fails the whole resolution.
    """

    def __init__(
        self,
        fetcher: HttpFetcherPort,
        codec: ImageCodecPort,
        *,
        timeout_ms: int | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._codec = codec
        self._timeout_ms = timeout_ms

    async def apply(self, info: PublisherInfo) -> PublisherInfo:
        if not info.favicon_url:
            return info

        response = await self._fetcher.fetch(
            RequestParams.from_url(
                info.favicon_url, is_binary=True, timeout_ms=self._timeout_ms
            )
        )
        if not isinstance(response.payload, (bytes, bytearray)):
            raise ImageDecodeError(f"favicon is not binary: {info.favicon_url}")

        image = self._codec.decode(bytes(response.payload))
        if image.width > FAVICON_SIZE and image.height > FAVICON_SIZE:
            log.debug(
                "favicon_resized",
                publisher=info.publisher,
                width=image.width,
                height=image.height,
            )
            image = image.resize(FAVICON_SIZE, FAVICON_SIZE)

        return replace(info, favicon_url=image.to_data_url())


class PropertiesLookup:
    """Attaches identity-service properties; never fails the resolution."""

    def __init__(
        self,
        fetcher: HttpFetcherPort,
        server: str,
        *,
        timeout_ms: int | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._server = server
        self._timeout_ms = timeout_ms

    async def apply(self, info: PublisherInfo) -> PublisherInfo:
        params = RequestParams(
            server=self._server,
            path=IDENTITY_PATH + "?" + urlencode({"publisher": info.publisher}),
            timeout_ms=self._timeout_ms,
        )
        try:
            response = await self._fetcher.fetch(params)
        except PublisherError as exc:
            log.debug(
                "publisher_properties_unavailable",
                publisher=info.publisher,
                error=str(exc),
            )
            return info

        payload = response.payload
        properties = payload.get("properties") if isinstance(payload, Mapping) else None
        if not isinstance(properties, Mapping):
            return info
        return replace(info, properties=dict(properties))
