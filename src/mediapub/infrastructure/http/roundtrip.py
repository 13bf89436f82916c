"""httpx-backed transport executor: one request, strictly classified."""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from mediapub.domain.entities.errors import (
    ConfigError,
    DecodeError,
    HttpStatusError,
    TransportError,
)
from mediapub.domain.entities.http import RequestParams, TransportResponse

log = structlog.get_logger(__name__)

_PREVIEW_CHARS = 500


def decode_payload(params: RequestParams, status_code: int, body: bytes) -> Any:
    """Turn a 2xx body into the payload requested by *params*.

    - raw or binary: the body bytes, untouched
    - otherwise: JSON (``None`` for HTTP 204)
    """
    if params.wants_raw:
        return body
    if status_code == 204:
        return None
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise DecodeError(f"invalid JSON payload from {params.url}: {exc}") from exc


class HttpxRoundTrip:
    """Performs exactly one HTTP request per call; no retry, no cache.

    Malformed URLs raise ``ConfigError``.  Transport faults raise
    ``TransportError`` before any status check; non-2xx responses raise
    ``HttpStatusError``; undecodable payloads raise ``DecodeError``.

    Args:
        client: Shared ``httpx.AsyncClient`` (owned by the caller).
        verbose: Trace requests and responses at info level.
    """

    def __init__(self, client: httpx.AsyncClient, *, verbose: bool = False) -> None:
        self._client = client
        self._verbose = verbose

    async def __call__(self, params: RequestParams) -> TransportResponse:
        method = params.http_method
        timeout: Any = (
            params.timeout_ms / 1000 if params.timeout_ms else httpx.USE_CLIENT_DEFAULT
        )
        if self._verbose:
            log.info(
                "http_request",
                method=method,
                url=params.url,
                payload=params.payload,
            )

        try:
            response = await self._client.request(
                method,
                params.url,
                json=params.payload,
                timeout=timeout,
            )
        except httpx.InvalidURL as exc:
            raise ConfigError(f"invalid URL {params.url!r}: {exc}") from exc
        except httpx.TimeoutException as exc:
            log.debug("http_timeout", url=params.url)
            raise TransportError(f"timeout: {params.url}", timed_out=True) from exc
        except httpx.HTTPError as exc:
            log.debug("http_transport_error", url=params.url, error=str(exc))
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        body = response.content
        headers = dict(response.headers)
        if self._verbose:
            preview = "..."
            if not params.wants_raw:
                preview = body[:_PREVIEW_CHARS].decode("utf-8", errors="replace")
            log.info(
                "http_response",
                status=response.status_code,
                http_version=response.http_version,
                headers=headers,
                body=preview,
            )

        if response.status_code // 100 != 2:
            raise HttpStatusError(
                response.status_code,
                url=params.url,
                response=TransportResponse(response.status_code, headers, body),
            )

        payload = decode_payload(params, response.status_code, body)
        return TransportResponse(response.status_code, headers, payload)
