"""Ports for issuing HTTP requests at the different pipeline layers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from mediapub.domain.entities.http import RequestParams, TransportResponse


@runtime_checkable
class RoundTripPort(Protocol):
    """Performs exactly one HTTP request and classifies the outcome.

    Raises ``TransportError``, ``HttpStatusError`` or ``DecodeError``.
    """

    async def __call__(self, params: RequestParams) -> TransportResponse: ...


class HttpFetcherPort(Protocol):
    """Fetches a request with whatever resilience the layer adds
    (retries, caching)."""

    async def fetch(self, params: RequestParams) -> TransportResponse: ...
