"""Tests for HttpxRoundTrip (single attempt, strict classification)."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from mediapub.domain.entities.errors import (
    ConfigError,
    DecodeError,
    HttpStatusError,
    TransportError,
)
from mediapub.domain.entities.http import RequestParams
from mediapub.infrastructure.http.roundtrip import HttpxRoundTrip, decode_payload

_URL = "https://api.test/resource"


def _params(**kwargs: object) -> RequestParams:
    return RequestParams.from_url(_URL, **kwargs)  # type: ignore[arg-type]


class TestDecodePayload:
    def test_json(self) -> None:
        assert decode_payload(_params(), 200, b'{"a": 1}') == {"a": 1}

    def test_no_content(self) -> None:
        assert decode_payload(_params(), 204, b"") is None

    def test_raw_keeps_bytes(self) -> None:
        body = b"<html>\xff</html>"
        assert decode_payload(_params(is_raw=True), 200, body) == body

    def test_binary_bytes(self) -> None:
        assert decode_payload(_params(is_binary=True), 200, b"\x89PNG") == b"\x89PNG"

    def test_invalid_json(self) -> None:
        with pytest.raises(DecodeError):
            decode_payload(_params(), 200, b"<html>")


class TestHttpxRoundTrip:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_json_response(self) -> None:
        respx.get(_URL).respond(200, json={"ok": True}, headers={"X-Test": "1"})

        async with httpx.AsyncClient() as client:
            response = await HttpxRoundTrip(client)(_params())

        assert response.status_code == 200
        assert response.payload == {"ok": True}
        assert response.headers["x-test"] == "1"
        assert not response.from_cache

    @respx.mock
    @pytest.mark.asyncio()
    async def test_no_content(self) -> None:
        respx.get(_URL).respond(204)

        async with httpx.AsyncClient() as client:
            response = await HttpxRoundTrip(client)(_params())

        assert response.status_code == 204
        assert response.payload is None

    @respx.mock
    @pytest.mark.asyncio()
    async def test_raw_and_binary(self) -> None:
        respx.get(_URL).respond(200, content=b"\x00\x01body")

        async with httpx.AsyncClient() as client:
            roundtrip = HttpxRoundTrip(client, verbose=True)
            raw = await roundtrip(_params(is_raw=True))
            binary = await roundtrip(_params(is_binary=True))

        assert raw.payload == b"\x00\x01body"
        assert binary.payload == b"\x00\x01body"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_payload_sends_json_post(self) -> None:
        route = respx.post(_URL).respond(200, json={})

        async with httpx.AsyncClient() as client:
            await HttpxRoundTrip(client)(_params(payload={"q": 1}))

        assert route.called
        request = route.calls.last.request
        assert request.method == "POST"
        assert json.loads(request.content) == {"q": 1}

    @respx.mock
    @pytest.mark.asyncio()
    @pytest.mark.parametrize("status", [301, 404, 500, 503])
    async def test_non_2xx_raises_status_error(self, status: int) -> None:
        respx.get(_URL).respond(status, text="nope")

        async with httpx.AsyncClient() as client:
            with pytest.raises(HttpStatusError) as exc_info:
                await HttpxRoundTrip(client)(_params())

        assert exc_info.value.status_code == status
        assert exc_info.value.status_class == status // 100
        assert exc_info.value.response is not None
        assert exc_info.value.response.payload == b"nope"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_connect_error_is_transport_error(self) -> None:
        respx.get(_URL).mock(side_effect=httpx.ConnectError("refused"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(TransportError) as exc_info:
                await HttpxRoundTrip(client)(_params())

        assert not exc_info.value.timed_out

    @respx.mock
    @pytest.mark.asyncio()
    async def test_timeout_is_flagged(self) -> None:
        respx.get(_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(TransportError) as exc_info:
                await HttpxRoundTrip(client)(_params(timeout_ms=50))

        assert exc_info.value.timed_out

    @respx.mock
    @pytest.mark.asyncio()
    async def test_bad_json_is_decode_error(self) -> None:
        respx.get(_URL).respond(200, text="not json")

        async with httpx.AsyncClient() as client:
            with pytest.raises(DecodeError):
                await HttpxRoundTrip(client)(_params())

    @pytest.mark.asyncio()
    async def test_invalid_url_is_config_error(self) -> None:
        client = MagicMock()
        client.request = AsyncMock(side_effect=httpx.InvalidURL("bad host"))

        with pytest.raises(ConfigError, match="invalid URL"):
            await HttpxRoundTrip(client)(_params())
