"""Tests for ResolvePublisherUseCase (ordered provider fallback)."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mediapub.application.use_cases import ResolvePublisherUseCase
from mediapub.application.use_cases.resolve_publisher import discovery_params
from mediapub.domain.entities.errors import (
    HttpStatusError,
    ImageDecodeError,
    InvalidAuthorUrlError,
    NoResolverError,
    NotFoundError,
    TransportError,
)
from mediapub.domain.entities.http import RequestParams, TransportResponse
from mediapub.domain.entities.publisher import ProviderRule, PublisherInfo
from mediapub.infrastructure.provider_resolvers import (
    ProviderResolverRegistry,
    YouTubeResolver,
)

_MEDIA = "https://media.test/v/42"


def _rule(name: str, domain: str = "media.test") -> ProviderRule:
    return ProviderRule(name, f"https://{name.lower()}.test/oembed", domain=domain)


def _resolver(name: str, outcome: Any = None) -> MagicMock:
    resolver = MagicMock()
    resolver.name = name
    if isinstance(outcome, BaseException):
        resolver.resolve = AsyncMock(side_effect=outcome)
    else:
        resolver.resolve = AsyncMock(
            return_value=outcome or PublisherInfo(f"{name}#pub", "u", name)
        )
    return resolver


def _discovery(outcomes: dict[str, Any] | None = None) -> AsyncMock:
    """Discovery fetcher keyed by server; missing servers return ``{}``."""
    outcomes = outcomes or {}
    calls: list[str] = []

    async def _fetch(params: RequestParams) -> TransportResponse:
        calls.append(params.server)
        outcome = outcomes.get(params.server, {})
        if isinstance(outcome, BaseException):
            raise outcome
        return TransportResponse(200, {}, outcome)

    discovery = AsyncMock()
    discovery.fetch = AsyncMock(side_effect=_fetch)
    discovery.calls = calls
    return discovery


def _stage() -> MagicMock:
    stage = MagicMock()
    stage.apply = AsyncMock(side_effect=lambda info: info)
    return stage


def _use_case(
    rules: list[ProviderRule],
    resolvers: list[Any],
    discovery: AsyncMock,
    *,
    favicon: MagicMock | None = None,
    properties: MagicMock | None = None,
) -> ResolvePublisherUseCase:
    return ResolvePublisherUseCase(
        ruleset=rules,
        registry=ProviderResolverRegistry(resolvers),
        discovery=discovery,
        favicon=favicon or _stage(),
        properties=properties or _stage(),
        timeout_ms=3_000,
    )


class TestDiscoveryParams:
    def test_appends_query(self) -> None:
        params = discovery_params(_rule("A"), "https://media.test/v?id=1&t=2", 500)
        assert params.server == "https://a.test"
        assert params.path == (
            "/oembed?format=json&url=https%3A%2F%2Fmedia.test%2Fv%3Fid%3D1%26t%3D2"
        )
        assert params.timeout_ms == 500
        assert params.http_method == "GET"

    def test_existing_query_uses_ampersand(self) -> None:
        rule = ProviderRule("A", "https://a.test/oembed?key=k", domain="media.test")
        assert discovery_params(rule, _MEDIA).path.startswith(
            "/oembed?key=k&format=json&url="
        )


class TestResolvePublisherUseCase:
    @pytest.mark.asyncio()
    async def test_first_success_wins(self) -> None:
        a, b = _resolver("A"), _resolver("B")
        discovery = _discovery({"https://a.test": {"author_url": "x"}})
        use_case = _use_case([_rule("A"), _rule("B")], [a, b], discovery)

        info = await use_case.execute(_MEDIA)

        assert info.publisher == "A#pub"
        b.resolve.assert_not_awaited()
        payload, rule = a.resolve.await_args.args
        assert payload == {"author_url": "x"}
        assert rule.provider_name == "A"
        assert a.resolve.await_args.kwargs == {"timeout_ms": 3_000}

    @pytest.mark.asyncio()
    async def test_falls_back_in_ruleset_order(self) -> None:
        discovery = _discovery({"https://a.test": HttpStatusError(404)})
        resolvers = [
            _resolver("A"),
            _resolver("B", InvalidAuthorUrlError("bad")),
            _resolver("C"),
        ]
        use_case = _use_case(
            [_rule("A"), _rule("B"), _rule("C")], resolvers, discovery
        )

        info = await use_case.execute(_MEDIA)

        assert info.provider_name == "C"
        assert discovery.calls == ["https://a.test", "https://b.test", "https://c.test"]

    @pytest.mark.asyncio()
    async def test_all_fail_raises_first_error(self) -> None:
        first = HttpStatusError(404)
        discovery = _discovery(
            {"https://a.test": first, "https://b.test": TransportError("reset")}
        )
        use_case = _use_case(
            [_rule("A"), _rule("B"), _rule("C")],
            [_resolver("A"), _resolver("B"), _resolver("C", InvalidAuthorUrlError(""))],
            discovery,
        )

        with pytest.raises(HttpStatusError) as exc_info:
            await use_case.execute(_MEDIA)
        assert exc_info.value is first

    @pytest.mark.asyncio()
    async def test_missing_resolver_is_candidate_failure(self) -> None:
        discovery = _discovery()
        use_case = _use_case([_rule("Vimeo"), _rule("A")], [_resolver("A")], discovery)

        info = await use_case.execute(_MEDIA)

        assert info.provider_name == "A"
        # no discovery request for a provider without resolver
        assert discovery.calls == ["https://a.test"]

    @pytest.mark.asyncio()
    async def test_only_missing_resolvers_raises_no_resolver(self) -> None:
        use_case = _use_case([_rule("Vimeo")], [], _discovery())
        with pytest.raises(NoResolverError):
            await use_case.execute(_MEDIA)

    @pytest.mark.asyncio()
    async def test_no_candidates_raises_not_found(self) -> None:
        discovery = _discovery()
        use_case = _use_case([_rule("A", domain="other.test")], [_resolver("A")], discovery)

        with pytest.raises(NotFoundError) as exc_info:
            await use_case.execute(_MEDIA)

        assert exc_info.value.media_url == _MEDIA
        discovery.fetch.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_stages_run_in_order(self) -> None:
        favicon, properties = _stage(), _stage()
        favicon.apply.side_effect = lambda info: PublisherInfo(
            info.publisher, info.publisher_url, info.provider_name, favicon_url="data:"
        )
        use_case = _use_case(
            [_rule("A")],
            [_resolver("A")],
            _discovery(),
            favicon=favicon,
            properties=properties,
        )

        info = await use_case.execute(_MEDIA)

        assert info.favicon_url == "data:"
        assert properties.apply.await_args.args[0].favicon_url == "data:"

    @pytest.mark.asyncio()
    async def test_favicon_failure_is_fatal(self) -> None:
        favicon, properties = _stage(), _stage()
        favicon.apply.side_effect = ImageDecodeError("broken")
        b = _resolver("B")
        use_case = _use_case(
            [_rule("A"), _rule("B")],
            [_resolver("A"), b],
            _discovery(),
            favicon=favicon,
            properties=properties,
        )

        with pytest.raises(ImageDecodeError):
            await use_case.execute(_MEDIA)

        properties.apply.assert_not_awaited()
        b.resolve.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_malformed_author_url_falls_through_to_next_provider(self) -> None:
        page_fetcher = AsyncMock()
        youtube = YouTubeResolver(page_fetcher, MagicMock())
        rules = [
            ProviderRule("YouTube", "https://a.test/oembed", domain="media.test"),
            ProviderRule("YouTube", "https://b.test/oembed", domain="media.test"),
        ]
        discovery = _discovery(
            {
                "https://a.test": {"author_url": "https://[bad/channel/UCx"},
                "https://b.test": HttpStatusError(404),
            }
        )
        use_case = _use_case(rules, [youtube], discovery)

        with pytest.raises(InvalidAuthorUrlError):
            await use_case.execute(_MEDIA)

        assert discovery.calls == ["https://a.test", "https://b.test"]
        page_fetcher.fetch.assert_not_awaited()
