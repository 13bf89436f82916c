"""Tests for the mediapub command-line entrypoint."""

from __future__ import annotations

import json
import os
from unittest.mock import AsyncMock, patch

import pytest
from structlog.testing import capture_logs

from mediapub.domain.entities.errors import NotFoundError
from mediapub.domain.entities.publisher import PublisherInfo
from mediapub.infrastructure.http import HttpxRoundTrip
from mediapub.interfaces.cli.cli import _cli_overrides, _parse_args, start

_MEDIA = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
_CLI = "mediapub.interfaces.cli.cli"


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host MEDIAPUB_* variables and global logging out of the tests."""
    for key in list(os.environ):
        if key.startswith("MEDIAPUB_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(f"{_CLI}.configure_logging", lambda config: None)
    monkeypatch.setattr(f"{_CLI}.shutdown_logging", lambda: None)


class TestParseArgs:
    def test_flags_map_to_overrides(self) -> None:
        args = _parse_args(
            [
                _MEDIA,
                "--environment",
                "staging",
                "--debug",
                "--log-level",
                "DEBUG",
                "--timeout-ms",
                "2500",
            ]
        )
        assert args.media_url == _MEDIA
        assert _cli_overrides(args) == {
            "identity_environment": "staging",
            "debug": True,
            "log_level": "DEBUG",
            "http_timeout_ms": 2500,
        }

    def test_no_flags_no_overrides(self) -> None:
        assert _cli_overrides(_parse_args([_MEDIA])) == {}

    def test_rejects_unknown_environment(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args([_MEDIA, "--environment", "qa"])


class TestStart:
    def test_prints_record_as_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        info = PublisherInfo(
            "youtube#channel:UC4aBc",
            "https://www.youtube.com/channel/UC4aBc/videos",
            "YouTube",
            favicon_name="Tech Channel",
            favicon_url="data:image/png;base64,AAAA",
        )
        resolve = AsyncMock(return_value=info)
        with patch(f"{_CLI}.resolve_publisher", resolve), capture_logs():
            code = start([_MEDIA, "--environment", "staging", "--timeout-ms", "1234"])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == info.to_dict()

        media_url, options = resolve.await_args.args
        assert media_url == _MEDIA
        assert isinstance(options.roundtrip, HttpxRoundTrip)
        assert options.environment == "staging"
        assert options.timeout_ms == 1234
        assert options.ruleset[0].provider_name == "YouTube"
        assert resolve.await_args.kwargs["cache"] is not None
        assert resolve.await_args.kwargs["honor_no_store"] is True

    def test_failure_exits_non_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        resolve = AsyncMock(side_effect=NotFoundError(_MEDIA))
        with patch(f"{_CLI}.resolve_publisher", resolve), capture_logs() as logs:
            code = start([_MEDIA])

        assert code == 1
        failed = [e for e in logs if e["event"] == "resolution_failed"]
        assert failed[0]["error_type"] == "NotFoundError"
        assert failed[0]["log_level"] == "error"
        assert capsys.readouterr().out == ""
