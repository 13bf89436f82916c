from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import httpx
import structlog

from mediapub.domain.entities.errors import PublisherError
from mediapub.infrastructure.cache.cache_factory import create_cache
from mediapub.infrastructure.config import AppConfig, load_config
from mediapub.infrastructure.http import HttpxRoundTrip
from mediapub.infrastructure.logging.setup import configure_logging, shutdown_logging
from mediapub.infrastructure.ruleset import load_ruleset
from mediapub.interfaces.composition import resolve_publisher

log = structlog.get_logger(__name__)


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mediapub")

    parser.add_argument("media_url", help="Media URL to resolve.")

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--environment",
        default=None,
        choices=["staging", "production"],
        help="Identity service environment.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Debug mode.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Log every HTTP request and response.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )
    parser.add_argument(
        "--timeout-ms",
        default=None,
        type=int,
        help="Per-request timeout in milliseconds.",
    )

    return parser.parse_args(argv)


def _cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.environment:
        overrides["identity_environment"] = args.environment
    if args.debug:
        overrides["debug"] = True
    if args.verbose:
        overrides["verbose"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_format"] = args.log_format
    if args.timeout_ms is not None:
        overrides["http_timeout_ms"] = args.timeout_ms
    return overrides


async def _run(media_url: str, config: AppConfig) -> dict[str, Any]:
    cache = create_cache(
        config.cache.backend,
        directory=config.cache.directory,
        ttl_ms=config.cache.default_ttl_ms,
        max_concurrent=config.cache.max_concurrent,
    )
    async with cache:
        async with httpx.AsyncClient(
            headers={"User-Agent": config.http.user_agent},
            follow_redirects=config.http.follow_redirects,
        ) as client:
            roundtrip = HttpxRoundTrip(client, verbose=config.verbose)
            options = config.to_resolve_options(
                roundtrip, load_ruleset(config.ruleset_path)
            )
            info = await resolve_publisher(
                media_url,
                options,
                cache=cache,
                default_ttl_ms=config.cache.default_ttl_ms,
                honor_no_store=config.cache.honor_no_store,
            )
    return info.to_dict()


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config once, resolves the media URL and prints the publisher
    record as JSON. Returns the process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config = load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=_cli_overrides(args),
    )

    configure_logging(config)

    try:
        record = asyncio.run(_run(args.media_url, config))
    except PublisherError as exc:
        log.error(
            "resolution_failed",
            media_url=args.media_url,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return 1
    finally:
        shutdown_logging()

    print(json.dumps(record))
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
