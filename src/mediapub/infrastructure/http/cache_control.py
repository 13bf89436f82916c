"""Cache lifetime of a response from its ``Cache-Control``/``Expires`` headers."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Mapping

import structlog

log = structlog.get_logger(__name__)

DEFAULT_TTL_MS = 60 * 60 * 1000

# directive-name or directive-name=value (value optionally quoted)
_DIRECTIVE_RE = re.compile(r'([a-zA-Z\-]+)(?:\s*=\s*(["\']?)([^,\s"\']*)\2)?')


@dataclass(frozen=True)
class CacheControl:
    """Parsed response directives relevant to a private TTL cache."""

    no_cache: bool = False
    no_store: bool = False
    private: bool = False
    max_age: int | None = None

    @property
    def forbids_caching(self) -> bool:
        return self.private or self.no_cache or self.no_store


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def parse_cache_control(value: str | None) -> CacheControl | None:
    """Parse a ``Cache-Control`` value; ``None`` when absent or empty."""
    if not value or not value.strip():
        return None

    kwargs: dict[str, object] = {}
    for match in _DIRECTIVE_RE.finditer(value):
        name = match.group(1).lower()
        if name == "no-cache":
            kwargs["no_cache"] = True
        elif name == "no-store":
            kwargs["no_store"] = True
        elif name == "private":
            kwargs["private"] = True
        elif name == "max-age":
            try:
                kwargs["max_age"] = int(match.group(3))
            except (TypeError, ValueError):
                log.debug("cache_control_invalid_max_age", value=match.group(3))
    return CacheControl(**kwargs)  # type: ignore[arg-type]


def parse_expires(value: str | None) -> float | None:
    """``Expires`` as a POSIX timestamp, or ``None`` if unparseable."""
    if not value:
        return None
    try:
        expires = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        log.debug("cache_expires_unparseable", value=value)
        return None
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    return expires.timestamp()


def compute_ttl_ms(
    headers: Mapping[str, str],
    *,
    default_ttl_ms: int = DEFAULT_TTL_MS,
    honor_no_store: bool = True,
    clock: Callable[[], float] = time.time,
) -> int | None:
    """TTL in milliseconds for storing a response, ``None`` = do not store.

    1. ``Cache-Control`` present: ``private``/``no-cache``/``no-store``
       forbid storing (or fall back to *default_ttl_ms* when
       *honor_no_store* is off); otherwise ``max-age`` seconds, or the
       default when no ``max-age`` is given.
    2. Else ``Expires``: time left until expiry.
    3. Else *default_ttl_ms*.

    Non-positive lifetimes (``max-age=0``, past or invalid ``Expires``) are not stored.
    """
    directives = parse_cache_control(_header(headers, "cache-control"))
    if directives is not None:
        if directives.forbids_caching:
            return None if honor_no_store else default_ttl_ms
        if directives.max_age is None:
            return default_ttl_ms
        ttl_ms = directives.max_age * 1000
        return ttl_ms if ttl_ms > 0 else None

    expires_raw = _header(headers, "expires")
    if expires_raw is not None:
        expires_at = parse_expires(expires_raw)
        if expires_at is None:
            return None
        ttl_ms = int((expires_at - clock()) * 1000)
        return ttl_ms if ttl_ms > 0 else None

    return default_ttl_ms
