"""Request/response value objects shared by the HTTP layers.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urlsplit

from mediapub.domain.entities.errors import ConfigError


@dataclass(frozen=True)
class RequestParams:
    """Everything needed for one transport attempt.

    ``server`` is ``scheme://host[:port]``; ``path`` includes the query
    string.  ``is_binary`` implies ``is_raw``.
    """

    server: str
    path: str = "/"
    method: str | None = None
    payload: Any = None
    timeout_ms: int | None = None
    is_binary: bool = False
    is_raw: bool = False

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> RequestParams:
        """Split an absolute URL into ``server`` and ``path``.

        Raises ``ConfigError`` for URLs ``urlsplit`` rejects.
        """
        try:
            parts = urlsplit(url)
        except ValueError as exc:
            raise ConfigError(f"invalid URL {url!r}: {exc}") from exc
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        return cls(server=f"{parts.scheme}://{parts.netloc}", path=path, **kwargs)

    @property
    def url(self) -> str:
        return self.server + self.path

    @property
    def cache_key(self) -> str:
        return "url:" + self.server + self.path

    @property
    def http_method(self) -> str:
        if self.method:
            return self.method.upper()
        return "POST" if self.payload is not None else "GET"

    @property
    def wants_raw(self) -> bool:
        return self.is_raw or self.is_binary


@dataclass(frozen=True)
class TransportResponse:
    """Outcome of a successful attempt (or a cache hit).

    Cache hits carry no metadata: ``status_code`` is ``None`` and
    ``headers`` is empty.
    """

    status_code: int | None
    headers: Mapping[str, str] = field(default_factory=dict)
    payload: Any = None
    from_cache: bool = False
