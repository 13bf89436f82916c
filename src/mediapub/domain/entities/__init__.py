from .backoff import BackoffPolicy
from .errors import (
    ConfigError,
    DecodeError,
    HttpStatusError,
    ImageDecodeError,
    InvalidAuthorUrlError,
    NoResolverError,
    NotFoundError,
    PublisherError,
    ResolutionTimeoutError,
    ScrapeError,
    TransportError,
)
from .http import RequestParams, TransportResponse
from .options import ResolveOptions
from .publisher import ProviderRule, PublisherInfo, ScrapedMetadata, match_providers

__all__ = [
    "BackoffPolicy",
    "ConfigError",
    "DecodeError",
    "HttpStatusError",
    "ImageDecodeError",
    "InvalidAuthorUrlError",
    "NoResolverError",
    "NotFoundError",
    "ProviderRule",
    "PublisherError",
    "PublisherInfo",
    "RequestParams",
    "ResolutionTimeoutError",
    "ResolveOptions",
    "ScrapeError",
    "ScrapedMetadata",
    "TransportError",
    "TransportResponse",
    "match_providers",
]
