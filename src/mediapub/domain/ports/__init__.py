from .cache import CachePort
from .http import HttpFetcherPort, RoundTripPort
from .image_codec import ImageCodecPort, ImagePort
from .metadata_scraper import MetadataScraperPort
from .provider_resolver import ProviderResolverPort, ProviderResolverRegistryPort

__all__ = [
    "CachePort",
    "HttpFetcherPort",
    "ImageCodecPort",
    "ImagePort",
    "MetadataScraperPort",
    "ProviderResolverPort",
    "ProviderResolverRegistryPort",
    "RoundTripPort",
]
