from .enrich_publisher import FaviconNormalizer, PropertiesLookup
from .resolve_publisher import ResolvePublisherUseCase

__all__ = ["FaviconNormalizer", "PropertiesLookup", "ResolvePublisherUseCase"]
