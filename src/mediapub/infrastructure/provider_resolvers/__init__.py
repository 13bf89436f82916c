"""Provider resolver implementations for turning discovery payloads into publishers."""

from __future__ import annotations

from .registry import ProviderResolverRegistry
from .youtube import YouTubeResolver

__all__ = ["ProviderResolverRegistry", "YouTubeResolver"]
