"""Registry that maps provider names to their resolvers."""

from __future__ import annotations

import structlog

from mediapub.domain.entities.errors import NoResolverError
from mediapub.domain.ports.provider_resolver import ProviderResolverPort

log = structlog.get_logger(__name__)


class ProviderResolverRegistry:
    """Name-keyed lookup of provider resolvers.

    Unknown provider names raise ``NoResolverError`` so the pipeline can
    treat them like any other candidate failure.
    """

    def __init__(self, resolvers: list[ProviderResolverPort] | None = None) -> None:
        self._resolvers: dict[str, ProviderResolverPort] = {}
        for resolver in resolvers or []:
            self.register(resolver)

    def register(self, resolver: ProviderResolverPort) -> None:
        """Register *resolver* under its ``name``; replaces an earlier one."""
        self._resolvers[resolver.name] = resolver
        log.debug("provider_resolver_registered", provider=resolver.name)

    def get(self, provider_name: str) -> ProviderResolverPort:
        resolver = self._resolvers.get(provider_name)
        if resolver is None:
            raise NoResolverError(provider_name)
        return resolver

    def __contains__(self, provider_name: object) -> bool:
        return provider_name in self._resolvers

    @property
    def supported_providers(self) -> list[str]:
        """Return list of providers with registered resolvers."""
        return list(self._resolvers.keys())
