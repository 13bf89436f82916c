"""Port for turning a provider discovery payload into a publisher record."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from mediapub.domain.entities.publisher import ProviderRule, PublisherInfo


@runtime_checkable
class ProviderResolverPort(Protocol):
    """Resolves a discovery payload of one provider.

    Implementations may perform further HTTP round trips (e.g. fetching
    an author page).  Failures are raised as ``PublisherError`` subclasses.
    """

    @property
    def name(self) -> str:
        """Provider name this resolver handles (e.g. 'YouTube')."""
        ...

    async def resolve(
        self,
        payload: Mapping[str, Any],
        rule: ProviderRule,
        *,
        timeout_ms: int | None = None,
    ) -> PublisherInfo: ...


class ProviderResolverRegistryPort(Protocol):
    def get(self, provider_name: str) -> ProviderResolverPort:
        """Return the resolver or raise ``NoResolverError``."""
        ...
