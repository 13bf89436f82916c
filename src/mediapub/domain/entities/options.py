"""Per-call options for publisher resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from mediapub.domain.entities.backoff import BackoffPolicy
from mediapub.domain.entities.errors import ConfigError
from mediapub.domain.entities.publisher import ProviderRule

if TYPE_CHECKING:
    from mediapub.domain.ports.http import RoundTripPort

IdentityEnvironment = Literal["staging", "production"]
IdentityVersion = Literal["v2"]

IDENTITY_SERVERS: dict[str, dict[str, str]] = {
    "staging": {"v2": "https://ledger-staging.mercury.basicattentiontoken.org"},
    "production": {"v2": "https://ledger.mercury.basicattentiontoken.org"},
}


def _positive_or_none(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class ResolveOptions:
    """Options for one resolution call.

    ``roundtrip`` overrides the transport executor and is required unless
    ``debug`` is set: the default transport is never used silently in
    production.  ``ruleset=None`` selects the bundled ruleset.
    """

    ruleset: tuple[ProviderRule, ...] | None = None
    roundtrip: RoundTripPort | None = None
    debug: bool = False
    verbose: bool = False
    timeout_ms: int | None = None
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    environment: IdentityEnvironment = "production"
    version: IdentityVersion = "v2"
    deadline_ms: int | None = None

    def validated(self) -> ResolveOptions:
        """Return ``self`` or raise ``ConfigError``."""
        if self.roundtrip is not None and not callable(self.roundtrip):
            raise ConfigError("invalid roundtrip option (must be callable)")
        if self.roundtrip is None and not self.debug:
            raise ConfigError(
                "security audit requires options.roundtrip for non-debug use"
            )
        if not _positive_or_none(self.timeout_ms):
            raise ConfigError("invalid timeout")
        if not _positive_or_none(self.deadline_ms):
            raise ConfigError("invalid deadline")
        if self.version not in IDENTITY_SERVERS.get(self.environment, {}):
            raise ConfigError(
                f"unknown identity server: {self.environment}/{self.version}"
            )
        self.backoff.validated()
        return self

    @property
    def identity_server(self) -> str:
        return IDENTITY_SERVERS[self.environment][self.version]
