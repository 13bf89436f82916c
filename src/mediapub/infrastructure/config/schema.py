"""Validated settings for mediapub, grouped by YAML section."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediapub.domain.entities.backoff import BackoffPolicy
from mediapub.domain.entities.options import ResolveOptions
from mediapub.domain.entities.publisher import ProviderRule
from mediapub.domain.ports.http import RoundTripPort

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
IdentityEnvironment = Literal["staging", "production"]


def _normalize_path(value: Any) -> Path:
    """Expand ``~`` in a path; never touches the filesystem."""
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"not a path: {value!r}")


class HttpConfig(BaseModel):
    timeout_ms: int = Field(default=10_000, description="Per-attempt timeout (ms).")
    follow_redirects: bool = Field(
        default=True, description="Whether the HTTP client follows redirects."
    )
    user_agent: str = Field(
        default="mediapub/0.1.0",
        description="User-Agent header sent to providers.",
    )

    @field_validator("timeout_ms")
    @classmethod
    def _validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout_ms must be > 0")
        return v


class BackoffConfig(BaseModel):
    """Retry backoff; ranges are enforced per call (ConfigError)."""

    algorithm: str = Field(
        default="binary_exponential",
        description="binary_exponential | linear | fibonacci | constant",
    )
    delay_ms: int = Field(default=5_000, description="Base delay, 1..30000 ms.")
    retries: int = Field(default=3, description="Max retries, 0..10.")

    def to_policy(self) -> BackoffPolicy:
        return BackoffPolicy(
            algorithm=self.algorithm, delay_ms=self.delay_ms, retries=self.retries
        )


class IdentityConfig(BaseModel):
    environment: IdentityEnvironment = Field(
        default="production", description="Identity service environment."
    )
    version: Literal["v2"] = Field(
        default="v2", description="Identity service version."
    )


class CacheConfig(BaseModel):
    """Where fetched responses are cached and for how long."""

    backend: Literal["memory", "diskcache"] = Field(
        default="memory",
        description="memory (per process) or diskcache (persistent).",
    )
    directory: Path = Field(
        default=Path("./.cache/mediapub"),
        alias="dir",
        description="Directory for the diskcache backend.",
    )
    default_ttl_ms: int = Field(
        default=3_600_000,
        description="TTL when the response carries no max-age (ms).",
    )
    honor_no_store: bool = Field(
        default=True,
        description="Do not store private, no-cache or no-store responses.",
    )
    max_concurrent: int = Field(
        default=10,
        description="Concurrent diskcache operations.",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("default_ttl_ms")
    @classmethod
    def _validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("default_ttl_ms must be > 0")
        return v


class AppConfig(BaseModel):
    """Merged settings after every layer has been applied.

    Mirrors the YAML sections (``http``, ``backoff``, ``identity``,
    ``cache``); the ``logging`` section maps onto flat ``log_*`` fields.
    Layer ordering lives in ``load.py``.
    """

    app_name: str = Field(default="mediapub", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="dev, test or prod; prod switches logs to json.",
    )
    debug: bool = Field(default=False, description="Debug mode.")
    verbose: bool = Field(default=False, description="Trace HTTP traffic.")
    ruleset_path: Optional[Path] = Field(
        default=None,
        description="Provider ruleset JSON file; bundled ruleset when unset.",
    )
    deadline_ms: Optional[int] = Field(
        default=None,
        description="End-to-end deadline per resolution (ms); none when unset.",
    )

    http: HttpConfig = Field(default_factory=HttpConfig)
    backoff: BackoffConfig = Field(default_factory=BackoffConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    # logging.level, logging.format
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices("log_level", AliasPath("logging", "level")),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices("log_format", AliasPath("logging", "format")),
        description=(
            "console or json; follows the environment when unset."
        ),
    )

    @field_validator("ruleset_path", mode="before")
    @classmethod
    def _validate_ruleset_path(cls, v: Any) -> Optional[Path]:
        return None if v is None else _normalize_path(v)

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # json only in prod
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_resolve_options(
        self,
        roundtrip: RoundTripPort | None,
        ruleset: tuple[ProviderRule, ...] | None = None,
    ) -> ResolveOptions:
        return ResolveOptions(
            ruleset=ruleset,
            roundtrip=roundtrip,
            debug=self.debug,
            verbose=self.verbose,
            timeout_ms=self.http.timeout_ms,
            backoff=self.backoff.to_policy(),
            environment=self.identity.environment,
            version=self.identity.version,
            deadline_ms=self.deadline_ms,
        )


class EnvOverrides(BaseSettings):
    """``MEDIAPUB_*`` variables, flat (``MEDIAPUB_BACKOFF_RETRIES=5``).

    Unset variables stay ``None`` and are dropped before merging.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIAPUB_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None
    debug: Optional[bool] = None
    verbose: Optional[bool] = None
    ruleset_path: Optional[Path] = None
    deadline_ms: Optional[int] = None

    http_timeout_ms: Optional[int] = None
    http_user_agent: Optional[str] = None

    backoff_algorithm: Optional[str] = None
    backoff_delay_ms: Optional[int] = None
    backoff_retries: Optional[int] = None

    identity_environment: Optional[IdentityEnvironment] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[Literal["memory", "diskcache"]] = None
    cache_dir: Optional[Path] = None
    cache_default_ttl_ms: Optional[int] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Variables that were set, ready to merge over the YAML layer."""
        return self.model_dump(exclude_none=True)
