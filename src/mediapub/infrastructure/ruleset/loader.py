"""Ruleset loading: provider rules from the bundled or a custom JSON file."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import structlog

from mediapub.domain.entities.errors import ConfigError
from mediapub.domain.entities.publisher import ProviderRule

log = structlog.get_logger(__name__)

_BUNDLED_RULESET = "providers.json"


def parse_ruleset(data: Any) -> tuple[ProviderRule, ...]:
    """Validate decoded JSON into provider rules.

    Raises:
        ConfigError: If the document is not a list of rule objects with
            ``provider_name`` and ``url``.
    """
    if not isinstance(data, list):
        raise ConfigError(f"ruleset must be a list, got: {type(data).__name__}")

    rules: list[ProviderRule] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigError(f"ruleset entry {index} must be an object")
        missing = [k for k in ("provider_name", "url") if not entry.get(k)]
        if missing:
            raise ConfigError(f"ruleset entry {index} missing {', '.join(missing)}")
        schemes = entry.get("schemes") or []
        if not isinstance(schemes, list) or not all(
            isinstance(s, str) for s in schemes
        ):
            raise ConfigError(f"ruleset entry {index}: schemes must be strings")
        rules.append(ProviderRule.from_dict(entry))
    return tuple(rules)


@lru_cache(maxsize=1)
def bundled_ruleset() -> tuple[ProviderRule, ...]:
    """Ruleset shipped with the package (loaded once)."""
    source = resources.files(__package__).joinpath(_BUNDLED_RULESET)
    raw = source.read_text(encoding="utf-8")
    rules = parse_ruleset(json.loads(raw))
    log.debug("ruleset_loaded", source="bundled", providers=len(rules))
    return rules


def load_ruleset(path: Path | None = None) -> tuple[ProviderRule, ...]:
    """Load rules from *path*, or the bundled ruleset when ``None``."""
    if path is None:
        return bundled_ruleset()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"cannot read ruleset {path}: {exc}") from exc
    rules = parse_ruleset(data)
    log.debug("ruleset_loaded", source=str(path), providers=len(rules))
    return rules
