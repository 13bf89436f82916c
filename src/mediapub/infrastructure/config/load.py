"""Layered configuration loading.

Layers, lowest to highest precedence::

    DEFAULT_CONFIG < YAML file < MEDIAPUB_* environment (.env) < CLI

Each layer is brought into the sectioned shape of ``config.yaml`` before
merging; ``AppConfig`` validates the merged result once.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Iterator, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTIONS: frozenset[str] = frozenset(
    {"http", "backoff", "identity", "logging", "cache"}
)

_TOP_LEVEL: frozenset[str] = frozenset(
    {"app_name", "environment", "debug", "verbose", "ruleset_path", "deadline_ms"}
)

# flat env/CLI key -> (section, key)
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    f"{section}_{key}": (section, key)
    for section, keys in {
        "http": ("timeout_ms", "follow_redirects", "user_agent"),
        "backoff": ("algorithm", "delay_ms", "retries"),
        "identity": ("environment", "version"),
        "cache": ("backend", "dir", "default_ttl_ms", "honor_no_store"),
    }.items()
    for key in keys
}
_FLAT_KEYS["log_level"] = ("logging", "level")
_FLAT_KEYS["log_format"] = ("logging", "format")


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Merge *layer* into *target* in place; nested mappings merge per key."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = value


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Project *layer* onto the sectioned shape, dropping unknown keys."""
    shaped: dict[str, Any] = {
        key: dict(value)
        for key, value in layer.items()
        if key in _SECTIONS and isinstance(value, Mapping)
    }
    shaped.update({key: layer[key] for key in _TOP_LEVEL if key in layer})
    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in layer:
            shaped.setdefault(section, {})[key] = layer[flat_key]
    return shaped


def _yaml_layer(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    document = yaml.safe_load(path.read_text(encoding="utf-8"))
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ValueError(f"{path}: expected a YAML mapping, got {type(document)!r}")
    return document


def _layers(
    config_path: Path | None, cli_overrides: Mapping[str, Any]
) -> Iterator[Mapping[str, Any]]:
    yield deepcopy(DEFAULT_CONFIG)
    if config_path is not None:
        yield _yaml_layer(config_path)
    yield EnvOverrides().to_update_dict()
    yield cli_overrides


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the validated ``AppConfig``.

    A ``.env`` file only fills variables missing from the process
    environment. Nothing is written to disk.

    Raises:
        FileNotFoundError: *config_path* or *dotenv_path* does not exist.
        pydantic.ValidationError: The merged configuration is invalid.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    merged: dict[str, Any] = {}
    for layer in _layers(config_path, cli_overrides or {}):
        _merge_into(merged, _sectioned(layer))
    return AppConfig.model_validate(merged)
