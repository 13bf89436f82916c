"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "mediapub",
    "environment": "dev",
    "debug": False,
    "verbose": False,
    "ruleset_path": None,
    "deadline_ms": None,
    "http": {
        "timeout_ms": 10_000,
        "follow_redirects": True,
        "user_agent": "mediapub/0.1.0",
    },
    "backoff": {
        "algorithm": "binary_exponential",
        "delay_ms": 5_000,
        "retries": 3,
    },
    "identity": {
        "environment": "production",
        "version": "v2",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "memory",
        "dir": "./.cache/mediapub",
        "default_ttl_ms": 3_600_000,
        "honor_no_store": True,
        "max_concurrent": 10,
    },
}
