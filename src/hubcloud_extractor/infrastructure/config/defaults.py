"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "hubcloud-extractor",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "max_redirects": 5,
        "max_connections": 20,
    },
    "extract": {
        "timeout_seconds": 60.0,
        "max_concurrent_resolves": 5,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
