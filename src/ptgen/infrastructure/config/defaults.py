"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "ptgen",
    "environment": "dev",
    "author": "Hares",
    "http": {
        "timeout_seconds": 15.0,
        "secondary_timeout_seconds": 8.0,
        "search_timeout_seconds": 8.0,
        "retry_attempts": 3,
        "follow_redirects": True,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "diskcache",
        "dir": "./.cache/ptgen",
    },
    "rate_limit": {
        "max_requests": 30,
        "window_seconds": 60.0,
        "sweep_interval_seconds": 10.0,
    },
    "archive": {
        "enabled": False,
        "base_url": "https://raw.githubusercontent.com/ourbits/PtGen/main",
    },
}
