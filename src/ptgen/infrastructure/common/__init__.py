"""Common infrastructure utilities."""

from __future__ import annotations

from .rate_limiter import ClientRateLimiter
from .retry import fetch_with_retry
from .upstream import browser_headers, is_anti_bot, parse_jsonp, split_list

__all__ = [
    "ClientRateLimiter",
    "browser_headers",
    "fetch_with_retry",
    "is_anti_bot",
    "parse_jsonp",
    "split_list",
]
