"""Shared helpers for talking to upstream metadata sites."""

from __future__ import annotations

import json
import re
from typing import Any

BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "zh-CN,zh;q=0.9,en-US;q=0.8",
}

ANTI_BOT_RE = re.compile(r"验证码|检测到有异常请求|机器人程序|访问受限|请先登录", re.IGNORECASE)

_JSONP_RE = re.compile(r"^[^(]+\(\s*(.+?)\s*\);?$", re.DOTALL)


def browser_headers(cookie: str | None = None) -> dict[str, str]:
    """Browser-like request headers, with *cookie* when given."""
    headers = dict(BROWSER_HEADERS)
    if cookie:
        headers["Cookie"] = cookie
    return headers


def is_anti_bot(text: str | None) -> bool:
    """True if *text* looks like a captcha or access-denied page."""
    return bool(text) and ANTI_BOT_RE.search(text) is not None


def parse_jsonp(text: str) -> dict[str, Any]:
    """Unwrap ``callback({...})`` and decode the payload.

    Returns ``{}`` if the body is not a JSONP-wrapped JSON object.
    """
    match = _JSONP_RE.match(text.replace("\r", "").replace("\n", "").strip())
    if not match:
        return {}
    try:
        data = json.loads(match.group(1))
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def split_list(text: str, separator: str = " / ") -> list[str]:
    """Split a separator-joined label value, dropping empty items."""
    return [item.strip() for item in text.split(separator) if item.strip()]
