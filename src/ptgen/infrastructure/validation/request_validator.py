"""Inbound request gate: API key, malicious-input and rate-limit checks."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import parse_qs, unquote

import structlog

from ptgen.infrastructure.common.rate_limiter import ClientRateLimiter

log = structlog.get_logger(__name__)

INTERNAL_REQUEST_HEADER = "x-internal-request"

KEY_REQUIRED_ERROR = "API key required. Access denied."
KEY_INVALID_ERROR = "Invalid API key. Access denied."
MALICIOUS_ERROR = "Malicious request detected. Access denied."
RATE_LIMITED_ERROR = "Rate limit exceeded. Please try again later."

_PUBLIC_DOC_PATHS = frozenset({"/", "/api"})
_CLIENT_IP_HEADERS = ("cf-connecting-ip", "x-forwarded-for", "x-real-ip")

MALICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\.{2,}/"),
    re.compile(r"(script|javascript|vbscript):", re.IGNORECASE),
    re.compile(r"<\s*(iframe|object|embed)", re.IGNORECASE),
)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    status: int = 200
    error: str | None = None
    show_docs: bool = False
    client_ip: str = "unknown"

    @classmethod
    def reject(cls, status: int, error: str, client_ip: str) -> ValidationResult:
        return cls(valid=False, status=status, error=error, client_ip=client_ip)


def client_ip(headers: Mapping[str, str]) -> str:
    for name in _CLIENT_IP_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return "unknown"


def is_malicious(path: str, query: str) -> bool:
    """Test path and query, both raw and percent-decoded."""
    candidates = {path, query, unquote(path), unquote(query)}
    return any(p.search(c) for p in MALICIOUS_PATTERNS for c in candidates if c)


class RequestValidator:
    """Runs the three gate checks in order and stops at the first failure.

    1. API key (only when one is configured; skipped for internal calls)
    2. Malicious path/query patterns
    3. Per-client rate limit
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        rate_limiter: ClientRateLimiter | None = None,
    ) -> None:
        self._api_key = api_key or None
        self._rate_limiter = rate_limiter or ClientRateLimiter()

    def validate(
        self,
        method: str,
        path: str,
        query: str,
        headers: Mapping[str, str],
    ) -> ValidationResult:
        headers = {k.lower(): v for k, v in headers.items()}
        ip = client_ip(headers)
        internal = headers.get(INTERNAL_REQUEST_HEADER, "") == "true"

        if self._api_key and not internal:
            keys = parse_qs(query, keep_blank_values=True).get("key") or [""]
            key = keys[0]
            if not key:
                if method.upper() == "GET" and path in _PUBLIC_DOC_PATHS:
                    return ValidationResult(valid=False, show_docs=True, client_ip=ip)
                log.warning("request_rejected", reason="missing_key", client_ip=ip, path=path)
                return ValidationResult.reject(401, KEY_REQUIRED_ERROR, ip)
            if key != self._api_key:
                log.warning("request_rejected", reason="invalid_key", client_ip=ip, path=path)
                return ValidationResult.reject(401, KEY_INVALID_ERROR, ip)

        if is_malicious(path, query):
            log.warning("request_rejected", reason="malicious", client_ip=ip, path=path)
            return ValidationResult.reject(403, MALICIOUS_ERROR, ip)

        if self._rate_limiter.check_and_record(ip):
            log.warning("rate_limit_exceeded", client_ip=ip, max_requests=self._rate_limiter.max_requests)
            return ValidationResult.reject(429, RATE_LIMITED_ERROR, ip)

        return ValidationResult(valid=True, client_ip=ip)
