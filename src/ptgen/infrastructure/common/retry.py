"""Bounded retry for secondary upstream fetches."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    attempts: int = 3,
    timeout: float = 8.0,
    **request_kwargs: Any,
) -> httpx.Response:
    """GET *url*, retrying transport errors and 5xx responses.

    4xx responses are returned at once: they will not change on retry.
    On the last attempt the 5xx response is returned, or the transport
    error is raised.

    Args:
        client: Shared HTTP client.
        url: Target URL.
        attempts: Total attempts (>= 1).
        timeout: Per-attempt timeout in seconds.
    """
    attempts = max(1, attempts)
    for attempt in range(attempts):
        last = attempt == attempts - 1
        try:
            response = await client.get(url, timeout=timeout, **request_kwargs)
        except httpx.HTTPError as e:
            if last:
                raise
            log.info(
                "http_retry",
                url=url,
                attempt=attempt + 1,
                error=type(e).__name__,
            )
        else:
            if response.status_code < 500 or last:
                return response
            log.info(
                "http_retry",
                url=url,
                status=response.status_code,
                attempt=attempt + 1,
            )

    raise AssertionError("unreachable")  # pragma: no cover
