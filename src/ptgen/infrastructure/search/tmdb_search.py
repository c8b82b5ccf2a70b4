"""TMDB title search over movies and TV shows."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from ptgen.domain.entities import NO_RESULTS_ERROR, SearchOutcome

from .normalize import MAX_RESULTS, normalize_tmdb

log = structlog.get_logger(__name__)

_BASE_URL = "https://api.themoviedb.org/3"
_MEDIA_TYPES = ("movie", "tv")

MISSING_KEY_ERROR = "TMDB API密钥未配置 | TMDB API key not configured"
TIMEOUT_ERROR = "TMDB API请求超时 | TMDB API request timeout"


class TmdbSearchBackend:
    """Parallel ``/search/movie`` + ``/search/tv`` under one deadline.

    Hits are tagged with their media type, merged, sorted by popularity
    (descending) and capped at 10.
    """

    site = "search-tmdb"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str | None = None,
        timeout: float = 8.0,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._timeout = timeout

    async def _fetch(self, media_type: str, query: str) -> httpx.Response:
        return await self._client.get(
            f"{_BASE_URL}/search/{media_type}",
            params={"api_key": self._api_key, "query": query},
            timeout=self._timeout,
        )

    @staticmethod
    def _results(resp: httpx.Response, media_type: str) -> list[dict[str, Any]]:
        if not resp.is_success:
            log.warning("tmdb_search_status", media_type=media_type, status=resp.status_code)
            return []
        try:
            results = resp.json().get("results")
        except ValueError:
            log.warning("tmdb_search_parse_failed", media_type=media_type)
            return []
        if not isinstance(results, list):
            return []
        return [{**item, "media_type": media_type} for item in results if isinstance(item, dict)]

    async def search(self, query: str) -> SearchOutcome:
        if not self._api_key:
            return SearchOutcome.failed(MISSING_KEY_ERROR)
        q = str(query or "").strip()
        if not q:
            return SearchOutcome.failed("Invalid query")

        try:
            responses = await asyncio.wait_for(
                asyncio.gather(*(self._fetch(t, q) for t in _MEDIA_TYPES)),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            log.warning("tmdb_search_timeout", query=q, timeout=self._timeout)
            return SearchOutcome.failed(TIMEOUT_ERROR)
        except httpx.HTTPError as e:
            log.warning("tmdb_search_network_error", query=q, error=str(e))
            return SearchOutcome.failed(f"TMDB API网络错误: {e or 'Unknown error'}")

        results: list[dict[str, Any]] = []
        for media_type, resp in zip(_MEDIA_TYPES, responses):
            results.extend(self._results(resp, media_type))

        results.sort(key=lambda item: item.get("popularity") or 0, reverse=True)
        if not results:
            return SearchOutcome.failed(NO_RESULTS_ERROR)

        data = [normalize_tmdb(item) for item in results[:MAX_RESULTS]]
        return SearchOutcome(success=True, data=data, site=self.site)
