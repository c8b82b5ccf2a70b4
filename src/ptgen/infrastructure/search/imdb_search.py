"""IMDb title search: suggestion API first, find-page scrape second."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from ptgen.domain.entities import NO_RESULTS_ERROR, SearchOutcome
from ptgen.infrastructure.common.html_selectors import (
    extract_attr,
    extract_text,
    parse_html,
    select_items,
)

from .normalize import MAX_RESULTS, normalize_imdb

log = structlog.get_logger(__name__)

_SUGGESTION_URL = "https://v2.sg.media-imdb.com/suggestion/h/{query}.json"
_FIND_URL = "https://www.imdb.com/find"
_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}
_TITLE_HREF_RE = re.compile(r"/title/(tt\d+)")
_YEAR_RE = re.compile(r"\((\d{4})\)|\b(\d{4})\b")


class ScrapeError(Exception):
    pass


def parse_find_page(html: str, limit: int = MAX_RESULTS) -> list[dict[str, Any]]:
    """Rows of the find page as suggestion-shaped dicts.

    Handles both the legacy ``.findResult`` table and the current
    ``ipc-metadata-list-summary-item`` list.
    """
    soup = parse_html(html)
    items: list[dict[str, Any]] = []
    for row in select_items(soup, ".findResult", "li.ipc-metadata-list-summary-item"):
        if len(items) >= limit:
            break
        href = extract_attr(row, '.result_text a[href*="/title/tt"]', "href", 'a[href*="/title/tt"]')
        match = _TITLE_HREF_RE.search(href)
        if match is None:
            continue

        title = extract_text(row, ".result_text a", ".ipc-metadata-list-summary-item__t")
        full_text = extract_text(row, ".result_text", ".ipc-metadata-list-summary-item__tc", strip=False)
        full_text = " ".join(full_text.split())
        year = _YEAR_RE.search(full_text.replace(title, "", 1))
        items.append(
            {
                "id": match.group(1),
                "l": title,
                "y": next((g for g in year.groups() if g), "") if year else "",
                "qid": "feature",
                "s": full_text.replace(title, "", 1).strip(),
            }
        )
    return items


class ImdbSearchBackend:
    """Title search against IMDb, no API key needed."""

    site = "search-imdb"

    def __init__(self, client: httpx.AsyncClient, *, timeout: float = 15.0) -> None:
        self._client = client
        self._timeout = timeout

    async def _via_suggestion(self, query: str) -> list[dict[str, Any]]:
        url = _SUGGESTION_URL.format(query=quote(query, safe=""))
        try:
            resp = await self._client.get(url, timeout=self._timeout)
            if not resp.is_success:
                log.info("imdb_suggestion_status", status=resp.status_code, query=query)
                return []
            data = resp.json()
        except (httpx.HTTPError, ValueError):
            log.warning("imdb_suggestion_failed", query=query, exc_info=True)
            return []
        results = data.get("d") if isinstance(data, dict) else None
        return [item for item in results or [] if isinstance(item, dict)]

    async def _via_scrape(self, query: str) -> list[dict[str, Any]]:
        log.info("imdb_search_scrape_fallback", query=query)
        resp = await self._client.get(
            _FIND_URL,
            params={"q": query, "s": "tt"},
            headers=_HEADERS,
            timeout=self._timeout,
        )
        if not resp.is_success:
            raise ScrapeError(f"IMDb scrape failed with status {resp.status_code}")
        return parse_find_page(resp.text)

    async def search(self, query: str) -> SearchOutcome:
        try:
            raw = await self._via_suggestion(query)
            if not raw:
                raw = await self._via_scrape(query)
        except httpx.TimeoutException:
            return SearchOutcome.failed("IMDb API请求超时 | IMDb API request timeout")
        except (httpx.HTTPError, ScrapeError) as e:
            log.warning("imdb_search_failed", query=query, error=str(e))
            return SearchOutcome.failed(str(e) or f"Failed to search IMDb for: {query}.")

        if not raw:
            return SearchOutcome.failed(NO_RESULTS_ERROR)
        data = [normalize_imdb(item) for item in raw[:MAX_RESULTS]]
        return SearchOutcome(success=True, data=data, site=self.site)
