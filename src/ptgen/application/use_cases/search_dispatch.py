"""Search dispatch use case: free-text query -> normalized search hits."""

from __future__ import annotations

import re
from dataclasses import replace

import structlog

from ptgen.domain.entities import SearchOutcome
from ptgen.domain.ports import SearchBackendPort

log = structlog.get_logger(__name__)

INVALID_SOURCE_ERROR = "Invalid source. Supported sources: imdb, tmdb"
MISSING_QUERY_ERROR = "Query parameter is missing or invalid."
AUTO_SEARCH_ERROR = "Search failed. Please try again later."

_CJK_RE = re.compile(
    "["
    "一-鿿"
    "㐀-䶿"
    "\U00020000-\U0002a6df"
    "\U0002a700-\U0002b73f"
    "\U0002b740-\U0002b81f"
    "\U0002b820-\U0002ceaf"
    "豈-﫿"
    "]"
)
_LATIN_RE = re.compile(r"[a-zA-Z]")


def is_chinese_text(text: str) -> bool:
    """True if *text* is primarily Chinese.

    CJK characters must outnumber Latin letters. With fewer than two
    countable characters, a single CJK character is enough.
    """
    if not isinstance(text, str) or not text.strip():
        return False

    cjk = len(_CJK_RE.findall(text))
    latin = len(_LATIN_RE.findall(text))
    if cjk + latin < 2:
        return cjk > 0
    return cjk > latin


class SearchDispatchUseCase:
    """Selects and invokes a search backend.

    ``backends`` maps a lowercase source name (``imdb``, ``tmdb``) to its
    backend. Chinese queries auto-route to TMDB, everything else to IMDb.
    """

    def __init__(self, backends: dict[str, SearchBackendPort]) -> None:
        self.backends = {name.lower(): backend for name, backend in backends.items()}

    async def search(self, source: str, query: str) -> SearchOutcome:
        """Search an explicitly named source."""
        backend = self.backends.get(str(source).lower())
        if backend is None:
            return SearchOutcome.failed(INVALID_SOURCE_ERROR)

        log.info("search_request", source=source, query=query)
        try:
            return self._tag(await backend.search(query), backend)
        except Exception:
            log.error("search_failed", source=source, query=query, exc_info=True)
            return SearchOutcome.failed(
                f"Failed to search {source} for: {query}. Please try again later."
            )

    async def auto_search(self, query: str) -> SearchOutcome:
        """Search the backend matching the query language."""
        if not isinstance(query, str) or not query.strip():
            return SearchOutcome.failed(MISSING_QUERY_ERROR)

        source = "tmdb" if is_chinese_text(query) else "imdb"
        backend = self.backends.get(source)
        if backend is None:
            return SearchOutcome.failed(INVALID_SOURCE_ERROR)

        log.info("auto_search", source=source, query=query)
        try:
            return self._tag(await backend.search(query), backend)
        except Exception:
            log.error("auto_search_failed", source=source, query=query, exc_info=True)
            return SearchOutcome.failed(AUTO_SEARCH_ERROR)

    @staticmethod
    def _tag(outcome: SearchOutcome, backend: SearchBackendPort) -> SearchOutcome:
        if outcome.success and outcome.site is None:
            return replace(outcome, site=backend.site)
        return outcome
