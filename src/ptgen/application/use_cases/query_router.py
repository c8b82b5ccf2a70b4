"""Top-level query routing: request parameters -> response payload."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from ptgen.application.use_cases.direct_lookup import DirectLookupUseCase
from ptgen.application.use_cases.search_dispatch import SearchDispatchUseCase
from ptgen.application.use_cases.url_dispatch import UrlDispatchUseCase
from ptgen.domain.entities import InvalidParametersError, MediaRequestError

log = structlog.get_logger(__name__)

INTERNAL_ERROR = "Internal Server Error. Please contact the administrator."

_PARAM_NAMES = ("source", "query", "url", "tmdb_id", "sid")


@dataclass(frozen=True)
class QueryParams:
    source: str | None = None
    query: str | None = None
    url: str | None = None
    tmdb_id: str | None = None
    sid: str | None = None

    @classmethod
    def merge(
        cls,
        query_params: dict[str, Any],
        body: dict[str, Any] | None = None,
    ) -> QueryParams:
        """Body fields override query parameters field by field.

        Falsy body values fall back to the query parameter.
        """
        body = body or {}
        values: dict[str, str | None] = {}
        for name in _PARAM_NAMES:
            value = body.get(name) or query_params.get(name)
            values[name] = str(value) if value not in (None, "") else None
        return cls(**values)


@dataclass(frozen=True)
class QueryResult:
    payload: dict[str, Any]
    status: int = 200


class QueryRouter:
    """Routes one query to URL dispatch, search, or direct lookup.

    Precedence (first match wins):
        1. ``url``                         -> URL dispatch
        2. ``source`` + ``query``          -> explicit search
        3. ``query``                       -> auto search
        4. ``tmdb_id`` or ``source``+``sid`` -> direct lookup
        5. otherwise                       -> 400

    Client errors become ``success: false`` payloads with status 200.
    Anything unexpected becomes a 500 with a generic message.
    """

    def __init__(
        self,
        url_dispatch: UrlDispatchUseCase,
        direct_lookup: DirectLookupUseCase,
        search: SearchDispatchUseCase,
    ) -> None:
        self.url_dispatch = url_dispatch
        self.direct_lookup = direct_lookup
        self.search = search

    async def handle(self, params: QueryParams) -> QueryResult:
        try:
            return await self._route(params)
        except InvalidParametersError as e:
            return QueryResult({"success": False, "error": str(e)}, status=400)
        except MediaRequestError as e:
            log.info("query_rejected", error=str(e))
            return QueryResult({"success": False, "error": str(e)})
        except Exception:
            log.exception("query_failed", params=params)
            return QueryResult({"success": False, "error": INTERNAL_ERROR}, status=500)

    async def _route(self, params: QueryParams) -> QueryResult:
        if params.url:
            record = await self.url_dispatch.execute(params.url)
            return QueryResult(record.to_payload())

        if params.source and params.query:
            outcome = await self.search.search(params.source, params.query)
            return QueryResult(outcome.to_payload())

        if params.query:
            outcome = await self.search.auto_search(params.query)
            return QueryResult(outcome.to_payload())

        source = "tmdb" if params.tmdb_id else params.source
        sid = params.tmdb_id or params.sid
        if source and sid:
            record = await self.direct_lookup.execute(source, sid)
            return QueryResult(record.to_payload())

        raise InvalidParametersError()
