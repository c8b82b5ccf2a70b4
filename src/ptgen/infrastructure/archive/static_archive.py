"""Read-only client for a static archive of pre-scraped records."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)


class StaticArchive:
    """Looks up ``{base_url}/{site}/{sid}.json``.

    Any miss (404, network error, non-object JSON) is reported as None.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str,
        timeout: float = 8.0,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def url_for(self, site: str, sid: str) -> str:
        return f"{self._base_url}/{site}/{sid}.json"

    async def lookup(self, site: str, sid: str) -> dict[str, Any] | None:
        url = self.url_for(site, sid)
        try:
            resp = await self._client.get(url, timeout=self._timeout)
            if not resp.is_success:
                log.debug("archive_miss", site=site, sid=sid, status=resp.status_code)
                return None
            data = resp.json()
        except (httpx.HTTPError, ValueError):
            log.warning("archive_lookup_failed", site=site, sid=sid, exc_info=True)
            return None

        if not isinstance(data, dict) or not data:
            return None
        # Some archive dumps wrap the record as {"data": {...}}
        inner = data.get("data")
        return inner if isinstance(inner, dict) and "site" not in data else data
