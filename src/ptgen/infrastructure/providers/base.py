"""Shared base class for media metadata providers.

Lives in the *infrastructure* layer because it depends on ``httpx`` and
``structlog``. The application layer only knows ``ProviderPort``;
subclasses satisfy that Protocol structurally.
"""

from __future__ import annotations

import re
from typing import Any

import httpx
import structlog

from ptgen.domain.entities import MediaRecord


class RegexProvider:
    """URL matching plus safe generation for one upstream site.

    Subclasses **must** set:
    - ``name``
    - ``domains`` (substrings tested against the input URL)
    - ``pattern`` (compiled regex with the identifier in group 1)

    Subclasses **must** override:
    - ``_generate()`` (fetch + normalize, may raise)
    - ``format()``

    Subclasses **may** override:
    - ``aliases``
    - ``format_id()`` when the canonical id spans several groups
    """

    name: str = ""
    aliases: tuple[str, ...] = ()
    domains: tuple[str, ...] = ()
    pattern: re.Pattern[str] = re.compile(r"(?!)")

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout: float = 15.0,
        secondary_timeout: float = 8.0,
        retry_attempts: int = 3,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._secondary_timeout = secondary_timeout
        self._retry_attempts = retry_attempts
        self._log = structlog.get_logger(f"ptgen.providers.{self.name}")

    # ------------------------------------------------------------------
    # URL matching
    # ------------------------------------------------------------------

    def handles(self, url: str) -> bool:
        return any(domain in url for domain in self.domains)

    def matches(self, url: str) -> str | None:
        match = self.pattern.search(url)
        if match is None:
            return None
        return self.format_id(match)

    def format_id(self, match: re.Match[str]) -> str:
        return match.group(1)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate(self, sid: str) -> MediaRecord:
        """Run ``_generate`` and turn any escaping error into a failure record."""
        try:
            return await self._generate(sid)
        except httpx.TimeoutException:
            self._log.warning(f"{self.name}_timeout", sid=sid)
            return self.fail(sid, f"{self.label} fetch error: Request timeout")
        except httpx.HTTPError as e:
            self._log.warning(f"{self.name}_http_error", sid=sid, error=str(e))
            return self.fail(sid, f"{self.label} fetch error: {e}")
        except Exception as e:
            self._log.warning(f"{self.name}_generate_failed", sid=sid, exc_info=True)
            return self.fail(sid, str(e) or type(e).__name__)

    async def _generate(self, sid: str) -> MediaRecord:
        raise NotImplementedError(f"{type(self).__name__}._generate() not implemented")

    def format(self, record: MediaRecord) -> str:
        raise NotImplementedError(f"{type(self).__name__}.format() not implemented")

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    @property
    def label(self) -> str:
        """Display name used in error messages."""
        return self.name.capitalize()

    def ok(self, sid: str, **fields: Any) -> MediaRecord:
        return MediaRecord.ok(self.name, sid, **fields)

    def fail(self, sid: str, error: str) -> MediaRecord:
        return MediaRecord.failure(self.name, sid, error)

    async def _get(self, url: str, **kwargs: Any) -> httpx.Response:
        kwargs.setdefault("timeout", self._timeout)
        return await self._client.get(url, **kwargs)
