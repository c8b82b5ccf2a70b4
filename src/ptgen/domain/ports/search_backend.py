"""Port for free-text search backends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ptgen.domain.entities.search import SearchOutcome


@runtime_checkable
class SearchBackendPort(Protocol):
    """Search one upstream catalogue by title.

    Every failure (timeout, network error, non-2xx, zero results) is
    returned as ``SearchOutcome(success=False, ...)``.
    """

    site: str

    async def search(self, query: str) -> SearchOutcome: ...
