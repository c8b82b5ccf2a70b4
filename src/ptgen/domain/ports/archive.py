"""Port for the static media archive."""

from __future__ import annotations

from typing import Any, Protocol


class ArchivePort(Protocol):
    """Read-only lookup of pre-scraped records by (site, sid)."""

    async def lookup(self, site: str, sid: str) -> dict[str, Any] | None:
        """Archived fields, or None when the archive has no entry."""
        ...
