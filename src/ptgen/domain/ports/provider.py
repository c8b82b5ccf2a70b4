"""Port for media metadata providers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ptgen.domain.entities.media import MediaRecord


@runtime_checkable
class ProviderPort(Protocol):
    """One external metadata source (douban, imdb, tmdb, ...).

    Environment dependencies (API keys, cookies, HTTP client) are bound
    at construction time, so ``generate`` only needs the identifier.
    """

    name: str
    aliases: tuple[str, ...]

    def handles(self, url: str) -> bool:
        """True if one of the provider's domains occurs in *url*."""
        ...

    def matches(self, url: str) -> str | None:
        """Canonical identifier extracted from *url*, or None."""
        ...

    async def generate(self, sid: str) -> MediaRecord:
        """Fetch and normalize one record.

        Upstream problems are returned as ``MediaRecord.failure`` and
        never raised.
        """
        ...

    def format(self, record: MediaRecord) -> str:
        """Render the bulletin-board text for a successful record."""
        ...


@runtime_checkable
class ProviderRegistryPort(Protocol):
    """Ordered provider collection shared by URL and by-id dispatch."""

    def get(self, name: str) -> ProviderPort:
        """Provider by name or alias. Raises ProviderNotFoundError."""
        ...

    def find_by_url(self, url: str) -> ProviderPort | None:
        """First provider (registration order) whose domains match *url*."""
        ...

    def list_names(self) -> list[str]: ...
