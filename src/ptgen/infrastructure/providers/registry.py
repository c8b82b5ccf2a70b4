"""Ordered provider registry shared by URL and by-id dispatch."""

from __future__ import annotations

from typing import Iterable

import structlog

from ptgen.domain.entities import DuplicateProviderError, ProviderNotFoundError
from ptgen.domain.ports import ProviderPort

log = structlog.get_logger(__name__)


class ProviderRegistry:
    """
    Registration-ordered list of providers.

    find_by_url():
      - scans in registration order; the first provider whose domain
        occurs in the URL wins (stable tie-break)

    get():
      - resolves a name or alias, case-insensitively
    """

    def __init__(self, providers: Iterable[ProviderPort] = ()) -> None:
        self._providers: list[ProviderPort] = []
        self._by_key: dict[str, ProviderPort] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: ProviderPort) -> None:
        keys = [provider.name.lower(), *(a.lower() for a in provider.aliases)]
        for key in keys:
            if key in self._by_key:
                raise DuplicateProviderError(
                    f"Duplicate provider name or alias: {key!r}"
                )
        self._providers.append(provider)
        for key in keys:
            self._by_key[key] = provider
        log.debug("provider_registered", name=provider.name, aliases=provider.aliases)

    def get(self, name: str) -> ProviderPort:
        provider = self._by_key.get(str(name).lower())
        if provider is None:
            raise ProviderNotFoundError(f"Provider '{name}' not found")
        return provider

    def find_by_url(self, url: str) -> ProviderPort | None:
        for provider in self._providers:
            if provider.handles(url):
                return provider
        return None

    def list_names(self) -> list[str]:
        return [provider.name for provider in self._providers]

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self):
        return iter(self._providers)
