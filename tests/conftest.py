"""Shared test fixtures for the ptgen test suite."""

from __future__ import annotations

import re
from typing import Any
from unittest.mock import AsyncMock

import pytest

from ptgen.domain.entities import MediaRecord

# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------


class FakeProvider:
    """Minimal ProviderPort: counts generations, returns a canned record."""

    def __init__(
        self,
        name: str = "fake",
        *,
        domains: tuple[str, ...] = ("fake.example",),
        pattern: str = r"/item/(\d+)",
        aliases: tuple[str, ...] = (),
        fields: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> None:
        self.name = name
        self.aliases = aliases
        self.domains = domains
        self._pattern = re.compile(pattern)
        self._fields = fields if fields is not None else {"title": "Fake Title"}
        self._error = error
        self.calls: list[str] = []

    def handles(self, url: str) -> bool:
        return any(domain in url for domain in self.domains)

    def matches(self, url: str) -> str | None:
        match = self._pattern.search(url)
        return match.group(1) if match else None

    async def generate(self, sid: str) -> MediaRecord:
        self.calls.append(sid)
        if self._error:
            return MediaRecord.failure(self.name, sid, self._error)
        return MediaRecord.ok(self.name, sid, **self._fields)

    def format(self, record: MediaRecord) -> str:
        return f"❁ Title:　{record.get('title')}"


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider()


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


class MemoryCache:
    """In-memory CachePort with call recording."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.get_calls = 0
        self.set_calls = 0

    async def get(self, key: str) -> str | None:
        self.get_calls += 1
        return self.data.get(key)

    async def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        self.set_calls += 1
        self.data[key] = value

    async def aclose(self) -> None:
        pass

    async def __aenter__(self) -> MemoryCache:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        pass


@pytest.fixture()
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.aclose = AsyncMock()
    return cache


@pytest.fixture()
def provider_factory() -> type[FakeProvider]:
    """The FakeProvider class, for tests needing several providers."""
    return FakeProvider
