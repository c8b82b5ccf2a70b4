"""Tests for ProviderRegistry."""

from __future__ import annotations

import pytest

from ptgen.domain.entities import DuplicateProviderError, ProviderNotFoundError
from ptgen.infrastructure.providers import ProviderRegistry


@pytest.fixture()
def registry(provider_factory) -> ProviderRegistry:
    return ProviderRegistry(
        [
            provider_factory("douban", domains=("movie.douban.com",)),
            provider_factory("bangumi", aliases=("bgm",), domains=("bgm.tv", "bangumi.tv")),
            provider_factory("tmdb", domains=("themoviedb.org",)),
        ]
    )


class TestProviderRegistry:
    def test_get_by_name_and_alias(self, registry) -> None:
        assert registry.get("bangumi").name == "bangumi"
        assert registry.get("bgm").name == "bangumi"
        assert registry.get("TMDB").name == "tmdb"

    def test_unknown_raises(self, registry) -> None:
        with pytest.raises(ProviderNotFoundError):
            registry.get("netflix")

    def test_find_by_url(self, registry) -> None:
        assert registry.find_by_url("https://bgm.tv/subject/1").name == "bangumi"
        assert registry.find_by_url("https://example.com/") is None

    def test_list_names_keeps_order(self, registry) -> None:
        assert registry.list_names() == ["douban", "bangumi", "tmdb"]
        assert len(registry) == 3

    def test_duplicate_alias_rejected(self, registry, provider_factory) -> None:
        with pytest.raises(DuplicateProviderError):
            registry.register(provider_factory("bgm"))

    def test_registration_order_breaks_ties(self, provider_factory) -> None:
        registry = ProviderRegistry(
            [
                provider_factory("a", domains=("shared.example",)),
                provider_factory("b", domains=("shared.example",)),
            ]
        )
        assert registry.find_by_url("https://shared.example/item/1").name == "a"
