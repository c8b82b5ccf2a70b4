"""Tests for UrlDispatchUseCase."""

from __future__ import annotations

import pytest

from ptgen.application.use_cases import CacheAsideExecutor, UrlDispatchUseCase
from ptgen.domain.entities import InvalidProviderURLError, UnsupportedURLError
from ptgen.infrastructure.providers.registry import ProviderRegistry


@pytest.fixture()
def providers(provider_factory):
    douban = provider_factory(
        "douban",
        domains=("movie.douban.com",),
        pattern=r"/subject/(\d+)",
        fields={"title": "肖申克的救赎"},
    )
    tmdb = provider_factory(
        "tmdb",
        domains=("themoviedb.org",),
        pattern=r"/((?:movie|tv)/\d+)",
        fields={"title": "Fight Club"},
    )
    return douban, tmdb


@pytest.fixture()
def use_case(providers, memory_cache) -> UrlDispatchUseCase:
    return UrlDispatchUseCase(
        ProviderRegistry(providers), CacheAsideExecutor(memory_cache)
    )


class TestUrlDispatch:
    async def test_douban_url(self, use_case, providers, memory_cache) -> None:
        record = await use_case.execute("https://movie.douban.com/subject/1292052/")

        assert record.success is True
        assert record.site == "douban"
        assert record.sid == "1292052"
        assert record.format == "❁ Title:　肖申克的救赎"
        assert "douban_1292052" in memory_cache.data

    async def test_tmdb_url_uses_slash_free_key(self, use_case, memory_cache) -> None:
        record = await use_case.execute("https://www.themoviedb.org/movie/550-fight-club")

        assert record.sid == "movie/550"
        assert "tmdb_movie_550" in memory_cache.data

    async def test_unknown_domain_raises(self, use_case) -> None:
        with pytest.raises(UnsupportedURLError, match="Unsupported URL"):
            await use_case.execute("https://example.com/x")

    async def test_domain_without_identifier_raises(self, use_case) -> None:
        with pytest.raises(InvalidProviderURLError, match="Invalid douban URL"):
            await use_case.execute("https://movie.douban.com/top250")

    async def test_second_request_served_from_cache(self, use_case, providers) -> None:
        douban, _ = providers
        url = "https://movie.douban.com/subject/1292052/"

        first = await use_case.execute(url)
        second = await use_case.execute(url)

        assert douban.calls == ["1292052"]
        assert second.format == first.format

    async def test_failure_has_no_format(self, provider_factory, memory_cache) -> None:
        broken = provider_factory("douban", domains=("douban.com",), pattern=r"/subject/(\d+)", error="blocked")
        use_case = UrlDispatchUseCase(ProviderRegistry([broken]), CacheAsideExecutor(memory_cache))

        record = await use_case.execute("https://movie.douban.com/subject/1/")

        assert record.success is False
        assert record.error == "blocked"
        assert record.format is None
        assert memory_cache.data == {}

    async def test_first_registered_provider_wins(self, provider_factory) -> None:
        first = provider_factory("first", domains=("shared.example",))
        second = provider_factory("second", domains=("shared.example",))
        use_case = UrlDispatchUseCase(ProviderRegistry([first, second]), CacheAsideExecutor(None))

        record = await use_case.execute("https://shared.example/item/7")

        assert record.site == "first"
        assert first.calls == ["7"]
        assert second.calls == []
