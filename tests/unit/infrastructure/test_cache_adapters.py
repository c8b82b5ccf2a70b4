"""Tests for the diskcache adapter and cache factory."""

from __future__ import annotations

import pytest

from ptgen.infrastructure.cache import (
    DiskcacheAdapter,
    RedisAdapter,
    create_cache,
)


@pytest.fixture()
async def disk_cache(tmp_path):
    async with DiskcacheAdapter(directory=tmp_path / "cache") as cache:
        yield cache


class TestDiskcacheAdapter:
    async def test_set_get(self, disk_cache) -> None:
        await disk_cache.set("tmdb_movie_550", '{"success": true}')
        assert await disk_cache.get("tmdb_movie_550") == '{"success": true}'

    async def test_missing_key(self, disk_cache) -> None:
        assert await disk_cache.get("nope") is None

    async def test_entries_never_evicted(self, disk_cache) -> None:
        assert disk_cache._cache.eviction_policy == "none"

    async def test_persists_across_reopen(self, tmp_path) -> None:
        directory = tmp_path / "persist"
        async with DiskcacheAdapter(directory=directory) as cache:
            await cache.set("douban_1292052", "{}")
        async with DiskcacheAdapter(directory=directory) as cache:
            assert await cache.get("douban_1292052") == "{}"

    async def test_unopened_get_raises(self, tmp_path) -> None:
        cache = DiskcacheAdapter(directory=tmp_path / "closed")
        with pytest.raises(RuntimeError, match="not initialized"):
            await cache.get("k")


class TestCacheFactory:
    def test_diskcache(self, tmp_path) -> None:
        cache = create_cache("diskcache", directory=str(tmp_path))
        assert isinstance(cache, DiskcacheAdapter)

    def test_redis(self) -> None:
        cache = create_cache("redis", redis_url="redis://cache:6379/1")
        assert isinstance(cache, RedisAdapter)
        assert cache.url == "redis://cache:6379/1"

    def test_none(self) -> None:
        assert create_cache("none") is None

    def test_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown cache backend"):
            create_cache("memcached")  # type: ignore[arg-type]
