"""Tests for CacheAsideExecutor."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from ptgen.application.use_cases import CacheAsideExecutor
from ptgen.domain.entities import MediaRecord


def _generator(record: MediaRecord) -> AsyncMock:
    return AsyncMock(return_value=record)


class TestCacheAside:
    async def test_miss_generates_and_writes_without_format(self, memory_cache) -> None:
        executor = CacheAsideExecutor(memory_cache)
        record = MediaRecord(
            site="tmdb", sid="movie/550", success=True,
            fields={"title": "Fight Club"}, format="rendered",
        )
        generate = _generator(record)

        result = await executor.run("tmdb_movie_550", generate)

        assert result is record
        generate.assert_awaited_once()
        stored = json.loads(memory_cache.data["tmdb_movie_550"])
        assert stored["title"] == "Fight Club"
        assert "format" not in stored

    async def test_hit_skips_generator(self, memory_cache) -> None:
        executor = CacheAsideExecutor(memory_cache)
        generate = _generator(MediaRecord.ok("tmdb", "movie/550", title="Fight Club"))

        first = await executor.run("tmdb_movie_550", generate)
        second = await executor.run("tmdb_movie_550", generate)

        assert generate.await_count == 1
        assert first.to_payload() == second.to_payload()

    async def test_failure_is_not_cached(self, memory_cache) -> None:
        executor = CacheAsideExecutor(memory_cache)
        generate = _generator(MediaRecord.failure("douban", "1", "blocked"))

        await executor.run("douban_1", generate)
        await executor.run("douban_1", generate)

        assert generate.await_count == 2
        assert memory_cache.data == {}

    async def test_no_cache_always_generates(self) -> None:
        executor = CacheAsideExecutor(None)
        generate = _generator(MediaRecord.ok("imdb", "0137523"))

        await executor.run("imdb_tt0137523", generate)
        await executor.run("imdb_tt0137523", generate)

        assert generate.await_count == 2

    async def test_read_error_falls_back_to_generator(self, mock_cache: AsyncMock) -> None:
        mock_cache.get.side_effect = ConnectionError("redis down")
        executor = CacheAsideExecutor(mock_cache)
        generate = _generator(MediaRecord.ok("imdb", "0137523"))

        result = await executor.run("imdb_tt0137523", generate)

        assert result.success is True
        generate.assert_awaited_once()

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", '"string"'])
    async def test_malformed_payload_is_a_miss(self, mock_cache: AsyncMock, raw: str) -> None:
        mock_cache.get.return_value = raw
        executor = CacheAsideExecutor(mock_cache)
        generate = _generator(MediaRecord.ok("imdb", "1"))

        await executor.run("imdb_1", generate)

        generate.assert_awaited_once()

    async def test_write_error_is_swallowed(self, mock_cache: AsyncMock) -> None:
        mock_cache.set.side_effect = OSError("disk full")
        executor = CacheAsideExecutor(mock_cache)
        record = MediaRecord.ok("steam", "570", name="Dota 2")

        result = await executor.run("steam_570", _generator(record))

        assert result is record
        mock_cache.set.assert_awaited_once()

    async def test_cached_payload_rebuilds_record(self, mock_cache: AsyncMock) -> None:
        mock_cache.get.return_value = json.dumps(
            {"site": "bangumi", "sid": "1", "success": True, "name": "x"}
        )
        executor = CacheAsideExecutor(mock_cache)
        generate = _generator(MediaRecord.failure("bangumi", "1", "unused"))

        result = await executor.run("bangumi_1", generate)

        generate.assert_not_awaited()
        assert result.success is True
        assert result.get("name") == "x"
