"""Diskcache adapter - SQLite-based record store without daemon process."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)


class DiskcacheAdapter:
    """Async wrapper for diskcache.Cache (sync-only library).

    - Uses `asyncio.to_thread` for I/O (no blocking of the event loop).
    - Semaphore prevents too many parallel disk writes (SQLite lock contention).
    - Implements context manager (`async with`).
    - Entries written without TTL never expire, and nothing is evicted
      (eviction_policy "none" ignores the size limit).

    Args:
        directory: SQLite DB path.
        max_concurrent: Max parallel disk ops (default: 10, tunable).
    """

    def __init__(
        self,
        directory: str | Path = "./.cache/ptgen",
        max_concurrent: int = 10,
    ) -> None:
        self.directory = Path(directory)
        self._cache: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

        log.info(
            "diskcache_adapter_init",
            directory=str(self.directory),
            max_concurrent=max_concurrent,
        )

    async def __aenter__(self) -> DiskcacheAdapter:
        """Open SQLite cache (lazy, on first access)."""
        if self._cache is None:
            self._cache = await asyncio.to_thread(
                DiskCache, str(self.directory), eviction_policy="none"
            )
            log.info("diskcache_opened", path=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("diskcache_closed", directory=str(self.directory))

    def _require_open(self) -> DiskCache:
        if self._cache is None:
            raise RuntimeError(
                "Cache not initialized. Use 'async with cache:' or await cache.__aenter__()"
            )
        return self._cache

    async def get(self, key: str) -> str | None:
        cache = self._require_open()
        async with self._semaphore:
            value = await asyncio.to_thread(cache.get, key, default=None)
            log.debug("cache_get", key=key, hit=value is not None)
            return value

    async def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        """Write *value*; ``ttl=None`` stores it permanently."""
        cache = self._require_open()
        async with self._semaphore:
            await asyncio.to_thread(cache.set, key, value, expire=ttl)
            log.debug("cache_set", key=key, ttl=ttl, size_bytes=len(value.encode()))

