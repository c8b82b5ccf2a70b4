"""Cache-aside execution around provider generators."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable

import structlog

from ptgen.domain.entities.media import MediaRecord
from ptgen.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

Generate = Callable[[], Awaitable[MediaRecord]]


class CacheAsideExecutor:
    """Read-through / write-through caching for media records.

    - Hit: the cached payload is returned, the generator is not called.
    - Miss, read error, or no cache configured: the generator runs.
    - Only successful records are written, without the ``format`` field.
      Failures are never cached.
    - Cache errors are logged and swallowed, caching is best-effort.

    Concurrent misses for the same key are not de-duplicated: each
    request generates and writes independently, last write wins.
    """

    def __init__(self, cache: CachePort | None = None) -> None:
        self._cache = cache

    async def run(self, resource_id: str, generate: Generate) -> MediaRecord:
        cached = await self._cache_read(resource_id)
        if cached is not None:
            return cached

        log.info("cache_miss", resource_id=resource_id)
        record = await generate()

        if record.success:
            await self._cache_write(resource_id, record)
        return record

    async def _cache_read(self, resource_id: str) -> MediaRecord | None:
        """Try to read a cached record. Returns None on miss or error."""
        if self._cache is None:
            return None
        try:
            raw = await self._cache.get(resource_id)
            if raw is None:
                return None
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise ValueError(f"cached payload is {type(payload).__name__}")
            log.info("cache_hit", resource_id=resource_id)
            return MediaRecord.from_payload(payload)
        except Exception:
            log.warning("cache_read_failed", resource_id=resource_id, exc_info=True)
            return None

    async def _cache_write(self, resource_id: str, record: MediaRecord) -> None:
        """Store a successful record without its rendered text."""
        if self._cache is None:
            return
        try:
            raw = json.dumps(
                record.to_payload(include_format=False), ensure_ascii=False
            )
            await self._cache.set(resource_id, raw)
            log.info("cache_write", resource_id=resource_id, size_bytes=len(raw))
        except Exception:
            log.warning("cache_write_failed", resource_id=resource_id, exc_info=True)
