"""Redis adapter - async Redis via redis.asyncio."""

from __future__ import annotations

import asyncio

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

log = structlog.get_logger(__name__)


class RedisAdapter:
    """Async Redis record store with a semaphore on parallel ops.

    Values are JSON strings, so the client decodes responses to ``str``.
    Read and write errors propagate to the caller, which decides whether a
    cache failure is fatal.

    Args:
        url: Redis URL (e.g. `redis://localhost:6379/0`).
        max_concurrent: Max parallel Redis ops (default: 50, tunable).
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        max_concurrent: int = 50,
    ) -> None:
        self.url = url
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

        log.info("redis_adapter_init", url=url, max_concurrent=max_concurrent)

    async def __aenter__(self) -> RedisAdapter:
        """Initialize Redis client (connection pool) and PING it."""
        if self._client is None:
            self._client = Redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True,
            )
            try:
                await self._client.ping()
                log.info("redis_connected", url=self.url)
            except RedisError as e:
                log.error("redis_connection_failed", url=self.url, error=str(e))
                raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed")

    def _require_open(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis not initialized. Use 'async with cache:'")
        return self._client

    async def get(self, key: str) -> str | None:
        client = self._require_open()
        async with self._semaphore:
            value = await client.get(key)
            log.debug("cache_get", key=key, hit=value is not None)
            return value

    async def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        """SET, with EX only when *ttl* is given."""
        client = self._require_open()
        async with self._semaphore:
            if ttl is None:
                await client.set(key, value)
            else:
                await client.set(key, value, ex=ttl)
            log.debug("cache_set", key=key, ttl=ttl, size_bytes=len(value.encode()))

