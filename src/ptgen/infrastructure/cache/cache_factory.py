"""Cache factory - builds the record store selected in config."""

from __future__ import annotations

from typing import Literal

import structlog

from ptgen.domain.ports.cache import CachePort
from ptgen.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from ptgen.infrastructure.cache.redis_adapter import RedisAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["diskcache", "redis", "none"]


def create_cache(
    backend: CacheBackend = "diskcache",
    *,
    directory: str = "./.cache/ptgen",
    redis_url: str = "redis://localhost:6379/0",
    max_concurrent: int = 10,
) -> CachePort | None:
    """Create the cache adapter for *backend*.

    Returns None for ``"none"``: the service then runs uncached.

    Raises:
        ValueError: If `backend` is unknown.
    """
    if backend == "none":
        log.info("cache_factory_create", backend=backend)
        return None
    if backend == "diskcache":
        log.info(
            "cache_factory_create",
            backend=backend,
            directory=directory,
            max_concurrent=max_concurrent,
        )
        return DiskcacheAdapter(directory=directory, max_concurrent=max_concurrent)
    if backend == "redis":
        log.info("cache_factory_create", backend=backend, url=redis_url)
        return RedisAdapter(url=redis_url, max_concurrent=50)
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'diskcache', 'redis' or 'none'."
    )
