"""Cache Port - Interface for backend-agnostic blob storage of media records."""

from __future__ import annotations

from typing import Protocol


class CachePort(Protocol):
    """Port for an async key-value store holding JSON strings.

    Keys are ASCII resource ids, values are serialized media records.
    Entries written without a TTL are permanent until purged externally.

    Implementations:
      - DiskcacheAdapter (SQLite-based, no daemon)
      - RedisAdapter (Redis async client)

    Each adapter MUST support async context-manager semantics:
        async with cache:
            await cache.set("key", value)
    """

    async def get(self, key: str) -> str | None:
        """Retrieve value. None = not found."""
        ...

    async def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        """Store value. ``ttl=None`` keeps the entry forever."""
        ...

    async def aclose(self) -> None:
        """Cleanup hook (e.g. close Redis connection)."""
        ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...
