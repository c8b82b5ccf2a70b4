"""Media record entities.

Pure value objects, no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

NONE_EXIST_ERROR = "The corresponding resource does not exist."

# Envelope keys owned by the record itself (never part of ``fields``)
_RESERVED_KEYS = frozenset({"site", "sid", "success", "error", "format"})


@dataclass(frozen=True)
class MediaRecord:
    """Result of one generation for a single provider identifier.

    ``fields`` holds the provider-specific payload (title, year, cast, ...).
    It is opaque to the dispatch layer and flattened into the JSON payload.
    """

    site: str
    sid: str
    success: bool = False
    error: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)
    format: str | None = None

    @classmethod
    def ok(cls, site: str, sid: str, **fields: Any) -> MediaRecord:
        return cls(site=site, sid=sid, success=True, fields=fields)

    @classmethod
    def failure(cls, site: str, sid: str, error: str) -> MediaRecord:
        return cls(site=site, sid=sid, success=False, error=error)

    def get(self, key: str, default: Any = None) -> Any:
        """Read a provider field (``site``/``sid`` are readable too)."""
        if key == "site":
            return self.site
        if key == "sid":
            return self.sid
        return self.fields.get(key, default)

    def to_payload(self, *, include_format: bool = True) -> dict[str, Any]:
        """Flatten into the JSON object shape returned to clients.

        With ``include_format=False`` the rendered text is omitted, which
        is the shape persisted in the cache.
        """
        payload: dict[str, Any] = {"site": self.site, "sid": self.sid}
        payload.update(self.fields)
        payload["success"] = self.success
        if self.error is not None:
            payload["error"] = self.error
        if include_format and self.format is not None:
            payload["format"] = self.format
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> MediaRecord:
        """Rebuild a record from a cached payload.

        A stray ``format`` key is ignored; it is recomputed on every read.
        """
        fields = {k: v for k, v in payload.items() if k not in _RESERVED_KEYS}
        return cls(
            site=str(payload.get("site", "")),
            sid=str(payload.get("sid", "")),
            success=bool(payload.get("success", False)),
            error=payload.get("error"),
            fields=fields,
        )


def resource_id(provider: str, identifier: str) -> str:
    """Cache key for a (provider, canonical identifier) pair.

    >>> resource_id("tmdb", "movie/550")
    'tmdb_movie_550'
    """
    return f"{provider}_{identifier.replace('/', '_')}"


def decode_identifier(sid: str) -> str:
    """Inverse of the slash substitution used in resource ids."""
    return sid.replace("_", "/")
