from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

NO_RESULTS_ERROR = "未找到查询的结果 | No results found for the given query"


@dataclass(frozen=True)
class MediaSummary:
    """One normalized search hit."""

    year: str = ""
    subtype: str = ""
    title: str = ""
    subtitle: str = ""
    link: str = ""
    id: str = ""
    rating: str | None = None  # TMDB only

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if data["rating"] is None:
            del data["rating"]
        return data


@dataclass(frozen=True)
class SearchOutcome:
    """Result of one search dispatch (never raised, always returned)."""

    success: bool
    data: list[MediaSummary] = field(default_factory=list)
    error: str | None = None
    site: str | None = None

    @classmethod
    def failed(cls, error: str) -> SearchOutcome:
        return cls(success=False, data=[], error=error)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "data": [item.to_dict() for item in self.data],
        }
        if self.error is not None:
            payload["error"] = self.error
        if self.site is not None:
            payload["site"] = self.site
        return payload
