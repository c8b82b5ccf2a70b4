"""Raw search hits -> MediaSummary."""

from __future__ import annotations

from typing import Any

from ptgen.domain.entities import MediaSummary

MAX_RESULTS = 10


def pick(item: Any, *keys: str) -> Any:
    """First value under *keys* that is not None and not blank."""
    if not isinstance(item, dict):
        return ""
    for key in keys:
        value = item.get(key)
        if value is not None and str(value).strip():
            return value
    return ""


def truncate(text: Any, limit: int = 100) -> str:
    if not text or limit <= 0:
        return ""
    value = str(text).strip()
    return value[:limit].strip() + "..." if len(value) > limit else value


def year_of(date: Any) -> str:
    if not date or not isinstance(date, str):
        return ""
    return date.split("-")[0]


def normalize_imdb(item: dict[str, Any]) -> MediaSummary:
    """Suggestion-shaped item (``id``, ``l``, ``y``, ``qid``, ``s``)."""
    imdb_id = str(pick(item, "id"))
    link = f"https://www.imdb.com/title/{imdb_id}/" if imdb_id else str(pick(item, "link"))
    return MediaSummary(
        year=str(pick(item, "y")),
        subtype=str(pick(item, "qid")),
        title=str(pick(item, "l")),
        subtitle=str(pick(item, "s")),
        link=link,
        id=imdb_id,
    )


def normalize_tmdb(item: dict[str, Any]) -> MediaSummary:
    """TMDB search result tagged with ``media_type``."""
    media_type = "tv" if item.get("media_type") == "tv" else "movie"
    if item.get("original_name"):
        title = f"{pick(item, 'name')} / {pick(item, 'original_name')}"
    elif item.get("original_title"):
        title = str(pick(item, "original_title"))
    else:
        title = str(pick(item, "name"))

    tmdb_id = str(pick(item, "id"))
    vote = item.get("vote_average")
    return MediaSummary(
        year=year_of(item.get("release_date")) or year_of(item.get("first_air_date")),
        subtype=media_type,
        title=title,
        subtitle=truncate(pick(item, "overview"), 100),
        link=f"https://www.themoviedb.org/{media_type}/{tmdb_id}" if tmdb_id else "",
        id=tmdb_id,
        rating=str(vote) if vote is not None else "",
    )
