"""TMDB provider: movie and TV details from the v3 JSON API."""

from __future__ import annotations

import re
from typing import Any

import httpx

from ptgen.domain.entities import NONE_EXIST_ERROR, MediaRecord

from .base import RegexProvider
from .formatting import joined

_BASE_URL = "https://api.themoviedb.org/3"
_POSTER_BASE = "https://image.tmdb.org/t/p/w500"
_PROFILE_BASE = "https://media.themoviedb.org/t/p/w300_and_h450_bestv2"
_CAST_LIMIT = 15

_TRANSLATION_REGIONS = ("CN", "HK", "TW", "US")

_JSON_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Accept": "application/json",
    "Accept-Language": "zh-CN,zh;q=0.9",
}


def parse_sid(sid: str) -> tuple[str, str] | None:
    """Split ``movie/550`` into ``("movie", "550")``; a bare id is a movie."""
    s = str(sid or "").strip()
    if not s:
        return None
    if "/" in s:
        media_type, _, media_id = (part.strip() for part in s.partition("/"))
        if not media_id:
            return None
        return media_type or "movie", media_id
    return "movie", s


def pick_translation(translations: list[dict[str, Any]]) -> str:
    """Best non-empty overview: zh by region preference, any zh, then anything."""

    def overview(t: dict[str, Any]) -> str:
        return (t.get("data") or {}).get("overview") or ""

    for region in _TRANSLATION_REGIONS:
        for t in translations:
            if t.get("iso_3166_1") == region and t.get("iso_639_1") == "zh" and overview(t):
                return overview(t)
    for t in translations:
        if t.get("iso_639_1") == "zh" and overview(t):
            return overview(t)
    for t in translations:
        if overview(t):
            return overview(t)
    return ""


def _character(actor: dict[str, Any]) -> str:
    character = actor.get("character") or ""
    roles = actor.get("roles") or []
    if not character and roles:
        character = " / ".join(r.get("character") for r in roles if r.get("character"))
    if not character:
        character = actor.get("role") or (roles[0].get("role") if roles else "") or ""
    return character


def build_fields(data: dict[str, Any], media_type: str) -> dict[str, Any]:
    """Normalize a TMDB details response into record fields."""
    is_movie = media_type == "movie"
    fields: dict[str, Any] = {
        "tmdb_id": data.get("id"),
        "title": data.get("title" if is_movie else "name") or "",
        "original_title": data.get("original_title" if is_movie else "original_name") or "",
        "overview": data.get("overview") or "",
        "poster": f"{_POSTER_BASE}{data['poster_path']}" if data.get("poster_path") else "",
        "backdrop": f"{_POSTER_BASE}{data['backdrop_path']}" if data.get("backdrop_path") else "",
    }

    if is_movie:
        release_date = data.get("release_date") or ""
        fields["release_date"] = release_date
        fields["year"] = release_date[:4]
        fields["runtime"] = f"{data['runtime']} minutes" if data.get("runtime") else ""
    else:
        first_air = data.get("first_air_date") or ""
        run_times = data.get("episode_run_time") or []
        fields["first_air_date"] = first_air
        fields["last_air_date"] = data.get("last_air_date") or ""
        fields["year"] = first_air[:4]
        fields["episode_run_time"] = f"{run_times[0]} minutes" if run_times else ""
        fields["number_of_episodes"] = data.get("number_of_episodes") or ""
        fields["number_of_seasons"] = data.get("number_of_seasons") or ""

    average = data.get("vote_average") or 0
    votes = data.get("vote_count") or 0
    fields["tmdb_rating_average"] = average
    fields["tmdb_votes"] = votes
    fields["tmdb_rating"] = f"{average} / 10 from {votes} users"
    fields["genres"] = [g.get("name") for g in data.get("genres") or []]
    fields["languages"] = [
        lang.get("english_name") or lang.get("name") for lang in data.get("spoken_languages") or []
    ]
    fields["countries"] = [c.get("name") for c in data.get("production_countries") or []]
    fields["production_companies"] = [
        c.get("name") for c in data.get("production_companies") or []
    ]

    credits = data.get("credits") or {}
    directors: list[dict[str, Any]] = []
    producers: list[dict[str, Any]] = []
    for person in credits.get("crew") or []:
        if not person:
            continue
        if person.get("job") == "Director":
            directors.append({"name": person.get("name"), "id": person.get("id")})
        elif person.get("job") == "Producer":
            producers.append({"name": person.get("name"), "id": person.get("id")})
    fields["directors"] = directors
    fields["producers"] = producers
    fields["cast"] = [
        {
            "id": actor.get("id") or "",
            "name": actor.get("name"),
            "original_name": actor.get("original_name"),
            "character": _character(actor),
            "image": f"{_PROFILE_BASE}{actor['profile_path']}" if actor.get("profile_path") else "",
        }
        for actor in (credits.get("cast") or [])[:_CAST_LIMIT]
    ]

    imdb_id = (data.get("external_ids") or {}).get("imdb_id") or ""
    fields["imdb_id"] = imdb_id
    fields["imdb_link"] = f"https://www.imdb.com/title/{imdb_id}/" if imdb_id else ""
    return fields


class TmdbProvider(RegexProvider):
    """TMDB details, credits and external ids in a single request.

    Identifiers are ``movie/<id>`` or ``tv/<id>``.
    """

    name = "tmdb"
    domains = ("api.themoviedb.org", "www.themoviedb.org")
    pattern = re.compile(r"/(movie|tv)/(\d+)")

    def __init__(self, client: httpx.AsyncClient, *, api_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(client, **kwargs)
        self._api_key = api_key

    @property
    def label(self) -> str:
        return "TMDB API"

    def format_id(self, match: re.Match[str]) -> str:
        return f"{match.group(1)}/{match.group(2)}"

    async def _generate(self, sid: str) -> MediaRecord:
        if not self._api_key:
            return self.fail(sid, "TMDB API key not configured")

        parsed = parse_sid(sid)
        if parsed is None:
            return self.fail(
                sid,
                "Invalid TMDB ID format. Expected 'movie/12345', 'tv/12345' or numeric ID",
            )
        media_type, media_id = parsed

        resp = await self._get(
            f"{_BASE_URL}/{media_type}/{media_id}",
            params={
                "api_key": self._api_key,
                "language": "zh-CN",
                "append_to_response": "credits,release_dates,external_ids",
            },
            headers=_JSON_HEADERS,
        )
        if resp.status_code != 200:
            self._log.warning("tmdb_non_ok_response", status=resp.status_code, sid=sid)
            if resp.status_code == 404:
                return self.fail(sid, NONE_EXIST_ERROR)
            if resp.status_code == 401:
                return self.fail(sid, "TMDB API key invalid")
            if resp.status_code == 429:
                return self.fail(sid, "TMDB API rate limit exceeded")
            return self.fail(sid, f"TMDB API request failed with status {resp.status_code}")

        try:
            data = resp.json()
        except ValueError:
            return self.fail(sid, "TMDB API response parsing failed")
        if not isinstance(data, dict):
            return self.fail(sid, "TMDB API response parsing failed")

        if data.get("overview") == "":
            data["overview"] = await self._translated_overview(media_type, media_id)

        fields = build_fields(data, media_type)
        self._log.info("tmdb_generated", sid=sid, title=fields["title"])
        return self.ok(sid, **fields)

    async def _translated_overview(self, media_type: str, media_id: str) -> str:
        try:
            resp = await self._get(
                f"{_BASE_URL}/{media_type}/{media_id}/translations",
                params={"api_key": self._api_key},
                headers=_JSON_HEADERS,
            )
            if resp.status_code != 200:
                return ""
            return pick_translation(resp.json().get("translations") or [])
        except (httpx.HTTPError, ValueError, AttributeError):
            self._log.warning("tmdb_translations_failed", media_id=media_id, exc_info=True)
            return ""

    def format(self, record: MediaRecord) -> str:
        parsed = parse_sid(record.sid)
        media_type = parsed[0] if parsed else "movie"
        is_movie = media_type == "movie"
        na = "N/A"

        lines: list[str] = []
        if record.get("poster"):
            lines += [f"[img]{record.get('poster')}[/img]", ""]
        lines.append(f"❁ Title:　{record.get('title') or na}")
        lines.append(f"❁ Original Title:　{record.get('original_title') or na}")
        lines.append(f"❁ Genres:　{joined(record.get('genres')) or na}")
        lines.append(f"❁ Languages:　{joined(record.get('languages')) or na}")
        if is_movie:
            lines.append(f"❁ Release Date:　{record.get('release_date') or na}")
            lines.append(f"❁ Runtime:　{record.get('runtime') or na}")
        else:
            lines.append(f"❁ First Air Date:　{record.get('first_air_date') or na}")
            lines.append(f"❁ Number of Episodes:　{record.get('number_of_episodes') or na}")
            lines.append(f"❁ Number of Seasons:　{record.get('number_of_seasons') or na}")
            lines.append(f"❁ Episode Runtime:　{record.get('episode_run_time') or na}")
        lines.append(f"❁ Production Countries:　{joined(record.get('countries')) or na}")
        lines.append(f"❁ Rating:　{record.get('tmdb_rating') or na}")
        if record.get("tmdb_id"):
            lines.append(
                f"❁ TMDB Link:　https://www.themoviedb.org/{media_type}/{record.get('tmdb_id')}/"
            )
        if record.get("imdb_link"):
            lines.append(f"❁ IMDb Link:　{record.get('imdb_link')}")

        directors = joined(d.get("name") for d in record.get("directors") or [] if d)
        if directors:
            lines.append(f"❁ Directors:　{directors}")
        producers = joined(p.get("name") for p in record.get("producers") or [] if p)
        if producers:
            lines.append(f"❁ Producers:　{producers}")

        cast = [a for a in record.get("cast") or [] if a and a.get("name")]
        if cast:
            lines += ["", "❁ Cast"]
            for actor in cast[:_CAST_LIMIT]:
                role = f" as {actor['character']}" if actor.get("character") else ""
                lines.append(f"  {actor['name']}{role}")

        if record.get("overview"):
            overview = record.get("overview").replace("\n", "\n  ")
            lines += ["", "❁ Introduction", f"　　{overview}"]

        return "\n".join(lines).strip()
