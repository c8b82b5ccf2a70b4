"""IMDb provider: title page, release info and parental guide.

All three pages embed their data as Next.js ``__NEXT_DATA__`` JSON.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

import httpx

from ptgen.domain.entities import NONE_EXIST_ERROR, MediaRecord
from ptgen.infrastructure.common.html_selectors import extract_json_script, parse_html

from .base import RegexProvider
from .formatting import MAX_WIDTH, joined, wrapped_line

_NEXT_DATA = "script#__NEXT_DATA__"

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/139.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

_MONTHS = {
    "January": "01",
    "February": "02",
    "March": "03",
    "April": "04",
    "May": "05",
    "June": "06",
    "July": "07",
    "August": "08",
    "September": "09",
    "October": "10",
    "November": "11",
    "December": "12",
}
_LONG_DATE_RE = re.compile(r"([A-Za-z]+)\s+(\d+),\s+(\d{4})")


def normalize_imdb_id(sid: str) -> str:
    """Digits of an IMDb id, zero-padded to at least 7 places."""
    raw = str(sid).strip()
    if raw.startswith("tt"):
        raw = raw[2:]
    return raw.zfill(7)


def _dig(data: Any, *path: str | int) -> Any:
    for key in path:
        if isinstance(data, dict):
            data = data.get(key)
        elif isinstance(data, list) and isinstance(key, int) and -len(data) <= key < len(data):
            data = data[key]
        else:
            return None
    return data


def _page_props(html: str) -> dict[str, Any]:
    return _dig(extract_json_script(parse_html(html), _NEXT_DATA), "props", "pageProps") or {}


def extract_releases_and_akas(page_props: dict[str, Any]) -> tuple[list[dict], list[dict]]:
    """Release dates and alternative titles from the release-info page."""
    releases: list[dict] = []
    akas: list[dict] = []
    for category in _dig(page_props, "contentData", "categories") or []:
        items = _dig(category, "section", "items") or []
        if category.get("id") == "releases":
            releases = [
                {
                    "country": item.get("rowTitle") or None,
                    "date": _dig(item, "listContent", 0, "text"),
                    "event": _dig(item, "listContent", 0, "subText"),
                }
                for item in items
            ]
        elif category.get("id") == "akas":
            akas = [
                {
                    "country": item.get("rowTitle") or "(original title)",
                    "title": _dig(item, "listContent", 0, "text"),
                    "note": _dig(item, "listContent", 0, "subText"),
                }
                for item in items
            ]
    return releases, akas


def extract_certificates(page_props: dict[str, Any]) -> list[dict]:
    return [
        {
            "country": cert.get("country"),
            "ratings": [
                {"rating": r.get("rating"), "extraInformation": r.get("extraInformation")}
                for r in cert.get("ratings") or []
            ],
        }
        for cert in _dig(page_props, "contentData", "certificates") or []
    ]


def extract_title_fields(page_props: dict[str, Any], link: str) -> dict[str, Any]:
    """Main title page fields."""
    fold = page_props.get("aboveTheFoldData") or {}
    main = page_props.get("mainColumnData") or {}

    fields: dict[str, Any] = {
        "image": _dig(fold, "primaryImage", "url"),
        "original_title": _dig(fold, "originalTitleText", "text") or "",
        "year": _dig(fold, "releaseYear", "year"),
        "languages": [
            lang.get("text") for lang in _dig(main, "spokenLanguages", "spokenLanguages") or []
        ],
        "runtime": _dig(fold, "runtime", "displayableProperty", "value", "plainText"),
        "rating": _dig(fold, "ratingsSummary", "aggregateRating") or 0,
        "vote_count": _dig(fold, "ratingsSummary", "voteCount") or 0,
        "type": [c.get("value") for c in _dig(fold, "titleType", "categories") or []],
        "genres": [g.get("text") for g in _dig(fold, "genres", "genres") or []],
        "plot": _dig(fold, "plot", "plotText", "plainText"),
        "link": link,
    }

    release_date = fold.get("releaseDate")
    if release_date:
        fields["release_date"] = {
            "year": release_date.get("year"),
            "month": release_date.get("month"),
            "day": release_date.get("day"),
            "country": _dig(release_date, "country", "text") or "",
        }

    countries = _dig(main, "countriesDetails", "countries") or []
    fields["origin_country"] = [c.get("text") for c in countries] or None

    if main.get("episodes"):
        fields["episodes"] = _dig(main, "episodes", "episodes", "total")
        fields["seasons"] = [s.get("number") for s in _dig(main, "episodes", "seasons") or []]

    edges = _dig(fold, "keywords", "edges")
    if edges:
        fields["keywords"] = [t for t in (_dig(e, "node", "text") for e in edges) if t]

    top_cast = _dig(main, "castV2", 0, "credits")
    if top_cast:
        cast = []
        for credit in top_cast:
            name = _dig(credit, "name", "nameText", "text") or ""
            if not name:
                continue
            cast.append(
                {
                    "name": name,
                    "image": _dig(credit, "name", "primaryImage", "url"),
                    "character": _dig(
                        credit, "creditedRoles", "edges", 0, "node",
                        "characters", "edges", 0, "node", "name",
                    ),
                }
            )
        fields["cast"] = cast

    directors: list[str] = []
    writers: list[str] = []
    for group in main.get("crewV2") or []:
        kind = (_dig(group, "grouping", "text") or "").lower()
        names = [n for n in (_dig(c, "name", "nameText", "text") for c in group.get("credits") or []) if n]
        if kind == "director":
            directors += names
        elif kind == "writers":
            writers += names
    if directors:
        fields["directors"] = directors
    if writers:
        fields["writers"] = writers

    return fields


def _format_release(item: dict[str, Any]) -> str:
    date = item.get("date") or ""
    match = _LONG_DATE_RE.search(date)
    if match:
        month, day, year = match.groups()
        date = f"{year}-{_MONTHS.get(month, '01')}-{day.zfill(2)}"
    return f"{date} ({item.get('country') or 'Unknown'})"


class ImdbProvider(RegexProvider):
    name = "imdb"
    domains = ("www.imdb.com",)
    pattern = re.compile(r"/title/(tt\d+)")

    @property
    def label(self) -> str:
        return "IMDb"

    async def _generate(self, sid: str) -> MediaRecord:
        digits = normalize_imdb_id(sid)
        link = f"https://www.imdb.com/title/tt{digits}/"

        page, release_info, parental_guide = await asyncio.gather(
            self._get(link, headers=_HEADERS),
            self._get(f"{link}releaseinfo", headers=_HEADERS),
            self._get(f"{link}parentalguide", headers=_HEADERS),
            return_exceptions=True,
        )

        if isinstance(page, BaseException):
            self._log.warning("imdb_page_fetch_failed", sid=digits, error=repr(page))
            return self.fail(
                digits,
                "Failed to fetch IMDb page. This may be due to network issues "
                "or Cloudflare protection.",
            )
        if page.status_code == 404:
            return self.fail(digits, NONE_EXIST_ERROR)
        if not page.is_success:
            return self.fail(
                digits,
                f"IMDb page request failed with status {page.status_code}. "
                "This may be due to Cloudflare protection.",
            )

        fields = extract_title_fields(_page_props(page.text), link)

        if isinstance(release_info, httpx.Response) and release_info.is_success:
            releases, akas = extract_releases_and_akas(_page_props(release_info.text))
            fields["aka"] = akas
            fields["release"] = releases
        elif isinstance(release_info, BaseException):
            self._log.info("imdb_release_info_failed", sid=digits, error=repr(release_info))

        if isinstance(parental_guide, httpx.Response) and parental_guide.is_success:
            certificates = extract_certificates(_page_props(parental_guide.text))
            if certificates:
                fields["certificates"] = certificates
        elif isinstance(parental_guide, BaseException):
            self._log.info("imdb_parental_guide_failed", sid=digits, error=repr(parental_guide))

        return self.ok(digits, **fields)

    def format(self, record: MediaRecord) -> str:
        lines: list[str] = [f"[img]{record.get('image') or record.get('poster') or ''}[/img]\n"]
        title = record.get("original_title") or record.get("name")
        if title:
            lines.append(f"❁ Original Title:　{title}")
        lines.append(f"❁ Type:　{joined(record.get('type'), ',')}")
        lines.append(f"❁ Year:　{record.get('year') or ''}")
        if record.get("origin_country"):
            lines.append(f"❁ Origin Country:　{joined(record.get('origin_country'))}")
        if record.get("languages"):
            lines.append(wrapped_line("❁ Languages:　", joined(record.get("languages")), MAX_WIDTH))
        lines.append(wrapped_line("❁ Genres:　", joined(record.get("genres")), MAX_WIDTH))

        if record.get("episodes"):
            lines.append(f"❁ Episodes:　{record.get('episodes')}")
            if record.get("seasons"):
                lines.append(f"❁ Seasons:　{joined(record.get('seasons'), ' | ')}")

        lines.append(f"❁ Runtime:　{record.get('runtime') or ''}")
        lines.append(
            f"❁ IMDb Rating:　{record.get('rating')} / 10 from {record.get('vote_count')} users"
        )
        lines.append(f"❁ IMDb Link:　{record.get('link')}")

        releases: list[str] = []
        release_date = record.get("release_date")
        if release_date:
            date = "{}-{:0>2}-{:0>2}".format(
                release_date.get("year"), release_date.get("month") or "", release_date.get("day") or ""
            )
            country = release_date.get("country")
            releases.append(f"{date} ({country})" if country else date)
        releases += [_format_release(r) for r in record.get("release") or [] if r.get("date")]
        if releases:
            lines.append(f"❁ Release Date:　{' / '.join(releases)}")

        akas = []
        for item in record.get("aka") or []:
            if isinstance(item, str):
                akas.append(item)
                continue
            title = item.get("title") or ""
            country = item.get("country") or ""
            if title:
                akas.append(f"{title} ({country})" if country else title)
        if akas:
            lines.append(wrapped_line("❁ Also Known As:　", " / ".join(akas), MAX_WIDTH))

        if record.get("keywords"):
            lines.append(
                wrapped_line("❁ Keywords:　", joined(record.get("keywords"), " | "), MAX_WIDTH)
            )
        if record.get("directors"):
            lines.append(f"❁ Directors:　{joined(record.get('directors'))}")
        if record.get("writers"):
            lines.append(f"❁ Writers:　{joined(record.get('writers'))}")
        if record.get("cast"):
            names = [
                c if isinstance(c, str) else (c.get("name") or "Unknown")
                for c in record.get("cast")
            ]
            lines.append(wrapped_line("❁ Actors:　", " / ".join(names), 145))
        if record.get("plot"):
            plot = record.get("plot").replace("\n", "\n　　")
            lines.append(f"\n❁ Plot　\n　　{plot}")

        return "\n".join(lines).strip()
