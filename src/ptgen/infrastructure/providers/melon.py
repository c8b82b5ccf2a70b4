"""Melon provider: album detail page scrape."""

from __future__ import annotations

import re
from typing import Any

from bs4 import Tag

from ptgen.domain.entities import NONE_EXIST_ERROR, MediaRecord
from ptgen.infrastructure.common.html_selectors import (
    element_text,
    extract_attr,
    extract_text,
    parse_html,
    select_items,
)

from .base import RegexProvider
from .formatting import joined

_ALBUM_URL = "https://www.melon.com/album/detail.htm"
_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html",
    "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8",
}

GENRE_TRANSLATIONS = {
    "발라드": "Ballad",
    "댄스": "Dance",
    "랩/힙합": "Rap / Hip-Hop",
    "R&B/Soul": "R&B / Soul",
    "인디음악": "Indie",
    "록/메탈": "Rock / Metal",
    "트로트": "Trot",
    "포크/블루스": "Folk / Blues",
    "재즈": "Jazz",
    "애시드/퓨전/팝": "Acid / Fusion / Pop",
}
ALBUM_TYPE_TRANSLATIONS = {
    "정규": "正规专辑",
    "싱글": "单曲",
    "EP": "迷你专辑",
    "OST": "原声带",
}
_SID_RE = re.compile(r"^album/(\d+)$")
_BRACKETED_RE = re.compile(r"\[(.*?)\]")
_PLAY_TITLE_RE = re.compile(r"^(.*?)\s+(재생|곡정보)")


def translate_genres(raw: str) -> list[str]:
    genres = [g.strip() for g in raw.split(",") if g.strip()]
    return [GENRE_TRANSLATIONS.get(g, g) for g in genres]


def normalize_poster(src: str) -> str | None:
    """Strip the query, upscale ``500.jpg`` to ``1000.jpg`` and absolutize."""
    if not src:
        return None
    url = src.split("?", 1)[0]
    jpg = url.find(".jpg")
    if jpg != -1:
        url = url[: jpg + 4]
    url = re.sub(r"500\.jpg$", "1000.jpg", url)
    if not re.match(r"^https?://", url, re.IGNORECASE):
        url = "https://www.melon.com" + ("" if url.startswith("/") else "/") + url
    return url


def _unique_texts(tags: list[Tag]) -> list[str]:
    out: list[str] = []
    for tag in tags:
        text = tag.get_text(strip=True)
        if text and text not in out:
            out.append(text)
    return out


def _track_title(row: Tag) -> str:
    title = extract_text(row, 'a[title*="재생"]')
    if title:
        return title
    info = row.select_one('a[title*="곡정보"]')
    if info is not None:
        match = _PLAY_TITLE_RE.match(str(info.get("title") or ""))
        if match and match.group(1):
            return match.group(1).strip()
    return extract_text(row, ".ellipsis a", ".song_name")


def parse_album_page(html: str) -> dict[str, Any] | None:
    """Album fields, or None when the page has no ``.wrap_info`` container."""
    soup = parse_html(html)
    info = soup.select_one(".wrap_info")
    if info is None:
        return None

    fields: dict[str, Any] = {}

    raw_type = extract_text(info, ".gubun")
    bracketed = _BRACKETED_RE.search(raw_type)
    if bracketed:
        fields["album_type"] = ALBUM_TYPE_TRANSLATIONS.get(bracketed.group(1), bracketed.group(1))
    elif raw_type.strip("[] "):
        fields["album_type"] = raw_type.replace("[", "").replace("]", "").strip()

    title = re.sub(r"^앨범명\s*", "", extract_text(info, ".song_name"), flags=re.IGNORECASE).strip()
    if title:
        fields["title"] = title

    artists = _unique_texts(info.select('.artist a[href*="goArtistDetail"]'))
    if artists:
        fields["artists"] = artists

    for dt in select_items(info, ".meta dl.list dt", ".meta dl dt"):
        dd = dt.find_next_sibling("dd")
        value = dd.get_text(strip=True) if dd else ""
        if not value:
            continue
        label = dt.get_text(strip=True)
        if label == "발매일":
            fields["release_date"] = value
        elif label == "장르":
            fields["genres"] = translate_genres(value)
        elif label == "발매사":
            fields["publisher"] = value
        elif label == "기획사":
            fields["planning"] = value
        elif label == "유형":
            fields["album_type"] = value

    poster = normalize_poster(
        extract_attr(info, ".thumb img", "src") or extract_attr(info, ".thumb img", "data-src")
    )
    if poster:
        fields["poster"] = poster

    description = soup.select_one(".dtl_albuminfo")
    if description is not None:
        fields["description"] = element_text(description)

    tracks = []
    for row in select_items(soup, "#frm .tbl_song_list tbody tr", ".tbl_song_list tbody tr"):
        track_title = _track_title(row)
        if not track_title:
            continue
        number = re.sub(r"\D+", "", extract_text(row, ".rank")) or extract_text(row, ".no")
        tracks.append(
            {
                "number": number,
                "title": track_title,
                "artists": _unique_texts(row.select('a[href*="goArtistDetail"]')),
            }
        )
    if tracks:
        fields["tracks"] = tracks

    return fields


class MelonProvider(RegexProvider):
    """Melon albums, identified as ``album/<digits>``."""

    name = "melon"
    domains = ("www.melon.com",)
    pattern = re.compile(r"/album/detail\.htm\?albumId=(\d+)")

    def format_id(self, match: re.Match[str]) -> str:
        return f"album/{match.group(1)}"

    async def _generate(self, sid: str) -> MediaRecord:
        match = _SID_RE.match(str(sid or ""))
        if match is None:
            return self.fail(sid, "Invalid Melon ID format. Expected 'album/<digits>'")
        album_id = match.group(1)

        resp = await self._get(_ALBUM_URL, params={"albumId": album_id}, headers=_HEADERS)
        if resp.status_code == 404:
            return self.fail(sid, NONE_EXIST_ERROR)
        if not resp.is_success:
            return self.fail(sid, f"Melon 专辑处理错误: 请求失败，状态码 {resp.status_code}")

        fields = parse_album_page(resp.text)
        if fields is None:
            return self.fail(sid, "未找到专辑信息容器")

        return self.ok(
            sid,
            melon_id=album_id,
            melon_link=f"{_ALBUM_URL}?albumId={album_id}",
            **fields,
        )

    def format(self, record: MediaRecord) -> str:
        get = record.get
        na = "N/A"
        lines: list[str] = []
        if get("poster"):
            lines.append(f"[img]{get('poster')}[/img]\n")
        lines.append(f"❁ 专辑名称:　{get('title') or na}")
        lines.append(f"❁ 歌　　手:　{joined(get('artists')) or na}")
        lines.append(f"❁ 发行日期:　{get('release_date') or na}")
        lines.append(f"❁ 专辑类型:　{get('album_type') or na}")
        lines.append(f"❁ 流　　派:　{joined(get('genres')).strip() or na}")
        lines.append(f"❁ 发 行 商:　{get('publisher') or na}")
        lines.append(f"❁ 制作公司:　{get('planning') or na}")
        lines.append(f"❁ 专辑链接:　{get('melon_link')}")

        if get("description"):
            lines += ["", "❁ 专辑介绍\n", "　　" + get("description").replace("\n", "\n　　")]
        if get("tracks"):
            lines += ["", "❁ 歌曲列表\n"]
            for track in get("tracks"):
                artists = f" ({', '.join(track['artists'])})" if track.get("artists") else ""
                lines.append(f"　　{track.get('number') or '-'}. {track.get('title')}{artists}")

        return "\n".join(lines).strip()
