"""Bangumi provider: subjects and characters from the bgm.tv v0 API."""

from __future__ import annotations

import re
from datetime import date as _date
from typing import Any

import httpx

from ptgen.domain.entities import MediaRecord

from .base import RegexProvider
from .formatting import MAX_WIDTH, joined, wrapped_line

_API_BASE = "https://api.bgm.tv/v0"
_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9,zh-CN;q=0.8,zh;q=0.7",
    "Referer": "https://bgm.tv/",
}

TYPE_MAP: dict[str | int, str] = {
    "anime": "动画",
    "book": "书籍",
    "game": "游戏",
    "music": "音乐",
    "real": "三次元",
    "tv": "电视",
    "movie": "电影",
    1: "书籍",
    2: "动画",
    3: "音乐",
    4: "游戏",
    6: "三次元",
}

_PERSON_SPLIT_RE = re.compile(r"[、/,]")
_CHARACTER_LIMIT = 20


def _as_list(value: Any) -> list:
    if isinstance(value, list):
        return value
    return [value] if value else []


def format_characters(characters: list[dict[str, Any]]) -> list[str]:
    """``"name (name_cn): actor、actor"`` per character; no actors gives 未知."""
    out: list[str] = []
    for c in characters:
        if not c:
            continue
        name = c.get("name") or ""
        name_cn = c.get("name_cn") or ""
        actors = "、".join(
            a.get("name_cn") or a.get("name") for a in _as_list(c.get("actors"))
            if a and (a.get("name_cn") or a.get("name"))
        ) or "未知"
        title = f"{name} ({name_cn})" if name_cn else name
        if title:
            out.append(f"{title}: {actors}")
    return out


def normalize_type(subject: dict[str, Any]) -> str:
    for key in ("type_name", "type_cn"):
        value = subject.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    kind = subject.get("type")
    if isinstance(kind, str) and kind.strip():
        return TYPE_MAP.get(kind.strip().lower(), kind)
    if isinstance(kind, int) and not isinstance(kind, bool):
        return TYPE_MAP.get(kind, str(kind))
    return ""


def _infobox_value(infobox: list[dict[str, Any]], key: str) -> Any:
    for item in infobox:
        if item.get("key") == key:
            return item.get("value")
    return None


def _infobox_list(infobox: list[dict[str, Any]], key: str) -> list[str] | str:
    """List values carry ``{"v": ...}`` items; scalars are returned as-is."""
    value = _infobox_value(infobox, key)
    if isinstance(value, list):
        return [item.get("v") for item in value if item.get("v") is not None]
    return value or ""


def _year(raw: str) -> str:
    try:
        _date.fromisoformat(str(raw)[:10])
    except ValueError:
        return ""
    return str(raw)[:4]


def build_fields(subject: dict[str, Any], characters: list[dict[str, Any]], sid: str) -> dict[str, Any]:
    infobox = subject.get("infobox")
    infobox = infobox if isinstance(infobox, list) else []
    rating = subject.get("rating") or {}
    score = rating.get("score")
    total = rating.get("total") or 0
    images = subject.get("images") or {}
    date = subject.get("date") or ""

    return {
        "bgm_id": subject.get("id") or sid,
        "name": subject.get("name") or "",
        "name_cn": _infobox_value(infobox, "中文名") or subject.get("name_cn") or "",
        "link": f"https://bangumi.tv/subject/{subject.get('id')}",
        "aka": _infobox_list(infobox, "别名"),
        "director": _infobox_list(infobox, "导演"),
        "writer": _infobox_list(infobox, "脚本"),
        "summary": subject.get("summary") or "",
        "poster": images.get("medium") or images.get("common") or "",
        "bgm_rating_average": score or 0,
        "bgm_votes": total,
        "bgm_rating": f"{score} / 10 from {total} users" if score else "",
        "date": date,
        "year": _year(date) if date else "",
        "platform": subject.get("platform") or "",
        "type": normalize_type(subject),
        "eps": subject.get("eps") or subject.get("total_episodes") or "",
        "tags": subject.get("meta_tags") if isinstance(subject.get("meta_tags"), list) else [],
        "characters": format_characters(characters),
    }


def _person_line(value: Any, label: str) -> str | None:
    if isinstance(value, list):
        content = " / ".join(str(v) for v in value).strip()
    elif isinstance(value, str):
        content = " / ".join(p.strip() for p in _PERSON_SPLIT_RE.split(value) if p.strip())
    else:
        content = ""
    return wrapped_line(label, content, MAX_WIDTH) if content else None


class BangumiProvider(RegexProvider):
    name = "bangumi"
    aliases = ("bgm",)
    domains = ("bgm.tv", "bangumi.tv")
    pattern = re.compile(r"/subject/(\d+)")

    async def _generate(self, sid: str) -> MediaRecord:
        if not sid:
            return self.fail(sid, "Invalid Bangumi subject id")

        subject_url = f"{_API_BASE}/subjects/{sid}"
        resp = await self._get(subject_url, headers=_HEADERS)
        if resp.status_code == 404:
            return self.fail(sid, "Subject not found on Bangumi")
        if not resp.is_success:
            return self.fail(sid, f"Bangumi subject request failed {resp.status_code}: {resp.text}")
        try:
            subject = resp.json()
        except ValueError:
            subject = None
        if not isinstance(subject, dict):
            return self.fail(sid, "Failed to parse Bangumi subject response")

        characters: list[dict[str, Any]] = []
        try:
            char_resp = await self._get(f"{subject_url}/characters", headers=_HEADERS)
            if char_resp.is_success:
                characters = _as_list(char_resp.json())
            else:
                self._log.warning("bangumi_characters_failed", sid=sid, status=char_resp.status_code)
        except (httpx.HTTPError, ValueError):
            self._log.warning("bangumi_characters_failed", sid=sid, exc_info=True)

        return self.ok(sid, **build_fields(subject, characters, sid))

    def format(self, record: MediaRecord) -> str:
        get = record.get
        lines: list[str] = []
        if get("poster"):
            lines += [f"[img]{get('poster')}[/img]", ""]
        lines.append(f"❁ 片　　名:　{get('name')}")
        lines.append(f"❁ 中 文 名:　{get('name_cn')}")
        if isinstance(get("aka"), list) and get("aka"):
            lines.append(wrapped_line("❁ 别　　名:　", joined(get("aka")), MAX_WIDTH))
        if get("type"):
            lines.append(f"❁ 类　　型:　{get('type')}")
        if get("eps"):
            lines.append(f"❁ 话　　数:　{get('eps')}")
        if get("date"):
            lines.append(f"❁ 首　　播:　{get('date')}")
        if get("year"):
            lines.append(f"❁ 年　　份:　{get('year')}年")
        if get("bgm_rating"):
            lines.append(f"❁ 评　　分:　{get('bgm_rating')}")
        lines.append(f"❁ 链　　接:　{get('link')}")
        if get("platform"):
            lines.append(f"❁ 播放平台:　{get('platform')}")
        if get("tags"):
            lines.append(wrapped_line("❁ 标　　签:　", joined(get("tags")), MAX_WIDTH))

        for value, label in ((get("director"), "❁ 导　　演:　"), (get("writer"), "❁ 脚　　本:　")):
            line = _person_line(value, label)
            if line:
                lines.append(line)

        characters = [str(c) for c in get("characters") or []]
        if characters:
            content = " / ".join(characters[:_CHARACTER_LIMIT]).strip()
            lines.append(wrapped_line("❁ 角色信息:　", content, 125))

        if get("summary"):
            lines += ["", "❁ 简　　介", "  " + get("summary").replace("\n", "\n  ")]

        return "\n".join(lines).strip()
