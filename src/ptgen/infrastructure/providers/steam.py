"""Steam provider: store app details API (Chinese locale)."""

from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from ptgen.domain.entities import MediaRecord
from ptgen.infrastructure.common.html_selectors import html_to_text, parse_html

from .base import RegexProvider
from .formatting import MAX_WIDTH, wrap_chars, wrap_words, wrapped_line

_APP_DETAILS_URL = "https://store.steampowered.com/api/appdetails"
_MAX_SCREENSHOTS = 3
_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Accept": "application/json",
    "Accept-Language": "zh-CN,zh;q=0.9",
}

_REQUIREMENT_LABELS = frozenset(
    {
        "minimum:",
        "recommended:",
        "minimum",
        "recommended",
        "最低配置:",
        "推荐配置:",
        "最低配置",
        "推荐配置",
    }
)
_NOTES_RE = re.compile(r"^(additional notes|附注事项|备注)[:：]?\s*", re.IGNORECASE)
_FULL_AUDIO_RE = re.compile(r"\*具有完全音频支持的语言.*", re.DOTALL)
_INDENT = "　　"
_BULLET = "· "


def format_price(price: dict[str, Any] | None) -> dict[str, Any] | None:
    """Cents to two-decimal strings."""
    if not isinstance(price, dict):
        return None

    def amount(key: str) -> str | None:
        value = price.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{value / 100:.2f}"
        return None

    return {
        "currency": price.get("currency") or "",
        "initial": amount("initial"),
        "final": amount("final"),
        "discount": price.get("discount_percent") or 0,
    }


def build_fields(app: dict[str, Any]) -> dict[str, Any]:
    release = app.get("release_date") or {}
    platforms = app.get("platforms") or {}
    requirements = app.get("pc_requirements")
    requirements = requirements if isinstance(requirements, dict) else {}
    fields: dict[str, Any] = {
        "name": app.get("name") or "N/A",
        "type": app.get("type") or "N/A",
        "about_the_game": app.get("about_the_game") or "",
        "header_image": app.get("header_image") or "",
        "website": app.get("website") or "",
        "developers": app.get("developers") if isinstance(app.get("developers"), list) else [],
        "publishers": app.get("publishers") if isinstance(app.get("publishers"), list) else [],
        "release_date": release.get("date") or "N/A" if release else "N/A",
        "coming_soon": bool(release.get("coming_soon")),
        "supported_languages": app.get("supported_languages") or "",
        "platforms": {
            "windows": bool(platforms.get("windows")),
            "mac": bool(platforms.get("mac")),
            "linux": bool(platforms.get("linux")),
        },
        "categories": [c.get("description") for c in app.get("categories") or []],
        "genres": [g.get("description") for g in app.get("genres") or []],
        "pc_requirements": {
            "minimum": requirements.get("minimum") or "",
            "recommended": requirements.get("recommended") or "",
        },
        "screenshots": [
            {
                "id": s.get("id"),
                "path_thumbnail": s.get("path_thumbnail"),
                "path_full": s.get("path_full"),
            }
            for s in (app.get("screenshots") or [])[:_MAX_SCREENSHOTS]
        ],
    }
    price = format_price(app.get("price_overview"))
    if price:
        fields["price"] = price
    return fields


def requirements_block(html: str, title: str) -> str:
    """Hardware requirement list as wrapped ``❁ title`` lines."""
    if not isinstance(html, str) or not html:
        return ""
    lines = [line.strip() for line in html_to_text(html).split("\n") if line.strip()]
    if not lines:
        return ""

    out = [f"❁ {title}"]
    buffer: list[str] = []

    def flush() -> None:
        out.extend(wrap_words(line, "    ", 80) for line in buffer)
        buffer.clear()

    for line in lines:
        if line.lower() in _REQUIREMENT_LABELS or line in _REQUIREMENT_LABELS or _NOTES_RE.match(line):
            flush()
            continue
        buffer.append(line)
    flush()
    out.append("")
    return "\n".join(out)


def _description_blocks(soup: BeautifulSoup) -> list[Tag | str]:
    """Top-level description chunks: headings, lists, paragraphs, loose text."""
    body = soup.body or soup
    blocks: list[Tag | str] = []
    loose: list[str] = []

    def flush() -> None:
        text = "".join(loose).strip()
        if text:
            blocks.append(text)
        loose.clear()

    previous_br = False
    for node in body.children:
        if isinstance(node, Tag) and node.name in ("h1", "h2", "h3", "ul", "ol", "p"):
            flush()
            blocks.append(node)
            previous_br = False
        elif isinstance(node, Tag) and node.name == "br":
            if previous_br:
                flush()
            else:
                loose.append("\n")
            previous_br = True
        else:
            text = node.get_text() if isinstance(node, Tag) else str(node)
            if text.strip():
                previous_br = False
            loose.append(text)
    flush()
    return blocks


def description_lines(html: str) -> list[str]:
    """Game description as indented, width-wrapped lines."""
    out: list[str] = []
    for block in _description_blocks(parse_html(html)):
        if isinstance(block, str):
            out.append(wrap_chars(block, MAX_WIDTH, _INDENT))
        elif block.name in ("h1", "h2", "h3"):
            text = block.get_text(strip=True)
            if text:
                out += ["", _INDENT + text]
        elif block.name in ("ul", "ol"):
            for li in block.select("li"):
                text = li.get_text(strip=True)
                if text:
                    out.append(wrap_chars(text, MAX_WIDTH, _INDENT + _BULLET))
        else:
            text = block.get_text().strip()
            if text:
                out.append(wrap_chars(text, MAX_WIDTH, _INDENT))
    return out


class SteamProvider(RegexProvider):
    name = "steam"
    domains = ("store.steampowered.com",)
    pattern = re.compile(r"/app/(\d+)")

    @property
    def label(self) -> str:
        return "Steam API"

    async def _generate(self, sid: str) -> MediaRecord:
        appid = str(sid or "")
        if not appid.isdigit() or not appid.isascii():
            return self.fail(sid, "Invalid Steam ID format. Expected numeric appid")

        resp = await self._get(
            _APP_DETAILS_URL, params={"appids": appid, "l": "cn"}, headers=_HEADERS
        )
        if not resp.is_success:
            return self.fail(sid, f"Steam API request failed with status {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError:
            return self.fail(sid, "Failed to parse Steam API response")

        entry = payload.get(appid) if isinstance(payload, dict) else None
        if not isinstance(entry, dict) or not entry.get("success"):
            return self.fail(sid, "Failed to retrieve Steam app details")

        return self.ok(appid, **build_fields(entry.get("data") or {}))

    def format(self, record: MediaRecord) -> str:
        get = record.get
        lines: list[str] = []
        if get("header_image"):
            lines.append(f"[img]{get('header_image')}[/img]\n")
        lines.append(f"❁ 游戏名称:　{get('name')}")
        lines.append(f"❁ 游戏类型:　{get('type')}")
        lines.append(f"❁ 发行日期:　{get('release_date')}")
        if get("developers"):
            lines.append(f"❁ 开 发 商:　{', '.join(get('developers'))}")
        if get("publishers"):
            lines.append(f"❁ 发 行 商:　{', '.join(get('publishers'))}")
        if get("genres"):
            lines.append(f"❁ 游戏类型:　{', '.join(g for g in get('genres') if g)}")
        if get("supported_languages"):
            languages = _FULL_AUDIO_RE.sub("", html_to_text(get("supported_languages"))).strip()
            lines.append(f"❁ 支持语言:　{languages}")

        price = get("price")
        if price:
            if price.get("discount", 0) > 0 and price.get("initial"):
                lines.append(f"❁ 原　　价:　{price['initial']} {price['currency']}")
                lines.append(
                    f"❁ 现　　价:　{price['final']} {price['currency']} (折扣{price['discount']}%)"
                )
            elif price.get("final"):
                lines.append(f"❁ 价　　格:　{price['final']} {price['currency']}")

        platforms = get("platforms") or {}
        names = [label for key, label in (("windows", "Windows"), ("mac", "Mac"), ("linux", "Linux")) if platforms.get(key)]
        if names:
            lines.append(f"❁ 支持平台:　{', '.join(names)}")
        if get("categories"):
            lines.append(wrapped_line("❁ 分类标签:　", " / ".join(c for c in get("categories") if c), MAX_WIDTH))

        lines.append(f"❁ 链　　接:　https://store.steampowered.com/app/{record.sid}/")

        if get("about_the_game"):
            lines += ["", "❁ 简　　介"]
            lines += description_lines(get("about_the_game"))
            if lines[-1].strip() != "❁ 简　　介":
                lines.append("")

        requirements = get("pc_requirements") or {}
        for key, title in (("minimum", "最低配置"), ("recommended", "推荐配置")):
            block = requirements_block(requirements.get(key) or "", title)
            if block:
                lines.append(block)

        screenshots = [s for s in get("screenshots") or [] if s.get("path_full")]
        if screenshots:
            lines.append("❁ 游戏截图")
            lines += [f"[img]{s['path_full']}[/img]" for s in screenshots]
            lines.append("")

        return "\n".join(lines).strip()
