"""Douban movie provider: subject page scrape plus sub-page lookups.

Flow:
    archive (optional) -> movie.douban.com -> m.douban.com fallback
    -> IMDb rating (JSONP) -> celebrities + awards (concurrently)

Sub-lookups are best-effort: their failure never fails the record.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

import httpx
from bs4 import BeautifulSoup

from ptgen.domain.entities import NONE_EXIST_ERROR, MediaRecord
from ptgen.domain.ports import ArchivePort
from ptgen.infrastructure.common.html_selectors import (
    extract_json_script,
    find_label,
    parse_html,
    select_texts,
    text_after_label,
)
from ptgen.infrastructure.common.retry import fetch_with_retry
from ptgen.infrastructure.common.upstream import (
    browser_headers,
    is_anti_bot,
    parse_jsonp,
    split_list,
)

from .base import RegexProvider
from .formatting import joined, wrapped_line

ANTI_BOT_ERROR = (
    "Douban blocked request (captcha/anti-bot). Provide valid cookie or try later."
)
NOT_FOUND_RE = re.compile(r"你想访问的页面不存在")

_MOBILE_FALLBACK_STATUSES = frozenset({204, 403, 521})
_IMDB_RATING_URL = (
    "https://p.media-imdb.com/static-content/documents/v1/title/{imdb_id}"
    "/ratings%3Fjsonp=imdb.rating.run:imdb.api.title.ratings/data.json"
)
_INTRO_SELECTOR = (
    "#link-report-intra > span.all.hidden, "
    '#link-report-intra > [property="v:summary"], '
    "#link-report > span.all.hidden, "
    '#link-report > [property="v:summary"]'
)
_AVATAR_RE = re.compile(r"url\(([^)]+)\)")
_ROLE_RE = re.compile(r"饰\s*([^()]+)")
_IMDB_ID_RE = re.compile(r"^tt\d+$")

_CAST_JOIN = "\n　　　　　　　"


def rating_summary(average: Any, votes: Any) -> str:
    try:
        if float(average) > 0 and int(votes) > 0:
            return f"{average} / 10 from {votes} users"
    except (TypeError, ValueError):
        pass
    return "0 / 10 from 0 users"


def _info_value(soup: BeautifulSoup, label: str) -> str:
    return text_after_label(find_label(soup, "#info span.pl", label))


def parse_subject_page(html: str) -> dict[str, Any]:
    """Fields of a Douban subject page (ld+json plus the ``#info`` block)."""
    soup = parse_html(html)
    ld = extract_json_script(soup, 'script[type="application/ld+json"]')

    title_tag = soup.select_one("title")
    title = (title_tag.get_text() if title_tag else "").replace("(豆瓣)", "").strip()
    reviewed = soup.select_one('span[property="v:itemreviewed"]')
    foreign_title = (reviewed.get_text() if reviewed else "").replace(title, "").strip()

    year_tag = soup.select_one("#content > h1 > span.year")
    year_match = re.search(r"\d{4}", year_tag.get_text() if year_tag else "")

    playdate = sorted(select_texts(soup, '#info span[property="v:initialReleaseDate"]'))

    runtime_tag = soup.select_one('#info span[property="v:runtime"]')
    duration = _info_value(soup, "单集片长") or (
        runtime_tag.get_text(strip=True) if runtime_tag else ""
    )

    intro_lines = "\n".join(tag.get_text() for tag in soup.select(_INTRO_SELECTOR))
    introduction = "\n".join(line.strip() for line in intro_lines.split("\n") if line.strip())

    poster = ""
    if ld.get("image"):
        poster = re.sub(r"s(_ratio_poster|pic)", r"l\1", str(ld["image"]))
        poster = re.sub(r"\.webp$", ".jpg", poster.replace("img3", "img1", 1))

    aggregate = ld.get("aggregateRating") or {}
    page_average = soup.select_one("#interest_sectl .rating_num")
    page_votes = soup.select_one('#interest_sectl span[property="v:votes"]')
    average = aggregate.get("ratingValue") or (page_average.get_text(strip=True) if page_average else "") or "0"
    votes = aggregate.get("ratingCount") or (page_votes.get_text(strip=True) if page_votes else "") or "0"

    return {
        "chinese_title": title,
        "foreign_title": foreign_title,
        "year": year_match.group(0) if year_match else "",
        "aka": sorted(split_list(_info_value(soup, "又名"))),
        "region": split_list(_info_value(soup, "制片国家/地区")),
        "genre": select_texts(soup, '#info span[property="v:genre"]'),
        "language": split_list(_info_value(soup, "语言")),
        "playdate": playdate,
        "episodes": _info_value(soup, "集数"),
        "duration": duration,
        "introduction": introduction,
        "poster": poster,
        "tags": select_texts(soup, 'div.tags-body > a[href^="/tag"]'),
        "douban_rating_average": str(average),
        "douban_votes": str(votes),
        "douban_rating": rating_summary(average, votes),
        "imdb_id": _info_value(soup, "IMDb"),
    }


def _celebrity_section(soup: BeautifulSoup, section: str, *, with_role: bool = False) -> list[dict]:
    out: list[dict] = []
    for wrapper in soup.select(".list-wrapper"):
        heading = wrapper.select_one("h2")
        if heading is None or section not in heading.get_text():
            continue
        for celeb in wrapper.select(".celebrities-list .celebrity"):
            anchor = celeb.select_one(".info .name a")
            name = anchor.get_text(strip=True) if anchor else ""
            if not name:
                continue
            role_tag = celeb.select_one(".info .role")
            role = role_tag.get_text(strip=True) if role_tag else ""
            if with_role and role:
                match = _ROLE_RE.search(role)
                role = f"饰 {match.group(1).strip()}" if match else ""
            avatar_tag = celeb.select_one(".avatar")
            avatar_match = _AVATAR_RE.search(str(avatar_tag.get("style", ""))) if avatar_tag else None
            out.append(
                {
                    "name": name,
                    "link": str(anchor.get("href") or ""),
                    "role": role,
                    "avatar": avatar_match.group(1) if avatar_match else "",
                }
            )
    return out


def parse_celebrities_page(html: str) -> dict[str, list[dict]]:
    soup = parse_html(html)
    return {
        "director": _celebrity_section(soup, "导演"),
        "writer": _celebrity_section(soup, "编剧"),
        "cast": _celebrity_section(soup, "演员", with_role=True),
    }


def parse_awards_page(html: str) -> list[dict[str, Any]]:
    """Award blocks as ``{"festival": "...", "awards": ["category winners", ...]}``."""
    soup = parse_html(html)
    blocks: list[dict[str, Any]] = []
    for section in soup.select(".awards"):
        heading = section.select_one(".hd h2")
        festival_tag = heading.select_one("a") if heading else None
        year_tag = heading.select_one(".year") if heading else None
        festival = " ".join(
            part
            for part in (
                festival_tag.get_text(strip=True) if festival_tag else "",
                year_tag.get_text(strip=True) if year_tag else "",
            )
            if part
        )
        awards: list[str] = []
        for award in section.select("ul.award"):
            items = award.select("li")
            if len(items) >= 2:
                category = items[0].get_text(strip=True)
                winners = items[1].get_text(strip=True)
                awards.append(f"{category} {winners}" if winners else category)
        if awards:
            blocks.append({"festival": festival, "awards": awards})
    return blocks


class DoubanProvider(RegexProvider):
    """Douban movie/TV subjects.

    With an archive, archived records are served before any live scrape.
    """

    name = "douban"
    domains = ("movie.douban.com",)
    pattern = re.compile(r"/subject/(\d+)")

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        cookie: str | None = None,
        archive: ArchivePort | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(client, **kwargs)
        self._headers = browser_headers(cookie)
        self._archive = archive

    async def _generate(self, sid: str) -> MediaRecord:
        if not sid:
            return self.fail(sid, "Invalid Douban id")

        if self._archive is not None:
            archived = await self._archive.lookup(self.name, sid)
            if archived:
                self._log.info("douban_archive_hit", sid=sid)
                archived = MediaRecord.from_payload(archived).fields
                return self.ok(sid, **archived)

        base_link = f"https://movie.douban.com/subject/{sid}/"
        response = await self._fetch_subject(sid, base_link)
        if response is None:
            return self.fail(sid, "No response from Douban")
        if response.status_code == 404:
            return self.fail(sid, NONE_EXIST_ERROR)
        if not response.is_success:
            text = response.text
            if is_anti_bot(text):
                return self.fail(sid, ANTI_BOT_ERROR)
            return self.fail(sid, f"Failed to fetch: {response.status_code} {text[:200]}")

        html = response.text
        if NOT_FOUND_RE.search(html):
            return self.fail(sid, NONE_EXIST_ERROR)
        if is_anti_bot(html):
            return self.fail(sid, ANTI_BOT_ERROR)

        fields = parse_subject_page(html)
        fields["douban_link"] = base_link

        imdb_id = fields.pop("imdb_id")
        imdb_rating: dict[str, Any] | None = None
        if _IMDB_ID_RE.match(imdb_id):
            fields["imdb_id"] = imdb_id
            fields["imdb_link"] = f"https://www.imdb.com/title/{imdb_id}/"
            imdb_rating = await self._imdb_rating(imdb_id)

        celebrities, awards = await asyncio.gather(
            self._celebrities(base_link),
            self._awards(base_link),
        )
        fields.update(celebrities)
        fields["awards"] = awards

        if imdb_rating and imdb_rating.get("average"):
            fields["imdb_rating_average"] = imdb_rating["average"]
            fields["imdb_votes"] = imdb_rating["votes"]
            fields["imdb_rating"] = imdb_rating["formatted"]

        return self.ok(sid, **fields)

    async def _fetch_subject(self, sid: str, base_link: str) -> httpx.Response | None:
        """Desktop page, falling back to the mobile page on 204/403/521 or no response."""
        response: httpx.Response | None
        try:
            response = await self._get(base_link, headers=self._headers)
        except httpx.HTTPError as e:
            self._log.warning("douban_primary_failed", sid=sid, error=repr(e))
            response = None

        if response is None or response.status_code in _MOBILE_FALLBACK_STATUSES:
            try:
                mobile = await self._get(
                    f"https://m.douban.com/movie/subject/{sid}/", headers=self._headers
                )
                if mobile.is_success:
                    self._log.info("douban_mobile_fallback", sid=sid)
                    return mobile
            except httpx.HTTPError as e:
                self._log.warning("douban_mobile_failed", sid=sid, error=repr(e))
        return response

    async def _secondary(self, url: str) -> str | None:
        """Body of a best-effort sub-page, or None."""
        try:
            response = await fetch_with_retry(
                self._client,
                url,
                attempts=self._retry_attempts,
                timeout=self._secondary_timeout,
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            self._log.warning("douban_subfetch_failed", url=url, error=repr(e))
            return None
        if not response.is_success:
            self._log.warning("douban_subfetch_failed", url=url, status=response.status_code)
            return None
        return response.text

    async def _imdb_rating(self, imdb_id: str) -> dict[str, Any] | None:
        body = await self._secondary(_IMDB_RATING_URL.format(imdb_id=imdb_id))
        resource = parse_jsonp(body or "").get("resource")
        if not resource:
            return None
        average = resource.get("rating") or 0
        votes = resource.get("ratingCount") or 0
        return {
            "average": average,
            "votes": votes,
            "formatted": f"{average} / 10 from {votes} users",
        }

    async def _celebrities(self, base_link: str) -> dict[str, list[dict]]:
        body = await self._secondary(f"{base_link}celebrities")
        return parse_celebrities_page(body) if body else {}

    async def _awards(self, base_link: str) -> list[dict[str, Any]]:
        body = await self._secondary(f"{base_link}awards")
        return parse_awards_page(body) if body else []

    def format(self, record: MediaRecord) -> str:
        get = record.get
        lines: list[str] = []
        if get("poster"):
            lines.append(f"[img]{get('poster')}[/img]\n")
        title = get("foreign_title") or get("chinese_title")
        if title:
            lines.append(f"❁ 片　　名:　{title}")
        if get("aka"):
            lines.append(f"❁ 译　　名:　{joined(get('aka')).strip()}")
        if get("year"):
            lines.append(f"❁ 年　　代:　{get('year')}")
        if get("region"):
            lines.append(f"❁ 产　　地:　{joined(get('region'))}")
        if get("genre"):
            lines.append(f"❁ 类　　别:　{joined(get('genre'))}")
        if get("language"):
            lines.append(f"❁ 语　　言:　{joined(get('language'))}")
        if get("playdate"):
            lines.append(f"❁ 上映日期:　{joined(get('playdate'))}")
        if get("imdb_rating"):
            lines.append(f"❁ IMDb评分:　{get('imdb_rating')}")
        if get("imdb_link"):
            lines.append(f"❁ IMDb链接:　{get('imdb_link')}")
        lines.append(f"❁ 豆瓣评分:　{get('douban_rating')}")
        lines.append(f"❁ 豆瓣链接:　{get('douban_link')}")
        if get("episodes"):
            lines.append(f"❁ 集　　数:　{get('episodes')}")
        if get("duration"):
            lines.append(f"❁ 片　　长:　{get('duration')}")
        if get("director"):
            lines.append(f"❁ 导　　演:　{joined(p.get('name') for p in get('director'))}")
        if get("writer"):
            lines.append(f"❁ 编　　剧:　{joined(p.get('name') for p in get('writer')).strip()}")

        cast_names = [p.get("name") for p in get("cast") or [] if p.get("name")]
        if cast_names:
            lines.append(wrapped_line("❁ 主　　演:　", _CAST_JOIN.join(cast_names).strip(), 100))

        if get("tags"):
            lines.append(f"\n❁ 标　　签:　{joined(get('tags'), ' | ')}")
        if get("introduction"):
            lines.append("\n❁ 简　　介\n")
            lines.append("　" + get("introduction").replace("\n", "\n　　"))

        awards = get("awards") or []
        if awards:
            lines.append("\n❁ 获奖情况\n")
            blocks: list[str] = []
            for index, block in enumerate(awards):
                if isinstance(block, str):
                    blocks.append(f"　　{block}")
                elif block and block.get("festival") and isinstance(block.get("awards"), list):
                    festival = ("" if index == 0 else "\n") + block["festival"]
                    blocks.append("\n".join([festival, *(f"　　{a}" for a in block["awards"])]))
            lines.append("\n".join(blocks))

        return "\n".join(lines).strip()
