"""Tests for MelonProvider."""

from __future__ import annotations

import httpx
import pytest
import respx

from ptgen.domain.entities import NONE_EXIST_ERROR
from ptgen.infrastructure.providers import MelonProvider
from ptgen.infrastructure.providers.melon import (
    normalize_poster,
    parse_album_page,
    translate_genres,
)

_ALBUM = "https://www.melon.com/album/detail.htm"

ALBUM_HTML = """
<html><body>
<div class="wrap_info">
  <div class="thumb"><img src="https://cdnimg.melon.co.kr/cm2/album/images/111/11/500.jpg?/melon/resize/282"/></div>
  <div class="entry">
    <span class="gubun">[정규]</span>
    <div class="song_name"><strong>앨범명</strong> The Album</div>
    <div class="artist">
      <a href="javascript:melon.link.goArtistDetail('1');">BLACKPINK</a>
      <a href="javascript:melon.link.goArtistDetail('1');">BLACKPINK</a>
    </div>
    <div class="meta">
      <dl class="list">
        <dt>발매일</dt><dd>2020.10.02</dd>
        <dt>장르</dt><dd>댄스, 발라드</dd>
        <dt>발매사</dt><dd>YG PLUS</dd>
        <dt>기획사</dt><dd>YG Entertainment</dd>
      </dl>
    </div>
  </div>
</div>
<div class="dtl_albuminfo">첫 정규 앨범<br/>발매</div>
<form id="frm">
  <table class="tbl_song_list"><tbody>
    <tr>
      <td><span class="rank">1</span></td>
      <td><a title="How You Like That 재생">How You Like That</a>
          <a href="javascript:melon.link.goArtistDetail('1');">BLACKPINK</a></td>
    </tr>
    <tr>
      <td><span class="rank">2</span></td>
      <td><a title="Ice Cream 곡정보"></a>
          <a href="javascript:melon.link.goArtistDetail('1');">BLACKPINK</a>
          <a href="javascript:melon.link.goArtistDetail('2');">Selena Gomez</a></td>
    </tr>
  </tbody></table>
</form>
</body></html>
"""


@pytest.fixture()
async def client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture()
def provider(client) -> MelonProvider:
    return MelonProvider(client)


class TestHelpers:
    def test_translate_genres(self) -> None:
        assert translate_genres("댄스, 발라드, Unknown") == ["Dance", "Ballad", "Unknown"]

    def test_normalize_poster_upscales(self) -> None:
        src = "https://cdnimg.melon.co.kr/cm2/album/images/111/11/500.jpg?/melon/resize/282"
        assert normalize_poster(src) == "https://cdnimg.melon.co.kr/cm2/album/images/111/11/1000.jpg"

    def test_normalize_poster_relative(self) -> None:
        assert normalize_poster("/img/a.jpg") == "https://www.melon.com/img/a.jpg"

    def test_normalize_poster_empty(self) -> None:
        assert normalize_poster("") is None


class TestParseAlbumPage:
    def test_fields(self) -> None:
        fields = parse_album_page(ALBUM_HTML)

        assert fields["album_type"] == "正规专辑"
        assert fields["title"] == "The Album"
        assert fields["artists"] == ["BLACKPINK"]
        assert fields["release_date"] == "2020.10.02"
        assert fields["genres"] == ["Dance", "Ballad"]
        assert fields["publisher"] == "YG PLUS"
        assert fields["planning"] == "YG Entertainment"
        assert fields["description"] == "첫 정규 앨범\n발매"

    def test_tracks(self) -> None:
        tracks = parse_album_page(ALBUM_HTML)["tracks"]

        assert tracks[0] == {"number": "1", "title": "How You Like That", "artists": ["BLACKPINK"]}
        assert tracks[1]["title"] == "Ice Cream"
        assert tracks[1]["artists"] == ["BLACKPINK", "Selena Gomez"]

    def test_missing_container(self) -> None:
        assert parse_album_page("<html><body>nothing</body></html>") is None


class TestGenerate:
    def test_url_matching(self, provider) -> None:
        url = "https://www.melon.com/album/detail.htm?albumId=10486751"
        assert provider.handles(url)
        assert provider.matches(url) == "album/10486751"

    @respx.mock
    async def test_success(self, provider) -> None:
        route = respx.get(url__startswith=_ALBUM).respond(200, text=ALBUM_HTML)

        record = await provider.generate("album/10486751")

        assert record.success is True
        assert record.get("melon_id") == "10486751"
        assert record.get("melon_link") == f"{_ALBUM}?albumId=10486751"
        assert route.calls.last.request.url.params["albumId"] == "10486751"

    async def test_invalid_sid(self, provider) -> None:
        record = await provider.generate("10486751")
        assert record.error == "Invalid Melon ID format. Expected 'album/<digits>'"

    @respx.mock
    async def test_not_found(self, provider) -> None:
        respx.get(url__startswith=_ALBUM).respond(404)
        record = await provider.generate("album/1")
        assert record.error == NONE_EXIST_ERROR

    @respx.mock
    async def test_server_error(self, provider) -> None:
        respx.get(url__startswith=_ALBUM).respond(503)
        record = await provider.generate("album/1")
        assert record.error == "Melon 专辑处理错误: 请求失败，状态码 503"

    @respx.mock
    async def test_no_container(self, provider) -> None:
        respx.get(url__startswith=_ALBUM).respond(200, text="<html></html>")
        record = await provider.generate("album/1")
        assert record.error == "未找到专辑信息容器"

    @respx.mock
    async def test_format(self, provider) -> None:
        respx.get(url__startswith=_ALBUM).respond(200, text=ALBUM_HTML)
        record = await provider.generate("album/10486751")

        text = provider.format(record)

        assert "❁ 专辑名称:　The Album" in text
        assert "❁ 流　　派:　Dance / Ballad" in text
        assert "❁ 歌曲列表" in text
        assert "　　2. Ice Cream (BLACKPINK, Selena Gomez)" in text
