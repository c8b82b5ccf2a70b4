"""Tests for SteamProvider."""

from __future__ import annotations

import httpx
import pytest
import respx

from ptgen.infrastructure.providers import SteamProvider
from ptgen.infrastructure.providers.steam import format_price, requirements_block

_API = "https://store.steampowered.com/api/appdetails"

DOTA = {
    "570": {
        "success": True,
        "data": {
            "type": "game",
            "name": "Dota 2",
            "header_image": "https://cdn.example/570/header.jpg",
            "developers": ["Valve"],
            "publishers": ["Valve"],
            "release_date": {"coming_soon": False, "date": "2013 年 7 月 9 日"},
            "platforms": {"windows": True, "mac": True, "linux": True},
            "genres": [{"description": "动作"}, {"description": "策略"}],
            "categories": [{"description": "多人"}],
            "supported_languages": "English<strong>*</strong>, Fran&ccedil;ais<br><strong>*</strong>具有完全音频支持的语言",
            "about_the_game": "<h2>游戏</h2>每天都有数百万玩家<br><br>加入战斗",
            "pc_requirements": {
                "minimum": "<strong>最低配置:</strong><br><ul><li>操作系统: Windows 7</li></ul>",
            },
            "price_overview": {"currency": "CNY", "initial": 9800, "final": 4900, "discount_percent": 50},
            "screenshots": [{"id": 0, "path_thumbnail": "t.jpg", "path_full": "f.jpg"}],
        },
    }
}


@pytest.fixture()
async def client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture()
def provider(client) -> SteamProvider:
    return SteamProvider(client)


class TestHelpers:
    def test_format_price(self) -> None:
        assert format_price({"currency": "CNY", "initial": 9800, "final": 4900, "discount_percent": 50}) == {
            "currency": "CNY",
            "initial": "98.00",
            "final": "49.00",
            "discount": 50,
        }

    def test_format_price_missing(self) -> None:
        assert format_price(None) is None

    def test_requirements_block_drops_labels(self) -> None:
        block = requirements_block("<strong>最低配置:</strong><br>操作系统: Windows 7", "最低配置")
        assert block.startswith("❁ 最低配置\n")
        assert "    操作系统: Windows 7" in block
        assert "最低配置:" not in block

    def test_requirements_block_empty(self) -> None:
        assert requirements_block("", "最低配置") == ""


class TestGenerate:
    def test_url_matching(self, provider) -> None:
        assert provider.matches("https://store.steampowered.com/app/570/Dota_2/") == "570"

    @respx.mock
    async def test_success(self, provider) -> None:
        route = respx.get(url__startswith=_API).respond(200, json=DOTA)

        record = await provider.generate("570")

        assert record.success is True
        assert record.get("name") == "Dota 2"
        assert record.get("price")["final"] == "49.00"
        assert route.calls.last.request.url.params["l"] == "cn"

    @respx.mock
    async def test_unsuccessful_entry(self, provider) -> None:
        respx.get(url__startswith=_API).respond(200, json={"999": {"success": False}})

        record = await provider.generate("999")

        assert record.error == "Failed to retrieve Steam app details"

    async def test_non_numeric_id(self, provider) -> None:
        record = await provider.generate("dota")
        assert record.success is False

    @respx.mock
    async def test_http_error(self, provider) -> None:
        respx.get(url__startswith=_API).mock(side_effect=httpx.ConnectError("refused"))

        record = await provider.generate("570")

        assert record.error.startswith("Steam API fetch error:")

    @respx.mock
    async def test_format(self, provider) -> None:
        respx.get(url__startswith=_API).respond(200, json=DOTA)
        record = await provider.generate("570")

        text = provider.format(record)

        assert text.startswith("[img]https://cdn.example/570/header.jpg[/img]")
        assert "❁ 游戏名称:　Dota 2" in text
        assert "❁ 原　　价:　98.00 CNY" in text
        assert "❁ 现　　价:　49.00 CNY (折扣50%)" in text
        assert "❁ 支持平台:　Windows, Mac, Linux" in text
        assert "❁ 支持语言:　English*, Français" in text
        assert "❁ 链　　接:　https://store.steampowered.com/app/570/" in text
        assert "[img]f.jpg[/img]" in text
