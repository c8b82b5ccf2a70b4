"""Tests for StaticArchive."""

from __future__ import annotations

import httpx
import pytest
import respx

from ptgen.infrastructure.archive import StaticArchive

_BASE = "https://archive.example/ptgen"


@pytest.fixture()
async def client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture()
def archive(client) -> StaticArchive:
    return StaticArchive(client, base_url=f"{_BASE}/")


class TestStaticArchive:
    def test_url_for(self, archive) -> None:
        assert archive.url_for("douban", "1292052") == f"{_BASE}/douban/1292052.json"

    @respx.mock
    async def test_hit(self, archive) -> None:
        respx.get(f"{_BASE}/douban/1292052.json").respond(
            200, json={"site": "douban", "sid": "1292052", "chinese_title": "肖申克的救赎"}
        )

        data = await archive.lookup("douban", "1292052")

        assert data["chinese_title"] == "肖申克的救赎"

    @respx.mock
    async def test_wrapped_payload(self, archive) -> None:
        respx.get(f"{_BASE}/douban/1.json").respond(200, json={"data": {"chinese_title": "x"}})

        assert await archive.lookup("douban", "1") == {"chinese_title": "x"}

    @respx.mock
    async def test_miss(self, archive) -> None:
        respx.get(f"{_BASE}/douban/2.json").respond(404)
        assert await archive.lookup("douban", "2") is None

    @respx.mock
    async def test_network_error(self, archive) -> None:
        respx.get(f"{_BASE}/douban/3.json").mock(side_effect=httpx.ConnectError("x"))
        assert await archive.lookup("douban", "3") is None

    @respx.mock
    async def test_non_object(self, archive) -> None:
        respx.get(f"{_BASE}/douban/4.json").respond(200, json=[1, 2])
        assert await archive.lookup("douban", "4") is None
