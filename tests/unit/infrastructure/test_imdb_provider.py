"""Tests for ImdbProvider."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from ptgen.domain.entities import NONE_EXIST_ERROR
from ptgen.infrastructure.providers import ImdbProvider
from ptgen.infrastructure.providers.imdb import (
    extract_releases_and_akas,
    normalize_imdb_id,
)

_LINK = "https://www.imdb.com/title/tt0137523/"


def _next_data(page_props: dict) -> str:
    payload = json.dumps({"props": {"pageProps": page_props}})
    return f'<html><body><script id="__NEXT_DATA__" type="application/json">{payload}</script></body></html>'


TITLE_PROPS = {
    "aboveTheFoldData": {
        "primaryImage": {"url": "https://m.media-amazon.com/fc.jpg"},
        "originalTitleText": {"text": "Fight Club"},
        "releaseYear": {"year": 1999},
        "runtime": {"displayableProperty": {"value": {"plainText": "2h 19m"}}},
        "ratingsSummary": {"aggregateRating": 8.8, "voteCount": 2400000},
        "titleType": {"categories": [{"value": "movie"}]},
        "genres": {"genres": [{"text": "Drama"}]},
        "plot": {"plotText": {"plainText": "An insomniac office worker..."}},
        "releaseDate": {"year": 1999, "month": 10, "day": 15, "country": {"text": "United States"}},
        "keywords": {"edges": [{"node": {"text": "fight"}}]},
    },
    "mainColumnData": {
        "spokenLanguages": {"spokenLanguages": [{"text": "English"}]},
        "countriesDetails": {"countries": [{"text": "United States"}]},
        "castV2": [{"credits": [{"name": {"nameText": {"text": "Brad Pitt"}}}]}],
        "crewV2": [
            {"grouping": {"text": "Director"}, "credits": [{"name": {"nameText": {"text": "David Fincher"}}}]},
            {"grouping": {"text": "Writers"}, "credits": [{"name": {"nameText": {"text": "Chuck Palahniuk"}}}]},
        ],
    },
}

RELEASE_PROPS = {
    "contentData": {
        "categories": [
            {
                "id": "releases",
                "section": {"items": [
                    {"rowTitle": "Italy", "listContent": [{"text": "September 10, 1999", "subText": "(Venice)"}]},
                ]},
            },
            {
                "id": "akas",
                "section": {"items": [
                    {"rowTitle": "China", "listContent": [{"text": "搏击俱乐部"}]},
                ]},
            },
        ]
    }
}

GUIDE_PROPS = {
    "contentData": {
        "certificates": [{"country": "United States", "ratings": [{"rating": "R"}]}],
    }
}


@pytest.fixture()
async def client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture()
def provider(client) -> ImdbProvider:
    return ImdbProvider(client)


class TestHelpers:
    @pytest.mark.parametrize(
        ("sid", "expected"),
        [("tt0137523", "0137523"), ("137523", "0137523"), ("tt12345678", "12345678")],
    )
    def test_normalize_imdb_id(self, sid: str, expected: str) -> None:
        assert normalize_imdb_id(sid) == expected

    def test_releases_and_akas(self) -> None:
        releases, akas = extract_releases_and_akas(RELEASE_PROPS)
        assert releases == [{"country": "Italy", "date": "September 10, 1999", "event": "(Venice)"}]
        assert akas == [{"country": "China", "title": "搏击俱乐部", "note": None}]


class TestGenerate:
    def test_url_matching(self, provider) -> None:
        assert provider.matches("https://www.imdb.com/title/tt0137523/?ref_=nv") == "tt0137523"

    @respx.mock
    async def test_success(self, provider) -> None:
        respx.get(f"{_LINK}releaseinfo").respond(200, text=_next_data(RELEASE_PROPS))
        respx.get(f"{_LINK}parentalguide").respond(200, text=_next_data(GUIDE_PROPS))
        respx.get(_LINK).respond(200, text=_next_data(TITLE_PROPS))

        record = await provider.generate("tt0137523")

        assert record.success is True
        assert record.sid == "0137523"
        assert record.get("original_title") == "Fight Club"
        assert record.get("directors") == ["David Fincher"]
        assert record.get("writers") == ["Chuck Palahniuk"]
        assert record.get("certificates")[0]["ratings"][0]["rating"] == "R"
        assert record.get("aka")[0]["title"] == "搏击俱乐部"

    @respx.mock
    async def test_subpages_optional(self, provider) -> None:
        respx.get(f"{_LINK}releaseinfo").mock(side_effect=httpx.ConnectError("x"))
        respx.get(f"{_LINK}parentalguide").respond(500)
        respx.get(_LINK).respond(200, text=_next_data(TITLE_PROPS))

        record = await provider.generate("0137523")

        assert record.success is True
        assert record.get("release") is None
        assert record.get("certificates") is None

    @respx.mock
    async def test_not_found(self, provider) -> None:
        respx.get(url__startswith=_LINK).respond(404)

        record = await provider.generate("tt0137523")

        assert record.error == NONE_EXIST_ERROR

    @respx.mock
    async def test_page_unreachable(self, provider) -> None:
        respx.get(url__startswith=_LINK).mock(side_effect=httpx.ConnectError("x"))

        record = await provider.generate("tt0137523")

        assert record.success is False
        assert "Failed to fetch IMDb page" in record.error

    @respx.mock
    async def test_format(self, provider) -> None:
        respx.get(f"{_LINK}releaseinfo").respond(200, text=_next_data(RELEASE_PROPS))
        respx.get(f"{_LINK}parentalguide").respond(200, text=_next_data(GUIDE_PROPS))
        respx.get(_LINK).respond(200, text=_next_data(TITLE_PROPS))
        record = await provider.generate("tt0137523")

        text = provider.format(record)

        assert text.startswith("[img]https://m.media-amazon.com/fc.jpg[/img]")
        assert "❁ IMDb Rating:　8.8 / 10 from 2400000 users" in text
        assert "❁ Release Date:　1999-10-15 (United States) / 1999-09-10 (Italy)" in text
        assert "❁ Also Known As:　搏击俱乐部 (China)" in text
        assert "❁ Directors:　David Fincher" in text
