"""End-to-end tests for the query endpoint.

Tests the full request-response cycle through:
    HTTP Request -> RequestGateMiddleware -> Router -> QueryRouter
    -> Provider / Search backend -> JSON envelope

The real application is built with create_app() and its lifespan runs,
so the cache, HTTP client and providers are the production ones.
Upstream sites are mocked with respx.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import respx
from fastapi.testclient import TestClient

from ptgen.infrastructure.config import AppConfig
from ptgen.interfaces.app import create_app

_TMDB_MOVIE = "https://api.themoviedb.org/3/movie/550"
_IMDB_SUGGEST = "https://v2.sg.media-imdb.com/suggestion/"

FIGHT_CLUB = {
    "id": 550,
    "title": "Fight Club",
    "original_title": "Fight Club",
    "overview": "An insomniac office worker...",
    "release_date": "1999-10-15",
    "runtime": 139,
    "vote_average": 8.4,
    "vote_count": 30000,
    "credits": {"crew": [{"job": "Director", "name": "David Fincher", "id": 7467}], "cast": []},
    "external_ids": {"imdb_id": "tt0137523"},
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _config(tmp_path: Path, **overrides) -> AppConfig:
    data = {
        "tmdb_api_key": "test-key",
        "cache": {"backend": "diskcache", "dir": str(tmp_path / "cache")},
        **overrides,
    }
    return AppConfig.model_validate(data)


@pytest.fixture()
def app(tmp_path: Path):
    return create_app(_config(tmp_path))


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def secured_client(tmp_path: Path):
    app = create_app(_config(tmp_path, api_key="s3cret"))
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class TestGeneration:
    def test_source_and_sid(self, client, app) -> None:
        with respx.mock:
            route = respx.get(url__startswith=_TMDB_MOVIE).respond(200, json=FIGHT_CLUB)
            resp = client.post("/", json={"source": "tmdb", "sid": "movie/550"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["site"] == "tmdb"
        assert body["sid"] == "movie/550"
        assert "Fight Club" in body["format"]
        assert body["copyright"] == "Powered by @Hares"
        assert route.call_count == 1

        raw = client.portal.call(app.state.cache.get, "tmdb_movie_550")
        cached = json.loads(raw)
        assert cached["title"] == "Fight Club"
        assert "format" not in cached

    def test_second_request_served_from_cache(self, client) -> None:
        with respx.mock:
            route = respx.get(url__startswith=_TMDB_MOVIE).respond(200, json=FIGHT_CLUB)
            first = client.post("/", json={"tmdb_id": "movie/550"})
            second = client.post("/api", json={"url": "https://www.themoviedb.org/movie/550"})

        assert route.call_count == 1
        assert second.json()["format"] == first.json()["format"]

    def test_query_params_used_without_body(self, client) -> None:
        with respx.mock:
            respx.get(url__startswith=_TMDB_MOVIE).respond(200, json=FIGHT_CLUB)
            resp = client.post("/?source=tmdb&sid=movie_550")

        assert resp.json()["sid"] == "movie/550"

    def test_unsupported_url(self, client) -> None:
        resp = client.post("/", json={"url": "https://example.com/movie/1"})

        assert resp.status_code == 200
        assert resp.json()["success"] is False
        assert resp.json()["error"] == "Unsupported URL"

    def test_missing_parameters(self, client) -> None:
        resp = client.post("/", json={})

        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_upstream_failure_not_cached(self, client) -> None:
        with respx.mock:
            route = respx.get(url__startswith=_TMDB_MOVIE).respond(404)
            client.post("/", json={"source": "tmdb", "sid": "movie/550"})
            resp = client.post("/", json={"source": "tmdb", "sid": "movie/550"})

        assert route.call_count == 2
        assert resp.json()["error"] == "The corresponding resource does not exist."

    def test_invalid_json_body_falls_back_to_query(self, client) -> None:
        resp = client.post(
            "/?url=https://example.com/x",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert resp.json()["error"] == "Unsupported URL"


class TestSearch:
    def test_auto_search_latin_goes_to_imdb(self, client) -> None:
        with respx.mock:
            respx.get(url__startswith=_IMDB_SUGGEST).respond(
                200, json={"d": [{"id": "tt1375666", "l": "Inception", "y": 2010, "qid": "movie"}]}
            )
            resp = client.post("/", json={"query": "Inception"})

        body = resp.json()
        assert body["success"] is True
        assert body["site"] == "search-imdb"
        assert body["data"][0]["link"] == "https://www.imdb.com/title/tt1375666/"

    def test_invalid_search_source(self, client) -> None:
        resp = client.post("/", json={"source": "douban", "query": "x"})
        assert resp.json()["error"] == "Invalid source. Supported sources: imdb, tmdb"


# ---------------------------------------------------------------------------
# Gate, docs and routing
# ---------------------------------------------------------------------------


class TestGate:
    def test_options_preflight(self, client) -> None:
        resp = client.options("/anything")

        assert resp.status_code == 204
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "POST" in resp.headers["access-control-allow-methods"]

    def test_unknown_path_is_404_envelope(self, client) -> None:
        resp = client.get("/nope")

        assert resp.status_code == 404
        body = resp.json()
        assert body["success"] is False
        assert body["error"].startswith("API endpoint not found")

    @pytest.mark.parametrize("method", ["GET", "POST"])
    def test_trailing_slash_is_404_envelope(self, client, method: str) -> None:
        resp = client.request(method, "/api/", json={}, follow_redirects=False)

        assert resp.status_code == 404
        assert resp.json()["error"].startswith("API endpoint not found")

    def test_unsupported_method_is_404_envelope(self, client) -> None:
        resp = client.put("/")
        assert resp.status_code == 404

    def test_docs_html(self, client) -> None:
        resp = client.get("/", headers={"accept": "text/html"})

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "PT-Gen API Service" in resp.text

    def test_docs_json(self, client) -> None:
        resp = client.get("/api", headers={"accept": "application/json"})

        assert resp.json()["Security"] == "Open access"

    def test_traversal_in_query_rejected(self, client) -> None:
        resp = client.get("/?url=../../etc/passwd")

        assert resp.status_code == 403
        assert resp.json()["error"] == "Malicious request detected. Access denied."

    def test_script_scheme_rejected(self, client) -> None:
        resp = client.post("/?url=javascript:alert(1)")
        assert resp.status_code == 403

    def test_rate_limit(self, tmp_path: Path) -> None:
        app = create_app(_config(tmp_path, rate_limit={"max_requests": 2}))
        with TestClient(app) as c:
            statuses = [c.post("/", json={}).status_code for _ in range(3)]

        assert statuses == [400, 400, 429]


class TestApiKey:
    def test_missing_key_shows_docs_on_get(self, secured_client) -> None:
        resp = secured_client.get("/", headers={"accept": "application/json"})

        assert resp.status_code == 200
        assert resp.json()["Security"] == "API key required for access"

    def test_missing_key_on_post(self, secured_client) -> None:
        resp = secured_client.post("/", json={"source": "tmdb", "sid": "1"})

        assert resp.status_code == 401
        assert resp.json()["error"] == "API key required. Access denied."

    def test_wrong_key(self, secured_client) -> None:
        resp = secured_client.post("/?key=nope", json={})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid API key. Access denied."

    def test_correct_key(self, secured_client) -> None:
        resp = secured_client.post("/?key=s3cret", json={})
        assert resp.status_code == 400
