"""Tests for the HTTP surface."""

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from conftest import NO_WAIT, mock_http_client
from streamflix import models  # noqa: F401
from streamflix.api.dependencies import get_tmdb_service
from streamflix.config import settings
from streamflix.database import Base, get_db
from streamflix.main import app
from streamflix.services.scheduler_service import scheduler_service
from streamflix.services.tmdb_service import TMDBService
from streamflix.stream_server import stream_app

POPULAR = {
    "page": 1,
    "total_pages": 3,
    "total_results": 2,
    "results": [
        {"id": 550, "title": "Fight Club", "release_date": "1999-10-15", "poster_path": "/fc.jpg"},
        {"id": 551, "title": "No Poster", "release_date": ""},
    ],
}

MULTI = {
    "page": 1,
    "total_pages": 1,
    "total_results": 3,
    "results": [
        {"id": 1, "media_type": "movie", "title": "Film"},
        {"id": 2, "media_type": "tv", "name": "Show"},
        {"id": 3, "media_type": "person", "name": "Someone"},
    ],
}


def tmdb_handler(request):
    path = request.url.path
    if path.endswith("/movie/popular"):
        return httpx.Response(200, json=POPULAR)
    if path.endswith("/search/multi"):
        return httpx.Response(200, json=MULTI)
    if path.endswith("/movie/550"):
        return httpx.Response(
            200,
            json={
                "id": 550,
                "title": "Fight Club",
                "runtime": 139,
                "credits": {"crew": [{"job": "Director", "name": "David Fincher"}]},
            },
        )
    if path.endswith("/configuration"):
        return httpx.Response(200, json={"images": {}})
    return httpx.Response(503)


@pytest.fixture
def client(tmp_path):
    db_file = tmp_path / "api.db"
    Base.metadata.create_all(create_engine(f"sqlite:///{db_file}"))
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_file}", poolclass=NullPool)
    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_tmdb():
        tmdb = TMDBService(
            "test-key",
            base_url="https://tmdb.test/3",
            client=mock_http_client(tmdb_handler),
            retry_policy=NO_WAIT,
        )
        try:
            yield tmdb
        finally:
            await tmdb.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tmdb_service] = override_tmdb
    with patch.object(scheduler_service, "start", AsyncMock()), patch.object(
        scheduler_service, "stop", AsyncMock()
    ):
        with TestClient(app) as test_client:
            yield test_client
    app.dependency_overrides.clear()


class TestCatalog:
    def test_popular_movies(self, client):
        resp = client.get("/movie/popular")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_pages"] == 3
        assert [r["tmdb_id"] for r in data["results"]] == [550, 551]
        assert data["results"][0]["year"] == 1999

    def test_multi_search_drops_people(self, client):
        resp = client.get("/search/multi", params={"query": "x"})
        assert resp.status_code == 200
        assert [r["media_type"] for r in resp.json()["results"]] == ["movie", "tv"]

    def test_search_requires_query(self, client):
        assert client.get("/search/multi").status_code == 422

    def test_details(self, client):
        resp = client.get("/movie/550")
        assert resp.status_code == 200
        assert resp.json()["director"] == "David Fincher"
        assert resp.json()["runtime"] == 139

    def test_upstream_failure_is_502(self, client):
        resp = client.get("/tv/popular")
        assert resp.status_code == 502

    def test_passthrough(self, client):
        resp = client.get("/api/tmdb/configuration")
        assert resp.status_code == 200
        assert resp.json() == {"images": {}}


class TestStream:
    def test_providers_in_order(self, client):
        resp = client.get("/providers")
        assert resp.status_code == 200
        assert list(resp.json())[:3] == ["vidsrc", "vidsrc.to", "vidlink"]

    def test_movie_url(self, client):
        resp = client.get("/stream", params={"provider": "vidsrc", "id": "550"})
        assert resp.status_code == 200
        assert resp.json()["url"] == "https://vidsrc.cc/v2/embed/movie/550"

    def test_tv_url_defaults_to_first_episode(self, client):
        resp = client.get("/stream", params={"provider": "vidlink", "id": "1399", "mode": "tv"})
        body = resp.json()
        assert body["url"] == "https://vidlink.pro/tv/1399/1/1"
        assert (body["season"], body["episode"]) == (1, 1)

    def test_invalid_mode(self, client):
        resp = client.get("/stream", params={"provider": "vidsrc", "id": "1", "mode": "music"})
        assert resp.status_code == 400

    def test_unknown_provider(self, client):
        resp = client.get("/stream", params={"provider": "nope", "id": "1"})
        assert resp.status_code == 400

    def test_edge_app_serves_stream_urls(self):
        with TestClient(stream_app) as edge:
            resp = edge.get("/stream", params={"provider": "vidsrc.to", "id": "550"})
            assert resp.json()["url"] == "https://vidsrc.to/embed/movie/550"
            assert edge.get("/health").json()["service"] == "edge"


class TestLibrary:
    def test_preferences_defaults(self, client):
        body = client.get("/api/library/preferences").json()
        assert body == {"theme": "dark", "last_provider": None, "history": [], "favorites": []}

    def test_theme(self, client):
        assert client.put("/api/library/theme", json={"theme": "light"}).status_code == 200
        assert client.get("/api/library/preferences").json()["theme"] == "light"
        assert client.put("/api/library/theme", json={"theme": "pink"}).status_code == 422

    def test_last_provider(self, client):
        resp = client.put("/api/library/last-provider", json={"provider": "vidfast"})
        assert resp.status_code == 200
        assert client.get("/api/library/preferences").json()["last_provider"] == "vidfast"

        resp = client.put("/api/library/last-provider", json={"provider": "nope"})
        assert resp.status_code == 400

    def test_history_is_bounded_and_recent_first(self, client):
        for n in range(12):
            client.post("/api/library/history", json={"content_id": str(n), "mode": "movie"})

        history = client.get("/api/library/history").json()
        assert len(history) == 10
        assert history[0]["content_id"] == "11"
        assert history[-1]["content_id"] == "2"

        assert client.delete("/api/library/history").json() == {"removed": 10}

    def test_favorites(self, client):
        payload = {"content_id": "550", "mode": "movie", "title": "Fight Club"}
        assert client.post("/api/library/favorites/toggle", json=payload).json() == {
            "favorited": True
        }
        favorites = client.get("/api/library/favorites").json()
        assert favorites[0]["title"] == "Fight Club"

        assert client.delete("/api/library/favorites/movie/550").status_code == 200
        assert client.delete("/api/library/favorites/movie/550").status_code == 404


class TestPlayer:
    def test_token_then_player(self, client):
        resp = client.post("/api/player/token", params={"id": "1399", "mode": "tv", "season": 2})
        assert resp.status_code == 200
        player_url = resp.json()["player_url"]
        query = parse_qs(urlparse(player_url).query)
        assert query["season"] == ["2"]

        page = client.get(player_url)
        assert page.status_code == 200
        assert 'data-id="1399"' in page.text

        # Token is single-use
        assert client.get(player_url).status_code == 403

    def test_hotlinked_player_denied(self, client):
        resp = client.get("/player", params={"id": "550"}, headers={"referer": "https://evil.example/"})
        assert resp.status_code == 403
        assert settings.SITE_URL in resp.text

    def test_allowed_referrer(self, client):
        resp = client.get("/player", params={"id": "550"}, headers={"referer": "http://localhost:8787/"})
        assert resp.status_code == 200


class TestSystem:
    def test_root(self, client):
        assert client.get("/").json()["name"] == "StreamFlix API"

    def test_maintenance_mode(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAINTENANCE_MODE", True)
        resp = client.get("/")
        assert resp.status_code == 503
        assert "maintenance" in resp.text.lower()

    def test_health(self, client):
        assert client.get("/api/system/health").json()["status"] == "healthy"

    def test_unknown_log_channel(self, client):
        assert client.get("/api/system/logs", params={"log_type": "debug"}).status_code == 400
