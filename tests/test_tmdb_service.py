"""Tests for the TMDB service."""

import httpx
import pytest

from conftest import NO_WAIT, mock_http_client
from streamflix.exceptions import NetworkError, RetryExhausted
from streamflix.services.retry import RetryPolicy
from streamflix.services.tmdb_service import TMDBService

BASE = "https://tmdb.test/3"


def _service(handler, retry_policy=NO_WAIT):
    return TMDBService(
        "secret", base_url=BASE, client=mock_http_client(handler), retry_policy=retry_policy
    )


class TestRequests:
    @pytest.mark.asyncio
    async def test_api_key_and_params_forwarded(self):
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json={"page": 2, "results": []})

        service = _service(handler)
        data = await service.get_popular("movie", page=2)
        await service.close()

        assert data["page"] == 2
        assert seen[0].path == "/3/movie/popular"
        assert seen[0].params["api_key"] == "secret"
        assert seen[0].params["page"] == "2"

    @pytest.mark.asyncio
    async def test_search_multi(self):
        def handler(request):
            assert request.url.path == "/3/search/multi"
            assert request.url.params["query"] == "dark knight"
            return httpx.Response(200, json={"results": [{"id": 155}]})

        service = _service(handler)
        data = await service.search_multi("dark knight")
        assert data["results"][0]["id"] == 155

    @pytest.mark.asyncio
    async def test_details_append_credits_and_videos(self):
        def handler(request):
            assert request.url.path == "/3/tv/1399"
            assert request.url.params["append_to_response"] == "credits,videos,external_ids"
            return httpx.Response(200, json={"id": 1399})

        service = _service(handler)
        assert (await service.get_details("tv", 1399))["id"] == 1399

    @pytest.mark.asyncio
    async def test_passthrough(self):
        def handler(request):
            assert request.url.path == "/3/genre/movie/list"
            assert request.url.params["language"] == "en"
            return httpx.Response(200, json={"genres": []})

        service = _service(handler)
        assert await service.passthrough("genre/movie/list", {"language": "en"}) == {"genres": []}


class TestErrors:
    @pytest.mark.asyncio
    async def test_http_error_exhausts_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, json={"status_message": "down"})

        policy = RetryPolicy(max_attempts=2, base_delay_ms=0, jitter_ms=0)
        service = _service(handler, retry_policy=policy)

        with pytest.raises(RetryExhausted) as exc_info:
            await service.get_popular("movie")

        assert len(calls) == 3
        assert isinstance(exc_info.value.last_error, NetworkError)
        assert exc_info.value.last_error.status_code == 503

    @pytest.mark.asyncio
    async def test_transient_failure_recovers(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"results": []})

        policy = RetryPolicy(max_attempts=1, base_delay_ms=0, jitter_ms=0)
        service = _service(handler, retry_policy=policy)

        assert await service.get_airing_today() == {"results": []}
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        service = _service(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(RetryExhausted) as exc_info:
            await service.search_movies("x")
        assert "invalid JSON" in str(exc_info.value.last_error)


class TestParsing:
    def setup_method(self):
        self.service = TMDBService("k", base_url=BASE, client=mock_http_client(None))

    def test_movie_item(self):
        item = self.service.parse_media_item(
            {"id": 550, "title": "Fight Club", "release_date": "1999-10-15", "poster_path": "/p.jpg"},
            "movie",
        )
        assert item["tmdb_id"] == 550
        assert item["year"] == 1999
        assert item["poster_path"] == "/p.jpg"

    def test_tv_item_from_multi_search(self):
        item = self.service.parse_media_item(
            {"id": 1399, "media_type": "tv", "name": "Game of Thrones", "first_air_date": ""}
        )
        assert item["media_type"] == "tv"
        assert item["title"] == "Game of Thrones"
        assert item["year"] is None

    def test_details(self):
        data = {
            "id": 550,
            "title": "Fight Club",
            "release_date": "1999-10-15",
            "original_language": "en",
            "runtime": 139,
            "genres": [{"id": 18, "name": "Drama"}],
            "credits": {"crew": [{"job": "Writer", "name": "Jim"}, {"job": "Director", "name": "David Fincher"}]},
            "videos": {"results": [
                {"type": "Teaser", "site": "YouTube", "key": "t1"},
                {"type": "Trailer", "site": "YouTube", "key": "SUXWAEX2jlg"},
            ]},
            "external_ids": {"imdb_id": "tt0137523"},
        }
        parsed = self.service.parse_details(data, "movie")
        assert parsed["director"] == "David Fincher"
        assert parsed["genres"] == ["Drama"]
        assert parsed["language"] == "EN"
        assert parsed["trailer_url"] == "https://www.youtube.com/embed/SUXWAEX2jlg"
        assert parsed["runtime"] == 139
        assert parsed["imdb_id"] == "tt0137523"

    def test_tv_runtime_from_episode_run_time(self):
        parsed = self.service.parse_details(
            {"id": 1399, "name": "GoT", "episode_run_time": [57, 60]}, "tv"
        )
        assert parsed["runtime"] == 57
        assert parsed["director"] is None
        assert parsed["trailer_url"] is None
