"""Tests for filling the local movie cache."""

import json

import httpx
import pytest

from conftest import NO_WAIT, mock_http_client
from streamflix.models import CachedMovie
from streamflix.services.populate_service import PopulateService
from streamflix.services.tmdb_service import TMDBService


def movie(tmdb_id, title, popularity):
    return {
        "id": tmdb_id,
        "title": title,
        "overview": f"About {title}",
        "poster_path": f"/{tmdb_id}.jpg",
        "release_date": "2024-01-01",
        "vote_average": 7.5,
        "genre_ids": [18, 28],
        "popularity": popularity,
    }


def tmdb_with_pages(pages):
    def handler(request):
        page = int(request.url.params["page"])
        if page not in pages:
            return httpx.Response(500)
        return httpx.Response(200, json={"page": page, "results": pages[page]})

    return TMDBService(
        "k", base_url="https://tmdb.test/3", client=mock_http_client(handler), retry_policy=NO_WAIT
    )


class TestPopulateService:
    @pytest.mark.asyncio
    async def test_stores_popular_pages(self, db_session):
        tmdb = tmdb_with_pages(
            {1: [movie(1, "One", 90.0), movie(2, "Two", 50.0)], 2: [movie(3, "Three", 70.0)]}
        )
        service = PopulateService(db_session, tmdb)

        result = await service.populate_popular(pages=2)

        assert result == {"stored": 3, "failed_pages": []}
        top = await service.most_popular()
        assert [m.title for m in top] == ["One", "Three", "Two"]
        assert json.loads(top[0].genre_ids) == [18, 28]

    @pytest.mark.asyncio
    async def test_rerun_replaces_rows(self, db_session):
        service = PopulateService(db_session, tmdb_with_pages({1: [movie(1, "Old", 1.0)]}))
        await service.populate_popular(pages=1)

        service.tmdb = tmdb_with_pages({1: [movie(1, "New", 99.0)]})
        await service.populate_popular(pages=1)

        row = await db_session.get(CachedMovie, 1)
        assert row.title == "New"
        assert row.popularity == 99.0
        assert len(await service.most_popular()) == 1

    @pytest.mark.asyncio
    async def test_failed_page_is_skipped(self, db_session):
        service = PopulateService(db_session, tmdb_with_pages({2: [movie(5, "Five", 3.0)]}))

        result = await service.populate_popular(pages=2)

        assert result == {"stored": 1, "failed_pages": [1]}

    @pytest.mark.asyncio
    async def test_untitled_results_are_ignored(self, db_session):
        service = PopulateService(
            db_session, tmdb_with_pages({1: [{"id": 9, "title": ""}, movie(4, "Four", 2.0)]})
        )
        assert (await service.populate_popular(pages=1))["stored"] == 1
