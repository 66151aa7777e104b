"""Fill the local movie cache from TMDB's popular listing"""

import json
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import RetryExhausted
from ..models.movie import CachedMovie
from .log_service import log_service
from .tmdb_service import TMDBService


class PopulateService:
    """Copy popular movies into the `movies` table, replacing stale rows"""

    def __init__(self, db: AsyncSession, tmdb: TMDBService):
        self.db = db
        self.tmdb = tmdb

    async def populate_popular(self, pages: int = 5) -> Dict:
        """
        Fetch the first `pages` pages of popular movies and upsert them.

        A page that cannot be fetched is logged and skipped; the others are
        still stored.
        """
        stored = 0
        failed_pages: List[int] = []

        log_service.info(f"Populating movie cache from {pages} popular pages")

        for page in range(1, pages + 1):
            try:
                data = await self.tmdb.get_popular("movie", page)
            except RetryExhausted as e:
                log_service.error(f"Popular page {page} could not be fetched: {e}")
                failed_pages.append(page)
                continue

            movies = data.get("results") or []
            if not movies:
                log_service.warning(f"No movies found on popular page {page}")
            for movie in movies:
                if movie.get("id") is None or not movie.get("title"):
                    continue
                await self.upsert(movie)
                stored += 1

            await self.db.commit()

        log_service.info(
            f"Movie cache populated: {stored} stored, {len(failed_pages)} pages failed"
        )
        return {"stored": stored, "failed_pages": failed_pages}

    async def upsert(self, movie: Dict) -> CachedMovie:
        row = await self.db.get(CachedMovie, movie["id"])
        if row is None:
            row = CachedMovie(id=movie["id"])
            self.db.add(row)

        row.title = movie["title"]
        row.overview = movie.get("overview")
        row.poster_path = movie.get("poster_path")
        row.backdrop_path = movie.get("backdrop_path")
        row.release_date = movie.get("release_date")
        row.vote_average = movie.get("vote_average")
        row.genre_ids = json.dumps(movie.get("genre_ids", []))
        row.popularity = movie.get("popularity")
        return row

    async def most_popular(self, limit: int = 20) -> List[CachedMovie]:
        result = await self.db.execute(
            select(CachedMovie).order_by(CachedMovie.popularity.desc()).limit(limit)
        )
        return list(result.scalars().all())
