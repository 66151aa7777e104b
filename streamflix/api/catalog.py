"""TMDB proxy routes (listings, search, details)"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..exceptions import RetryExhausted
from ..schemas.search import MediaDetails, MediaItem, SearchResult
from ..services.log_service import log_service
from ..services.tmdb_service import TMDBService
from .dependencies import get_tmdb_service

router = APIRouter(tags=["catalog"])


def build_listing(
    data: Dict, tmdb: TMDBService, media_type: Optional[str] = None
) -> SearchResult:
    """Parse a paginated TMDB response, keeping only movies and shows"""
    items = []
    for item in data.get("results", []):
        kind = media_type or item.get("media_type")
        if kind not in ("movie", "tv"):
            continue
        items.append(MediaItem(**tmdb.parse_media_item(item, kind)))

    return SearchResult(
        results=items,
        page=data.get("page", 1),
        total_pages=data.get("total_pages", 1),
        total_results=data.get("total_results", len(items)),
    )


async def fetch_or_502(coro, what: str) -> Dict:
    try:
        return await coro
    except RetryExhausted as e:
        log_service.error(f"Upstream failure while fetching {what}: {e.last_error}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch {what}")


@router.get("/movie/popular", response_model=SearchResult)
async def popular_movies(
    page: int = Query(1, ge=1), tmdb: TMDBService = Depends(get_tmdb_service)
):
    """Get popular movies"""
    data = await fetch_or_502(tmdb.get_popular("movie", page), "popular movies")
    return build_listing(data, tmdb, "movie")


@router.get("/tv/popular", response_model=SearchResult)
async def popular_tv(
    page: int = Query(1, ge=1), tmdb: TMDBService = Depends(get_tmdb_service)
):
    """Get popular TV shows"""
    data = await fetch_or_502(tmdb.get_popular("tv", page), "popular TV shows")
    return build_listing(data, tmdb, "tv")


@router.get("/tv/airing_today", response_model=SearchResult)
async def airing_today(
    page: int = Query(1, ge=1), tmdb: TMDBService = Depends(get_tmdb_service)
):
    """Get TV shows airing today"""
    data = await fetch_or_502(tmdb.get_airing_today(page), "airing TV shows")
    return build_listing(data, tmdb, "tv")


@router.get("/search/movie", response_model=SearchResult)
async def search_movies(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    tmdb: TMDBService = Depends(get_tmdb_service),
):
    """Search for movies only"""
    data = await fetch_or_502(tmdb.search_movies(query, page), "search results")
    return build_listing(data, tmdb, "movie")


@router.get("/search/tv", response_model=SearchResult)
async def search_tv(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    tmdb: TMDBService = Depends(get_tmdb_service),
):
    """Search for TV shows only"""
    data = await fetch_or_502(tmdb.search_tv(query, page), "search results")
    return build_listing(data, tmdb, "tv")


@router.get("/search/multi", response_model=SearchResult)
async def search_multi(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    tmdb: TMDBService = Depends(get_tmdb_service),
):
    """Search for both movies and TV shows"""
    data = await fetch_or_502(tmdb.search_multi(query, page), "search results")
    return build_listing(data, tmdb)


@router.get("/movie/{tmdb_id}", response_model=MediaDetails)
async def movie_details(tmdb_id: int, tmdb: TMDBService = Depends(get_tmdb_service)):
    """Get movie details with credits"""
    data = await fetch_or_502(tmdb.get_details("movie", tmdb_id), "movie details")
    return MediaDetails(**tmdb.parse_details(data, "movie"))


@router.get("/tv/{tmdb_id}", response_model=MediaDetails)
async def tv_details(tmdb_id: int, tmdb: TMDBService = Depends(get_tmdb_service)):
    """Get TV show details with credits"""
    data = await fetch_or_502(tmdb.get_details("tv", tmdb_id), "TV details")
    return MediaDetails(**tmdb.parse_details(data, "tv"))


@router.get("/api/tmdb/{path:path}")
async def tmdb_passthrough(
    path: str, request: Request, tmdb: TMDBService = Depends(get_tmdb_service)
):
    """Forward any read-only TMDB path untouched"""
    params = {k: v for k, v in request.query_params.items() if k != "api_key"}
    return await fetch_or_502(tmdb.passthrough(path, params), path)
