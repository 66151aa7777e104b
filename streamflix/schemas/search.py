"""Search and discovery schemas"""

from typing import List, Optional

from pydantic import BaseModel


class MediaItem(BaseModel):
    """Media item from TMDB"""

    tmdb_id: int
    media_type: str  # 'movie' or 'tv'
    title: str
    year: Optional[int] = None
    release_date: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    genre_ids: List[int] = []


class SearchResult(BaseModel):
    """Paginated listing"""

    results: List[MediaItem]
    page: int
    total_pages: int
    total_results: int


class MediaDetails(MediaItem):
    """Detail-with-credits view of a movie or show"""

    genres: List[str] = []
    language: Optional[str] = None
    director: Optional[str] = None
    trailer_url: Optional[str] = None
    runtime: Optional[int] = None
    imdb_id: Optional[str] = None
