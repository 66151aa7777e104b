"""TMDB API service"""

from typing import Dict, Optional

import httpx

from ..config import settings
from ..exceptions import NetworkError
from .log_service import log_service
from .retry import RetryPolicy, retry_async


class TMDBService:
    """The Movie Database API integration"""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or settings.TMDB_BASE_URL).rstrip("/")
        self.image_base_url = f"{settings.TMDB_IMAGE_BASE_URL}/w500"
        self.client = client or httpx.AsyncClient(timeout=30.0)
        self.retry_policy = retry_policy or RetryPolicy.from_settings()

    async def _request_once(self, endpoint: str, params: Dict) -> Dict:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"TMDB returned {e.response.status_code} for {endpoint}",
                e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"TMDB request failed for {endpoint}: {e}") from e
        except ValueError as e:
            raise NetworkError(f"TMDB returned invalid JSON for {endpoint}") from e

    async def _request(self, endpoint: str, params: Dict = None) -> Dict:
        """Make request to TMDB API, retrying transient failures"""
        params = dict(params or {})
        params["api_key"] = self.api_key

        return await retry_async(
            lambda: self._request_once(endpoint, params),
            self.retry_policy,
            description=f"TMDB {endpoint}",
        )

    async def get_popular(self, media_type: str, page: int = 1) -> Dict:
        """Get popular content (media_type: 'movie' or 'tv')"""
        return await self._request(f"{media_type}/popular", {"page": page})

    async def get_airing_today(self, page: int = 1) -> Dict:
        """Get TV episodes airing today"""
        return await self._request("tv/airing_today", {"page": page})

    async def search_movies(self, query: str, page: int = 1) -> Dict:
        """Search for movies"""
        return await self._request("search/movie", {"query": query, "page": page})

    async def search_tv(self, query: str, page: int = 1) -> Dict:
        """Search for TV shows"""
        return await self._request("search/tv", {"query": query, "page": page})

    async def search_multi(self, query: str, page: int = 1) -> Dict:
        """Search for both movies and TV shows"""
        return await self._request("search/multi", {"query": query, "page": page})

    async def get_details(self, media_type: str, tmdb_id: int) -> Dict:
        """Get movie or TV details with credits"""
        return await self._request(
            f"{media_type}/{tmdb_id}",
            {"append_to_response": "credits,videos,external_ids"},
        )

    async def passthrough(self, path: str, params: Dict = None) -> Dict:
        """Forward an arbitrary read-only TMDB path"""
        return await self._request(path, params)

    def parse_media_item(self, item: Dict, media_type: str = None) -> Dict:
        """Parse TMDB item into standardized format"""
        if media_type is None:
            media_type = item.get("media_type", "movie")

        # Handle both movie and TV naming
        if media_type == "movie":
            title = item.get("title", "")
            release_date = item.get("release_date", "")
        else:
            title = item.get("name", "")
            release_date = item.get("first_air_date", "")

        year = None
        if release_date:
            try:
                year = int(release_date.split("-")[0])
            except (ValueError, IndexError):
                pass

        return {
            "tmdb_id": item.get("id"),
            "media_type": media_type,
            "title": title,
            "year": year,
            "release_date": release_date,
            "poster_path": item.get("poster_path"),
            "backdrop_path": item.get("backdrop_path"),
            "overview": item.get("overview", ""),
            "vote_average": item.get("vote_average", 0),
            "genre_ids": item.get("genre_ids", []),
        }

    def parse_details(self, data: Dict, media_type: str) -> Dict:
        """Parse detail-with-credits response for the detail view"""
        parsed = self.parse_media_item(data, media_type)

        crew = (data.get("credits") or {}).get("crew", [])
        director = next((p.get("name") for p in crew if p.get("job") == "Director"), None)

        videos = (data.get("videos") or {}).get("results", [])
        trailer = next(
            (
                v.get("key")
                for v in videos
                if v.get("type") == "Trailer" and v.get("site") == "YouTube"
            ),
            None,
        )

        runtimes = data.get("episode_run_time") or []
        language = data.get("original_language")

        parsed.update(
            {
                "genres": [g.get("name") for g in data.get("genres", [])],
                "language": language.upper() if language else None,
                "director": director,
                "trailer_url": f"https://www.youtube.com/embed/{trailer}" if trailer else None,
                "runtime": data.get("runtime") or (runtimes[0] if runtimes else None),
                "imdb_id": (data.get("external_ids") or {}).get("imdb_id"),
            }
        )
        return parsed

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()
