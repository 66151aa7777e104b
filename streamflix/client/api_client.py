"""HTTP client for the StreamFlix API.

Every content fetch goes through the retry wrapper. Stream URL lookups do
not: a provider that cannot answer is simply skipped by the failover
controller.
"""

from typing import Any, Dict, Optional

import httpx

from ..exceptions import NetworkError, RetryExhausted
from ..services.log_service import log_service
from ..services.providers import PlaybackRequest
from ..services.retry import RetryPolicy, retry_async

DEFAULT_TIMEOUT = 15.0


class StreamflixClient:
    """Async client for the catalog, stream and library endpoints.

    Usage:
        client = StreamflixClient("http://localhost:8787")
        page = await client.popular("movie")
        url = await client.stream_url("vidsrc", PlaybackRequest("550"))
    """

    def __init__(
        self,
        base_url: str,
        retry_policy: Optional[RetryPolicy] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=DEFAULT_TIMEOUT
        )

    async def close(self):
        await self._client.aclose()

    async def _send(self, method: str, path: str, **kwargs) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except httpx.TimeoutException:
            raise NetworkError(f"Request to {path} timed out")
        except httpx.HTTPStatusError as e:
            raise NetworkError(str(e), e.response.status_code)
        except httpx.HTTPError as e:
            raise NetworkError(f"Cannot reach {self.base_url}: {e}")
        except ValueError:
            raise NetworkError(f"Invalid JSON from {path}")

    async def _get(self, path: str, params: Optional[Dict] = None) -> Any:
        return await retry_async(
            lambda: self._send("GET", path, params=params),
            self.retry_policy,
            description=f"GET {path}",
        )

    # --- Catalog ---

    async def popular(self, media_type: str = "movie", page: int = 1) -> Dict:
        return await self._get(f"/{media_type}/popular", {"page": page})

    async def airing_today(self, page: int = 1) -> Dict:
        return await self._get("/tv/airing_today", {"page": page})

    async def search(self, query: str, page: int = 1, kind: str = "multi") -> Dict:
        return await self._get(f"/search/{kind}", {"query": query, "page": page})

    async def details(self, media_type: str, tmdb_id) -> Dict:
        return await self._get(f"/{media_type}/{tmdb_id}")

    # --- Streams ---

    async def providers(self) -> Dict[str, str]:
        return await self._get("/providers")

    async def stream_url(self, provider_key: str, request: PlaybackRequest) -> Optional[str]:
        """Ask the edge for an embed URL; None means the provider can't serve it"""
        params = {"provider": provider_key, "id": request.content_id, "mode": request.mode}
        if request.mode == "tv":
            params["season"] = request.season
            params["episode"] = request.episode
        data = await self._send("GET", "/stream", params=params)
        return data.get("url")

    async def issue_player_token(self, request: PlaybackRequest) -> Dict:
        params = {"id": request.content_id, "mode": request.mode}
        if request.mode == "tv":
            params["season"] = request.season
            params["episode"] = request.episode
        return await self._send("POST", "/api/player/token", params=params)


class RemotePreferences:
    """Preference store backed by the /api/library endpoints.

    Preferences are a convenience: failures are logged and playback goes on.
    """

    def __init__(self, client: StreamflixClient):
        self.client = client

    async def get_last_provider(self) -> Optional[str]:
        try:
            data = await self.client._get("/api/library/preferences")
        except RetryExhausted as e:
            log_service.warning(f"Could not read last provider: {e}")
            return None
        return data.get("last_provider")

    async def set_last_provider(self, provider_key: str):
        try:
            await self.client._send(
                "PUT", "/api/library/last-provider", json={"provider": provider_key}
            )
        except NetworkError as e:
            log_service.warning(f"Could not save last provider '{provider_key}': {e}")

    async def record_watch(self, request: PlaybackRequest, title=None, poster=None):
        payload = {"content_id": request.content_id, "mode": request.mode}
        if title:
            payload["title"] = title
        if poster:
            payload["poster"] = poster
        if request.mode == "tv":
            payload["season"] = request.season
            payload["episode"] = request.episode
        try:
            return await self.client._send("POST", "/api/library/history", json=payload)
        except NetworkError as e:
            log_service.warning(f"Could not record {request.state_key} in history: {e}")
            return None
