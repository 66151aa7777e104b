"""Player session: wires the failover controller to a playback frame"""

from typing import Callable, Dict, Optional

from ..exceptions import RetryExhausted
from ..services.failover import (
    FailoverController,
    FailoverSession,
    LoadFailed,
    LoadSucceeded,
    PlaybackSurface,
    ProviderAttempt,
    SessionStatus,
)
from ..services.log_service import log_service
from ..services.providers import PlaybackRequest, ProviderTable

ALL_FAILED_MESSAGE = "All providers failed to load. Please try again later."


def autoplay_delay(runtime_minutes: Optional[float]) -> Optional[float]:
    """
    Seconds into an episode at which to offer the next one.

    Long episodes get the prompt 90 seconds before the end, short ones at
    85% of the runtime. Runtimes of two minutes or less get no autoplay.
    """
    if not runtime_minutes or runtime_minutes <= 2:
        return None
    runtime_seconds = runtime_minutes * 60
    if runtime_seconds > 300:
        return runtime_seconds - 90
    return runtime_seconds * 0.85


def format_title(details: Optional[Dict], request: PlaybackRequest) -> str:
    """Title bar text, e.g. Title (Year) or Title (Year) - S1E2"""
    suffix = f" - S{request.season}E{request.episode}" if request.mode == "tv" else ""

    if not details:
        label = "Movie" if request.mode == "movie" else "TV Show"
        return f"{label}: {request.content_id}{suffix}"

    if request.mode == "movie":
        title = details.get("title", "")
        date = details.get("release_date") or ""
    else:
        title = details.get("title") or details.get("name", "")
        date = details.get("first_air_date") or details.get("release_date") or ""

    year = date[:4]
    return f"{title}{f' ({year})' if year else ''}{suffix}"


class PlayerSession(PlaybackSurface):
    """
    One open player. The frame callback receives every ProviderAttempt to
    render; the embedding code hands that same attempt back to frame_loaded()
    or frame_failed(), so signals from a superseded frame are dropped.
    """

    def __init__(
        self,
        client,
        preferences,
        providers: ProviderTable,
        on_frame: Optional[Callable[[ProviderAttempt], None]] = None,
        load_timeout: Optional[float] = None,
    ):
        self.client = client
        self.preferences = preferences
        self.on_frame = on_frame
        self.controller = FailoverController(
            providers,
            surface=self,
            preferences=preferences,
            resolver=client.stream_url,
            load_timeout=load_timeout,
        )
        self.request: Optional[PlaybackRequest] = None
        self.title: Optional[str] = None
        self.details: Optional[Dict] = None
        self.frame_url: Optional[str] = None
        self.error: Optional[str] = None

    @property
    def session(self) -> Optional[FailoverSession]:
        return self.controller.session

    @property
    def autoplay_after(self) -> Optional[float]:
        if self.request is None or self.request.mode != "tv" or not self.details:
            return None
        return autoplay_delay(self.details.get("runtime"))

    async def open(self, request: PlaybackRequest) -> FailoverSession:
        """Fetch metadata for the title bar, then start provider failover"""
        self.request = request
        self.error = None
        await self._refresh_details()
        return await self.controller.start(request)

    async def _refresh_details(self):
        try:
            self.details = await self.client.details(
                self.request.mode, self.request.content_id
            )
        except RetryExhausted as e:
            # The title bar falls back to the bare id; playback goes ahead
            log_service.warning(f"Player details for {self.request.state_key}: {e}")
            self.details = None
        self.title = format_title(self.details, self.request)

    # --- Frame signals ---

    async def frame_loaded(self, attempt: ProviderAttempt) -> bool:
        """The frame rendering `attempt` finished loading"""
        return await self.controller.dispatch(LoadSucceeded(attempt))

    async def frame_failed(self, attempt: ProviderAttempt, reason: str = "frame error") -> bool:
        return await self.controller.dispatch(LoadFailed(attempt, reason))

    @property
    def current_attempt(self) -> Optional[ProviderAttempt]:
        session = self.session
        return session.active_attempt if session else None

    # --- Viewer actions ---

    async def select_provider(self, key: str) -> FailoverSession:
        self.error = None
        return await self.controller.select_provider(key)

    async def retry(self) -> FailoverSession:
        self.error = None
        return await self.controller.restart()

    async def next_episode(self) -> FailoverSession:
        return await self._change_episode(self._require_tv().episode + 1)

    async def previous_episode(self) -> Optional[FailoverSession]:
        request = self._require_tv()
        if request.episode <= 1:
            return None
        return await self._change_episode(request.episode - 1)

    async def _change_episode(self, episode: int) -> FailoverSession:
        self.request = self.request.with_episode(episode)
        self.error = None
        await self._refresh_details()
        return await self.controller.change_episode(episode)

    def _require_tv(self) -> PlaybackRequest:
        if self.request is None or self.request.mode != "tv":
            raise ValueError("Episode navigation is only available for tv")
        return self.request

    def close(self):
        self.controller.close()
        self.frame_url = None

    # --- PlaybackSurface hooks ---

    async def present(self, attempt: ProviderAttempt):
        self.frame_url = attempt.url
        if self.on_frame:
            self.on_frame(attempt)

    async def loaded(self, session: FailoverSession):
        poster = self.details.get("poster_path") if self.details else None
        await self.preferences.record_watch(session.request, title=self.title, poster=poster)

    async def exhausted(self, session: FailoverSession):
        self.frame_url = None
        self.error = ALL_FAILED_MESSAGE

    @property
    def is_playing(self) -> bool:
        session = self.session
        return session is not None and session.status == SessionStatus.LOADED
