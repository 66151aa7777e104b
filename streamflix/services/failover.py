"""Provider failover for playback sessions"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

from ..config import settings
from ..exceptions import (
    AllProvidersExhausted,
    NetworkError,
    NoTemplateForMode,
    RetryExhausted,
    UnknownProvider,
)
from .log_service import log_service
from .providers import PlaybackRequest, ProviderTable

UrlResolver = Callable[[str, PlaybackRequest], Awaitable[Optional[str]]]


class SessionStatus(str, Enum):
    PENDING = "pending"
    ATTEMPTING = "attempting"
    LOADED = "loaded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class ProviderAttempt:
    """One provider handed to the playback surface.

    Load signals must echo the attempt back so that signals for a
    superseded attempt can be recognised and dropped.
    """

    generation: int
    attempt_id: int
    index: int
    provider_key: str
    url: str


@dataclass
class FailoverSession:
    """Lifetime of one watch attempt for one content item"""

    request: PlaybackRequest
    provider_order: Tuple[str, ...]
    generation: int
    current_index: int = 0
    status: SessionStatus = SessionStatus.PENDING
    active_attempt: Optional[ProviderAttempt] = None
    attempted: List[str] = field(default_factory=list)
    error: Optional[AllProvidersExhausted] = None

    @property
    def current_provider(self) -> str:
        return self.provider_order[self.current_index]

    def owns(self, attempt: ProviderAttempt) -> bool:
        active = self.active_attempt
        return (
            self.status == SessionStatus.ATTEMPTING
            and active is not None
            and active.generation == attempt.generation
            and active.attempt_id == attempt.attempt_id
        )


@dataclass(frozen=True)
class LoadSucceeded:
    attempt: ProviderAttempt


@dataclass(frozen=True)
class LoadFailed:
    attempt: ProviderAttempt
    reason: str = "load error"


@dataclass(frozen=True)
class LoadTimedOut:
    attempt: ProviderAttempt


class PlaybackSurface:
    """Where embed URLs get rendered. Override the hooks you need."""

    async def present(self, attempt: ProviderAttempt):
        """Start loading `attempt.url`; report back via controller.dispatch()"""

    async def loaded(self, session: FailoverSession):
        pass

    async def exhausted(self, session: FailoverSession):
        pass


class FailoverController:
    """
    Try providers one at a time until one loads.

    Start at the last provider that loaded successfully (or the first in the
    table), present its embed URL and wait for a load signal. An error
    signal, a missing URL or the load timeout moves on to the next provider;
    running off the end of the table exhausts the session. Only one provider
    is ever in flight.
    """

    def __init__(
        self,
        providers: ProviderTable,
        surface: PlaybackSurface,
        preferences,
        resolver: Optional[UrlResolver] = None,
        load_timeout: Optional[float] = None,
    ):
        self.providers = providers
        self.surface = surface
        self.preferences = preferences
        self.resolver = resolver or self._resolve_locally
        self.load_timeout = (
            settings.LOAD_TIMEOUT_SECONDS if load_timeout is None else load_timeout
        )
        self.session: Optional[FailoverSession] = None
        self._generation = 0
        self._attempt_counter = 0
        self._timer: Optional[asyncio.Task] = None

    async def _resolve_locally(self, key: str, request: PlaybackRequest) -> str:
        return self.providers.resolve(key, request)

    # --- Session lifecycle ---

    async def start(
        self, request: PlaybackRequest, start_key: Optional[str] = None
    ) -> FailoverSession:
        """Open a new session, superseding any current one"""
        self._cancel_timer()

        if start_key is None:
            start_key = await self.preferences.get_last_provider()
        index = self.providers.index_of(start_key)
        if index is None:
            index = 0

        session = FailoverSession(
            request=request,
            provider_order=tuple(self.providers.keys()),
            generation=self._next_generation(),
            current_index=index,
        )
        self.session = session
        log_service.stream(
            f"Session started at '{session.current_provider}'", session=session
        )

        await self._attempt_from(session, index)
        return session

    async def restart(self) -> FailoverSession:
        """Try the whole provider order again from the top"""
        session = self._require_session()
        return await self.start(session.request, start_key=self.providers.keys()[0])

    async def change_episode(self, episode: int) -> FailoverSession:
        """New session for another episode, starting at the last good provider"""
        session = self._require_session()
        if session.request.mode != "tv":
            raise ValueError("Episode navigation requires a tv session")
        return await self.start(session.request.with_episode(episode))

    async def select_provider(self, key: str) -> FailoverSession:
        """Manual override: jump straight to `key`, dropping the in-flight attempt"""
        session = self._require_session()
        index = self.providers.index_of(key)
        if index is None:
            raise UnknownProvider(key, session.request.mode)

        self._cancel_timer()
        session.generation = self._next_generation()
        session.active_attempt = None
        session.error = None
        log_service.stream(f"Provider '{key}' selected manually", session=session)

        await self._attempt_from(session, index)
        return session

    def close(self):
        """Viewer navigated away; late signals become no-ops"""
        self._cancel_timer()
        if self.session is not None:
            log_service.stream("Session closed", session=self.session)
        self.session = None

    # --- Signals ---

    async def dispatch(self, event) -> bool:
        """Feed a load signal in. Returns False if it was stale and ignored."""
        session = self.session
        if session is None or not session.owns(event.attempt):
            log_service.stream(
                f"Ignoring stale {type(event).__name__} for "
                f"'{event.attempt.provider_key}' (generation {event.attempt.generation})"
            )
            return False

        if isinstance(event, LoadSucceeded):
            await self._mark_loaded(session)
        elif isinstance(event, LoadTimedOut):
            await self._advance(session, "timed out")
        else:
            await self._advance(session, event.reason)
        return True

    # --- Internals ---

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _require_session(self) -> FailoverSession:
        if self.session is None:
            raise RuntimeError("No active playback session")
        return self.session

    async def _attempt_from(self, session: FailoverSession, index: int):
        generation = session.generation

        while index < len(session.provider_order):
            key = session.provider_order[index]
            session.current_index = index
            session.status = SessionStatus.ATTEMPTING
            session.active_attempt = None
            session.attempted.append(key)

            url = None
            try:
                url = await self.resolver(key, session.request)
            except NoTemplateForMode as e:
                log_service.stream(f"Skipping '{key}': {e}", session=session)
            except (NetworkError, RetryExhausted) as e:
                log_service.warning(
                    f"Could not get stream URL for '{key}': {e}", session=session
                )

            # Superseded (manual switch, new session, close) while resolving
            if self.session is not session or session.generation != generation:
                return

            if url:
                self._attempt_counter += 1
                attempt = ProviderAttempt(
                    generation=generation,
                    attempt_id=self._attempt_counter,
                    index=index,
                    provider_key=key,
                    url=url,
                )
                session.active_attempt = attempt
                self._start_timer(attempt)
                log_service.stream(f"Loading '{key}': {url}", session=session)
                await self.surface.present(attempt)
                return

            log_service.warning(f"Provider '{key}' returned no stream URL", session=session)
            index += 1

        await self._mark_exhausted(session)

    async def _advance(self, session: FailoverSession, reason: str):
        self._cancel_timer()
        failed = session.active_attempt
        session.active_attempt = None
        log_service.warning(
            f"Provider '{failed.provider_key}' failed to load ({reason})", session=session
        )
        await self._attempt_from(session, session.current_index + 1)

    async def _mark_loaded(self, session: FailoverSession):
        self._cancel_timer()
        session.status = SessionStatus.LOADED
        key = session.current_provider
        log_service.stream(f"Provider '{key}' loaded", session=session)
        await self.preferences.set_last_provider(key)
        await self.surface.loaded(session)

    async def _mark_exhausted(self, session: FailoverSession):
        self._cancel_timer()
        session.status = SessionStatus.EXHAUSTED
        session.active_attempt = None
        session.error = AllProvidersExhausted(list(session.attempted))
        log_service.error(str(session.error), session=session)
        await self.surface.exhausted(session)

    def _start_timer(self, attempt: ProviderAttempt):
        self._cancel_timer()
        self._timer = asyncio.create_task(self._watchdog(attempt))

    def _cancel_timer(self):
        timer, self._timer = self._timer, None
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()

    async def _watchdog(self, attempt: ProviderAttempt):
        await asyncio.sleep(self.load_timeout)
        session = self.session
        try:
            await self.dispatch(LoadTimedOut(attempt))
        except Exception as e:
            # Nobody awaits this task, so the session is settled here
            log_service.error(
                f"Failover after timeout of '{attempt.provider_key}' failed: {e}",
                session=session,
            )
            if (
                session is not None
                and self.session is session
                and session.status == SessionStatus.ATTEMPTING
                and session.active_attempt is None
            ):
                await self._mark_exhausted(session)
