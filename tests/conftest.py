"""Shared test fixtures for the StreamFlix test suite."""

import os
import tempfile

# Settings are read at import time; point them at throwaway locations first
_TMP = tempfile.mkdtemp(prefix="streamflix-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP}/app.db")
os.environ.setdefault("TMDB_API_KEY", "test-key")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from streamflix.database import init_db  # noqa: E402
from streamflix.services.failover import LoadSucceeded, PlaybackSurface  # noqa: E402
from streamflix.services.preference_store import PreferenceStore  # noqa: E402
from streamflix.services.providers import ProviderEntry, ProviderTable  # noqa: E402
from streamflix.services.retry import RetryPolicy  # noqa: E402

NO_WAIT = RetryPolicy(max_attempts=0, base_delay_ms=0, jitter_ms=0)


class MemoryPreferences:
    """In-memory stand-in for the durable preference store"""

    def __init__(self, last_provider=None):
        self.last_provider = last_provider
        self.writes = []
        self.watched = []

    async def get_last_provider(self):
        return self.last_provider

    async def set_last_provider(self, key):
        self.writes.append(key)
        self.last_provider = key

    async def record_watch(self, request, title=None, poster=None):
        self.watched.append((request, title, poster))


class RecordingSurface(PlaybackSurface):
    """Remembers every presented attempt; auto-loads the keys in `succeed`"""

    def __init__(self, succeed=()):
        self.succeed = set(succeed)
        self.controller = None
        self.presented = []
        self.loaded_sessions = []
        self.exhausted_sessions = []

    async def present(self, attempt):
        self.presented.append(attempt)
        if attempt.provider_key in self.succeed:
            await self.controller.dispatch(LoadSucceeded(attempt))

    async def loaded(self, session):
        self.loaded_sessions.append(session)

    async def exhausted(self, session):
        self.exhausted_sessions.append(session)

    @property
    def presented_keys(self):
        return [a.provider_key for a in self.presented]


@pytest.fixture
def abc_providers():
    """Three providers serving both movies and episodes"""
    return ProviderTable(
        [
            ProviderEntry(
                key,
                key.upper(),
                f"https://{key}.example/movie/{{id}}",
                f"https://{key}.example/tv/{{id}}/{{season}}/{{episode}}",
            )
            for key in ("a", "b", "c")
        ]
    )


@pytest.fixture
def memory_prefs():
    return MemoryPreferences()


@pytest_asyncio.fixture
async def db_session(tmp_path):
    """Fresh database with all tables created"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool
    )
    await init_db(bind=engine)
    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def store(db_session):
    return PreferenceStore(db_session, max_items=10)


def mock_http_client(handler, base_url=""):
    """httpx.AsyncClient whose requests are answered by `handler`"""
    return httpx.AsyncClient(base_url=base_url, transport=httpx.MockTransport(handler))
