"""Durable client preferences: last provider, theme, history, favorites"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models.preference import Preference
from ..models.watch_entry import WatchEntry

LAST_PROVIDER_KEY = "last_provider"
THEME_KEY = "theme"
THEMES = ("dark", "light")

HISTORY = "history"
FAVORITES = "favorites"


class PreferenceStore:
    """String key-value preferences and bounded most-recent-first lists"""

    def __init__(self, db: AsyncSession, max_items: Optional[int] = None):
        self.db = db
        self.max_items = max_items or settings.MAX_HISTORY_ITEMS
        self._cache: Dict[str, Any] = {}

    # --- Key-value preferences ---

    async def get(self, key: str, default: Any = None) -> Any:
        """Get preference value"""
        if key in self._cache:
            return self._cache[key]

        result = await self.db.execute(select(Preference).where(Preference.key == key))
        pref = result.scalar_one_or_none()
        if not pref:
            return default

        try:
            value = json.loads(pref.value) if pref.value else default
        except json.JSONDecodeError:
            value = pref.value or default

        self._cache[key] = value
        return value

    async def set(self, key: str, value: Any):
        """Set preference value (last write wins)"""
        json_value = json.dumps(value)

        result = await self.db.execute(select(Preference).where(Preference.key == key))
        pref = result.scalar_one_or_none()

        if pref:
            pref.value = json_value
        else:
            self.db.add(Preference(key=key, value=json_value))

        await self.db.commit()
        self._cache[key] = value

    async def get_last_provider(self) -> Optional[str]:
        return await self.get(LAST_PROVIDER_KEY)

    async def set_last_provider(self, provider_key: str):
        await self.set(LAST_PROVIDER_KEY, provider_key)

    async def get_theme(self) -> str:
        theme = await self.get(THEME_KEY)
        return theme if theme in THEMES else settings.DEFAULT_THEME

    async def set_theme(self, theme: str):
        if theme not in THEMES:
            raise ValueError(f"Unknown theme '{theme}'")
        await self.set(THEME_KEY, theme)

    # --- Bounded lists ---

    async def list_entries(self, list_name: str) -> List[WatchEntry]:
        """Entries of a list, most recent first"""
        result = await self.db.execute(
            select(WatchEntry)
            .where(WatchEntry.list_name == list_name)
            .order_by(WatchEntry.seq.desc())
        )
        return list(result.scalars().all())

    async def find_entry(
        self, list_name: str, content_id: str, mode: str
    ) -> Optional[WatchEntry]:
        result = await self.db.execute(
            select(WatchEntry).where(
                WatchEntry.list_name == list_name,
                WatchEntry.content_id == str(content_id),
                WatchEntry.mode == mode,
            )
        )
        return result.scalar_one_or_none()

    async def push_entry(
        self,
        list_name: str,
        content_id: str,
        mode: str,
        title: Optional[str] = None,
        poster: Optional[str] = None,
        season: Optional[int] = None,
        episode: Optional[int] = None,
    ) -> WatchEntry:
        """
        Move (content_id, mode) to the front of the list, inserting it if
        new, then drop the oldest entries beyond max_items.
        """
        top = await self.db.execute(
            select(func.max(WatchEntry.seq)).where(WatchEntry.list_name == list_name)
        )
        next_seq = (top.scalar() or 0) + 1
        now = datetime.now(timezone.utc)

        entry = await self.find_entry(list_name, content_id, mode)
        if entry is None:
            entry = WatchEntry(
                list_name=list_name, content_id=str(content_id), mode=mode
            )
            self.db.add(entry)

        entry.seq = next_seq
        entry.touched_at = now
        if title is not None:
            entry.title = title
        if poster is not None:
            entry.poster = poster
        entry.season = season
        entry.episode = episode

        await self.db.flush()
        await self._trim(list_name)
        await self.db.commit()
        return entry

    async def remove_entry(self, list_name: str, content_id: str, mode: str) -> bool:
        entry = await self.find_entry(list_name, content_id, mode)
        if entry is None:
            return False
        await self.db.delete(entry)
        await self.db.commit()
        return True

    async def clear(self, list_name: str) -> int:
        result = await self.db.execute(
            delete(WatchEntry).where(WatchEntry.list_name == list_name)
        )
        await self.db.commit()
        return result.rowcount

    async def _trim(self, list_name: str):
        keep = (
            select(WatchEntry.id)
            .where(WatchEntry.list_name == list_name)
            .order_by(WatchEntry.seq.desc())
            .limit(self.max_items)
        )
        await self.db.execute(
            delete(WatchEntry)
            .where(WatchEntry.list_name == list_name)
            .where(WatchEntry.id.not_in(keep))
            .execution_options(synchronize_session=False)
        )

    async def record_watch(self, request, title: Optional[str] = None, poster=None):
        """Remember a successfully started playback in the watch history"""
        return await self.push_entry(
            HISTORY,
            request.content_id,
            request.mode,
            title=title,
            poster=poster,
            season=request.season,
            episode=request.episode,
        )

    async def toggle_favorite(
        self, content_id: str, mode: str, title: Optional[str] = None, poster=None
    ) -> bool:
        """Add or remove a favorite. Returns True when it is now a favorite."""
        if await self.remove_entry(FAVORITES, content_id, mode):
            return False
        await self.push_entry(FAVORITES, content_id, mode, title=title, poster=poster)
        return True

    async def is_favorite(self, content_id: str, mode: str) -> bool:
        return await self.find_entry(FAVORITES, content_id, mode) is not None
