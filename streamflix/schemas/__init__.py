"""Pydantic schemas for validation"""

from .library import (
    FavoriteToggle,
    FavoriteToggleResponse,
    PreferencesResponse,
    ProviderUpdate,
    ThemeUpdate,
    WatchEntryCreate,
    WatchEntryResponse,
)
from .search import MediaDetails, MediaItem, SearchResult
from .stream import AccessTokenResponse, StreamResponse

__all__ = [
    "FavoriteToggle",
    "FavoriteToggleResponse",
    "PreferencesResponse",
    "ProviderUpdate",
    "ThemeUpdate",
    "WatchEntryCreate",
    "WatchEntryResponse",
    "MediaDetails",
    "MediaItem",
    "SearchResult",
    "AccessTokenResponse",
    "StreamResponse",
]
