"""Database models"""

from .movie import CachedMovie
from .preference import Preference
from .watch_entry import WatchEntry

__all__ = ["CachedMovie", "Preference", "WatchEntry"]
