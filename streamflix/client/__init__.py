"""Front-end logic: API client, browsing handlers and player session"""

from .api_client import RemotePreferences, StreamflixClient
from .browse import BrowseState, DetailView
from .player import PlayerSession

__all__ = [
    "RemotePreferences",
    "StreamflixClient",
    "BrowseState",
    "DetailView",
    "PlayerSession",
]
