"""Embed provider table and URL template resolution"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

from ..exceptions import NoTemplateForMode, UnknownProvider

MODES = ("movie", "tv")


@dataclass(frozen=True)
class PlaybackRequest:
    """What the viewer asked to watch"""

    content_id: str
    mode: str = "movie"
    season: Optional[int] = None
    episode: Optional[int] = None

    def __post_init__(self):
        if not self.content_id:
            raise ValueError("content_id is required")
        if self.mode not in MODES:
            raise ValueError(f"Invalid mode '{self.mode}'. Must be movie or tv")
        if self.mode == "tv":
            # The player starts a series at S1E1 unless told otherwise
            if self.season is None:
                object.__setattr__(self, "season", 1)
            if self.episode is None:
                object.__setattr__(self, "episode", 1)
            if self.season < 1 or self.episode < 1:
                raise ValueError("season and episode must be >= 1")

    @property
    def state_key(self) -> str:
        """Identity of the item, e.g. movie:550 or tv:1234:1:5"""
        if self.mode == "movie":
            return f"movie:{self.content_id}"
        return f"tv:{self.content_id}:{self.season}:{self.episode}"

    def with_episode(self, episode: int) -> "PlaybackRequest":
        return PlaybackRequest(self.content_id, self.mode, self.season, episode)


@dataclass(frozen=True)
class ProviderEntry:
    """A third-party embed player reached through templated URLs"""

    key: str
    display_name: str
    movie_template: Optional[str] = None
    tv_template: Optional[str] = None

    def template_for(self, mode: str) -> Optional[str]:
        return self.movie_template if mode == "movie" else self.tv_template


def resolve_embed_url(provider: ProviderEntry, request: PlaybackRequest) -> str:
    """
    Substitute {id}, {season} and {episode} into the provider's template
    for the request's mode. Pure; nothing is fetched.

    Raises NoTemplateForMode when the provider cannot serve the mode.
    """
    template = provider.template_for(request.mode)
    if not template:
        raise NoTemplateForMode(provider.key, request.mode)

    url = template.replace("{id}", str(request.content_id))
    if request.mode == "tv":
        url = url.replace("{season}", str(request.season))
        url = url.replace("{episode}", str(request.episode))
    return url


class ProviderTable:
    """Ordered, validated provider mapping. Order is fallback priority."""

    def __init__(self, entries: Sequence[ProviderEntry]):
        self._entries: Dict[str, ProviderEntry] = {}
        for entry in entries:
            if entry.key in self._entries:
                raise ValueError(f"Duplicate provider key '{entry.key}'")
            if not (entry.movie_template or entry.tv_template):
                raise ValueError(f"Provider '{entry.key}' has no templates")
            self._entries[entry.key] = entry
        if not self._entries:
            raise ValueError("Provider table is empty")

    def __iter__(self) -> Iterator[ProviderEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> List[str]:
        return list(self._entries)

    def get(self, key: str) -> ProviderEntry:
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownProvider(key) from None

    def index_of(self, key: Optional[str]) -> Optional[int]:
        if key not in self._entries:
            return None
        return self.keys().index(key)

    def display_names(self) -> Dict[str, str]:
        """Ordered {key: display_name} for the provider picker"""
        return {entry.key: entry.display_name for entry in self}

    def resolve(self, key: str, request: PlaybackRequest) -> str:
        return resolve_embed_url(self.get(key), request)


# No-ads providers first, ad-supported ones last
DEFAULT_PROVIDERS = ProviderTable(
    [
        ProviderEntry(
            "vidsrc",
            "Vidsrc",
            "https://vidsrc.cc/v2/embed/movie/{id}",
            "https://vidsrc.cc/v2/embed/tv/{id}/{season}/{episode}",
        ),
        ProviderEntry(
            "vidsrc.to",
            "Vidsrc.to",
            "https://vidsrc.to/embed/movie/{id}",
            "https://vidsrc.to/embed/tv/{id}/{season}/{episode}",
        ),
        ProviderEntry(
            "vidlink",
            "VidLink",
            "https://vidlink.pro/movie/{id}",
            "https://vidlink.pro/tv/{id}/{season}/{episode}",
        ),
        ProviderEntry(
            "vidplus.to",
            "VidPlus",
            "https://player.vidplus.to/embed/movie/{id}",
            "https://player.vidplus.to/embed/tv/{id}/{season}/{episode}",
        ),
        ProviderEntry(
            "vixsrc.to",
            "VixSrc",
            "https://vixsrc.to/movie/{id}/",
            "https://vixsrc.to/tv/{id}/{season}/{episode}/",
        ),
        ProviderEntry(
            "111movies",
            "111Movies",
            "https://111movies.com/movie/{id}",
            "https://111movies.com/tv/{id}/{season}/{episode}",
        ),
        ProviderEntry(
            "autoembed.pro",
            "AutoEmbed",
            "https://autoembed.pro/embed/movie/{id}",
            "https://autoembed.pro/embed/tv/{id}&season={season}&episode={episode}",
        ),
        ProviderEntry(
            "moviemaze.cc",
            "MovieMaze",
            "https://moviemaze.cc/watch/movie/{id}",
            "https://moviemaze.cc/watch/tv/{id}?ep={episode}&season={season}",
        ),
        ProviderEntry(
            "videasy",
            "VideoEasy",
            "https://player.videasy.net/movie/{id}",
            "https://player.videasy.net/tv/{id}/{season}/{episode}",
        ),
        ProviderEntry(
            "vidfast",
            "Vidfast",
            "https://vidfast.pro/movie/{id}",
            "https://vidfast.pro/tv/{id}/{season}/{episode}",
        ),
        ProviderEntry(
            "vidking.net",
            "VidKing",
            "https://www.vidking.net/embed/movie/{id}",
            "https://www.vidking.net/embed/tv/{id}/{season}/{episode}",
        ),
        ProviderEntry(
            "vidora.su",
            "Vidora",
            "https://vidora.su/movie/{id}",
            "https://vidora.su/tv/{id}/{season}/{episode}",
        ),
    ]
)
