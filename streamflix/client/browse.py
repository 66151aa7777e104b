"""Listing, search and detail handlers for the browsing surface.

Handlers take the current BrowseState and return the next one; nothing is
kept in module globals.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from ..exceptions import RetryExhausted
from ..services.log_service import log_service
from .api_client import StreamflixClient

POPULAR_ERROR = "Failed to load popular movies"
SEARCH_ERROR = "Search failed. Please try again."
DETAIL_ALERT = "Failed to load movie details. Please try again."


@dataclass(frozen=True)
class BrowseState:
    """What the listing surface currently shows"""

    current_page: int = 1
    total_pages: int = 1
    query: str = ""
    is_searching: bool = False
    items: List[Dict] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return not self.is_searching and self.current_page < self.total_pages

    @property
    def can_retry(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class DetailView:
    """Result of opening an item; `alert` is set when details are unavailable"""

    details: Optional[Dict] = None
    alert: Optional[str] = None


def visible(items: List[Dict]) -> List[Dict]:
    """Cards without a poster are not rendered"""
    return [item for item in items if item.get("poster_path")]


async def load_popular(client: StreamflixClient, state: BrowseState) -> BrowseState:
    """First page of popular movies"""
    try:
        data = await client.popular("movie", 1)
    except RetryExhausted as e:
        log_service.error(f"Popular listing failed: {e}")
        return replace(state, error=POPULAR_ERROR)

    return BrowseState(
        current_page=1,
        total_pages=data.get("total_pages", 1),
        items=visible(data.get("results", [])),
    )


async def load_more(client: StreamflixClient, state: BrowseState) -> BrowseState:
    """Append the next popular page, if any"""
    if not state.has_more:
        return state

    next_page = state.current_page + 1
    try:
        data = await client.popular("movie", next_page)
    except RetryExhausted as e:
        log_service.error(f"Loading page {next_page} failed: {e}")
        return replace(state, error=POPULAR_ERROR)

    return replace(
        state,
        current_page=next_page,
        total_pages=data.get("total_pages", state.total_pages),
        items=state.items + visible(data.get("results", [])),
        error=None,
    )


async def search(client: StreamflixClient, state: BrowseState, query: str) -> BrowseState:
    """Multi-type search; a blank query leaves the state untouched"""
    query = query.strip()
    if not query:
        return state

    searching = replace(state, query=query, is_searching=True, current_page=1, items=[])
    try:
        data = await client.search(query, 1)
    except RetryExhausted as e:
        log_service.error(f"Search for '{query}' failed: {e}")
        return replace(searching, error=SEARCH_ERROR)

    return replace(
        searching,
        total_pages=data.get("total_pages", 1),
        items=visible(data.get("results", [])),
        error=None,
    )


async def retry(client: StreamflixClient, state: BrowseState) -> BrowseState:
    """Re-run whatever failed last"""
    if state.is_searching:
        return await search(client, replace(state, error=None), state.query)
    if state.items:
        return await load_more(client, replace(state, error=None))
    return await load_popular(client, replace(state, error=None))


async def open_details(client: StreamflixClient, media_type: str, tmdb_id) -> DetailView:
    """Details for the modal. Exhausted retries become a blocking alert."""
    try:
        return DetailView(details=await client.details(media_type or "movie", tmdb_id))
    except RetryExhausted as e:
        log_service.error(f"Details for {media_type}:{tmdb_id} failed: {e}")
        return DetailView(alert=DETAIL_ALERT)
