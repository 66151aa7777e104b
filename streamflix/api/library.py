"""Watch history, favorites and preference routes"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..schemas.library import (
    FavoriteToggle,
    FavoriteToggleResponse,
    PreferencesResponse,
    ProviderUpdate,
    ThemeUpdate,
    WatchEntryCreate,
    WatchEntryResponse,
)
from ..services.preference_store import FAVORITES, HISTORY, PreferenceStore
from ..services.providers import ProviderTable
from .dependencies import get_preference_store, get_provider_table

router = APIRouter(prefix="/api/library", tags=["library"])


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(store: PreferenceStore = Depends(get_preference_store)):
    """Everything restored when the front end starts"""
    return PreferencesResponse(
        theme=await store.get_theme(),
        last_provider=await store.get_last_provider(),
        history=[
            WatchEntryResponse.model_validate(e) for e in await store.list_entries(HISTORY)
        ],
        favorites=[
            WatchEntryResponse.model_validate(e) for e in await store.list_entries(FAVORITES)
        ],
    )


@router.put("/theme")
async def set_theme(
    data: ThemeUpdate, store: PreferenceStore = Depends(get_preference_store)
):
    """Switch between dark and light theme"""
    await store.set_theme(data.theme)
    return {"theme": data.theme}


@router.put("/last-provider")
async def set_last_provider(
    data: ProviderUpdate,
    store: PreferenceStore = Depends(get_preference_store),
    providers: ProviderTable = Depends(get_provider_table),
):
    """Remember a provider as the starting point for the next session"""
    if data.provider not in providers:
        raise HTTPException(status_code=400, detail=f"Unknown provider '{data.provider}'")
    await store.set_last_provider(data.provider)
    return {"last_provider": data.provider}


@router.get("/history", response_model=List[WatchEntryResponse])
async def get_history(store: PreferenceStore = Depends(get_preference_store)):
    """Watch history, most recent first"""
    return await store.list_entries(HISTORY)


@router.post("/history", response_model=WatchEntryResponse)
async def add_history(
    data: WatchEntryCreate, store: PreferenceStore = Depends(get_preference_store)
):
    """Record a watched item (moves it to the front if already present)"""
    return await store.push_entry(HISTORY, **data.model_dump())


@router.delete("/history")
async def clear_history(store: PreferenceStore = Depends(get_preference_store)):
    """Forget the whole watch history"""
    removed = await store.clear(HISTORY)
    return {"removed": removed}


@router.get("/favorites", response_model=List[WatchEntryResponse])
async def get_favorites(store: PreferenceStore = Depends(get_preference_store)):
    """Favorites, most recently added first"""
    return await store.list_entries(FAVORITES)


@router.post("/favorites/toggle", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    data: FavoriteToggle, store: PreferenceStore = Depends(get_preference_store)
):
    """Add the item to favorites, or remove it if already there"""
    favorited = await store.toggle_favorite(
        data.content_id, data.mode, title=data.title, poster=data.poster
    )
    return FavoriteToggleResponse(favorited=favorited)


@router.delete("/favorites/{mode}/{content_id}")
async def remove_favorite(
    mode: str, content_id: str, store: PreferenceStore = Depends(get_preference_store)
):
    """Remove a favorite"""
    if not await store.remove_entry(FAVORITES, content_id, mode):
        raise HTTPException(status_code=404, detail="Favorite not found")
    return {"removed": True}
