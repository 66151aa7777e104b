"""Shared route dependencies"""

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..services.preference_store import PreferenceStore
from ..services.providers import DEFAULT_PROVIDERS, ProviderTable
from ..services.tmdb_service import TMDBService


async def get_tmdb_service():
    """TMDB service for one request, closed afterwards"""
    if not settings.TMDB_API_KEY:
        raise HTTPException(status_code=500, detail="TMDB API key not configured")

    tmdb = TMDBService(settings.TMDB_API_KEY)
    try:
        yield tmdb
    finally:
        await tmdb.close()


async def get_preference_store(db: AsyncSession = Depends(get_db)) -> PreferenceStore:
    return PreferenceStore(db)


def get_provider_table() -> ProviderTable:
    return DEFAULT_PROVIDERS
