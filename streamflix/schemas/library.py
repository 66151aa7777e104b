"""Watch history, favorites and preference schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class WatchEntryCreate(BaseModel):
    """Schema for recording an item in a list"""

    content_id: str = Field(..., min_length=1)
    mode: str = Field(..., pattern="^(movie|tv)$")
    title: Optional[str] = None
    poster: Optional[str] = None
    season: Optional[int] = Field(None, ge=1)
    episode: Optional[int] = Field(None, ge=1)


class WatchEntryResponse(BaseModel):
    """List entry response"""

    content_id: str
    mode: str
    title: Optional[str] = None
    poster: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    touched_at: datetime

    class Config:
        from_attributes = True


class FavoriteToggle(BaseModel):
    content_id: str = Field(..., min_length=1)
    mode: str = Field(..., pattern="^(movie|tv)$")
    title: Optional[str] = None
    poster: Optional[str] = None


class FavoriteToggleResponse(BaseModel):
    favorited: bool


class ThemeUpdate(BaseModel):
    theme: str = Field(..., pattern="^(dark|light)$")


class ProviderUpdate(BaseModel):
    provider: str


class PreferencesResponse(BaseModel):
    """Everything the front end restores at startup"""

    theme: str
    last_provider: Optional[str] = None
    history: List[WatchEntryResponse] = []
    favorites: List[WatchEntryResponse] = []
