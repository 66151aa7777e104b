"""Stream and player schemas"""

from typing import Optional

from pydantic import BaseModel


class StreamResponse(BaseModel):
    """Embed URL for one provider; url is None when it cannot serve the item"""

    url: Optional[str] = None
    provider: str
    mode: str
    id: str
    season: Optional[int] = None
    episode: Optional[int] = None


class AccessTokenResponse(BaseModel):
    """Single-use token to open the player with"""

    token: str
    player_url: str
