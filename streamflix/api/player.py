"""Player access routes"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, HTTPException, Query

from ..schemas.stream import AccessTokenResponse
from ..services.access_service import access_service

router = APIRouter(prefix="/api/player", tags=["player"])


@router.post("/token", response_model=AccessTokenResponse)
async def issue_token(
    id: str = Query(..., min_length=1),
    mode: str = Query("movie"),
    season: Optional[int] = Query(None, ge=1),
    episode: Optional[int] = Query(None, ge=1),
):
    """Mint a single-use token and the player URL that carries it"""
    if mode not in ("movie", "tv"):
        raise HTTPException(status_code=400, detail="Invalid mode. Must be movie or tv")

    token = access_service.issue()
    params = {"id": id, "mode": mode}
    if season is not None:
        params["season"] = season
    if episode is not None:
        params["episode"] = episode
    params["token"] = token

    return AccessTokenResponse(token=token, player_url=f"/player?{urlencode(params)}")
