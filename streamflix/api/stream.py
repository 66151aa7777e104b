"""Stream URL and provider table routes"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..exceptions import NoTemplateForMode, UnknownProvider
from ..schemas.stream import StreamResponse
from ..services.log_service import log_service
from ..services.providers import PlaybackRequest, ProviderTable
from .dependencies import get_provider_table

router = APIRouter(tags=["stream"])


@router.get("/providers")
async def list_providers(
    providers: ProviderTable = Depends(get_provider_table),
) -> Dict[str, str]:
    """Ordered provider key -> display name"""
    return providers.display_names()


@router.get("/stream", response_model=StreamResponse)
async def stream_url(
    provider: str = Query(..., min_length=1),
    id: str = Query(..., min_length=1),
    mode: str = Query("movie"),
    season: Optional[int] = Query(None, ge=1),
    episode: Optional[int] = Query(None, ge=1),
    providers: ProviderTable = Depends(get_provider_table),
):
    """
    Map a content id to the provider's embed URL.

    Unknown providers are rejected; a provider without a template for the
    mode answers with a null url, which the player treats as a failure.
    """
    if mode not in ("movie", "tv"):
        raise HTTPException(
            status_code=400, detail="Invalid content type. Must be movie or tv"
        )

    try:
        request = PlaybackRequest(content_id=id, mode=mode, season=season, episode=episode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    url = None
    try:
        url = providers.resolve(provider, request)
    except UnknownProvider as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoTemplateForMode as e:
        log_service.stream(str(e))

    log_service.stream(f"Stream URL {request.state_key} provider={provider} -> {url}")

    return StreamResponse(
        url=url,
        provider=provider,
        mode=mode,
        id=id,
        season=request.season,
        episode=request.episode,
    )
