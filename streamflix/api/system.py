"""System API routes (health, logs)"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from .. import __version__
from ..services.log_service import LogService, log_service

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy", "version": __version__}


@router.get("/logs")
async def get_logs(
    log_type: str = Query("error"),
    limit: int = Query(100, ge=1, le=1000),
    contains: Optional[str] = Query(None, description="Session tag or item key"),
):
    """Tail one of the log channels"""
    if log_type not in LogService.CHANNELS:
        raise HTTPException(status_code=400, detail=f"Unknown log type '{log_type}'")
    return {"log_type": log_type, "lines": log_service.get_logs(log_type, limit, contains)}
