"""Edge service - separate FastAPI app serving only stream URL resolution"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import stream

stream_app = FastAPI(
    title="StreamFlix Edge",
    description="Maps content ids to provider embed URLs",
    version=__version__,
)

stream_app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

stream_app.include_router(stream.router)


@stream_app.get("/health")
async def stream_health():
    """Health check endpoint"""
    return {"status": "healthy", "service": "edge"}
