"""Main FastAPI application"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from . import __version__
from .api import catalog, library, player, stream, system
from .config import settings
from .database import engine, init_db
from .exceptions import AccessDenied
from .services.access_service import access_service
from .services.providers import DEFAULT_PROVIDERS
from .services.scheduler_service import scheduler_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    await init_db()
    await scheduler_service.start()
    try:
        yield
    except asyncio.CancelledError:
        pass  # Suppress CancelledError during shutdown
    finally:
        await scheduler_service.stop()
        await engine.dispose()


app = FastAPI(
    title="StreamFlix",
    description="Movie and TV discovery with streaming provider failover",
    version=__version__,
    lifespan=lifespan,
)

# If ALLOWED_ORIGINS is not set, default to ["*"]
allowed_origins = ["*"]
allow_credentials = False  # Credentials cannot be used with "*"

if settings.ALLOWED_ORIGINS:
    allowed_origins = settings.ALLOWED_ORIGINS.split(",")
    allow_credentials = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

templates = Jinja2Templates(directory=str(settings.TEMPLATES_DIR))

app.include_router(catalog.router)
app.include_router(stream.router)
app.include_router(library.router)
app.include_router(player.router)
app.include_router(system.router)


def maintenance_page(request: Request):
    return templates.TemplateResponse(
        request,
        "maintenance.html",
        {"message": settings.MAINTENANCE_MESSAGE},
        status_code=503,
    )


@app.get("/")
async def api_root(request: Request):
    """API root"""
    if settings.MAINTENANCE_MODE:
        return maintenance_page(request)
    return {"name": "StreamFlix API", "version": __version__, "docs": "/docs"}


@app.get("/player", response_class=HTMLResponse)
async def player_page(
    request: Request,
    id: Optional[str] = Query(None),
    mode: str = Query("movie"),
    season: int = Query(1, ge=1),
    episode: int = Query(1, ge=1),
    token: Optional[str] = Query(None),
):
    """Player shell; refuses to initialise for hotlinked requests"""
    if settings.MAINTENANCE_MODE:
        return maintenance_page(request)

    try:
        access_service.validate(
            token, request.headers.get("referer"), request.url.hostname
        )
    except AccessDenied as e:
        return templates.TemplateResponse(
            request,
            "denied.html",
            {"message": str(e), "site_url": settings.SITE_URL},
            status_code=403,
        )

    return templates.TemplateResponse(
        request,
        "player.html",
        {
            "content_id": id,
            "mode": mode if mode in ("movie", "tv") else "movie",
            "season": season,
            "episode": episode,
            "providers": DEFAULT_PROVIDERS.display_names(),
            "load_timeout_ms": int(settings.LOAD_TIMEOUT_SECONDS * 1000),
        },
    )
