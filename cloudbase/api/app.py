"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI

# Load .env file from project root (must be before CORS_ORIGINS is read below)
load_dotenv()
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from cloudbase.api.deps import AppServices  # noqa: E402
from cloudbase.api.routes import favorites, forecasts, readings, sites, tracks  # noqa: E402
from cloudbase.config import AppContext, Settings  # noqa: E402
from cloudbase.services.catalog import load_metadata  # noqa: E402
from cloudbase.services.readings_client import StationReadingsClient  # noqa: E402
from cloudbase.services.sheets_client import SheetsClient  # noqa: E402
from cloudbase.services.tracks import TrackService  # noqa: E402
from cloudbase.services.weather.forecast_service import ForecastService  # noqa: E402
from cloudbase.services.weather.openmeteo_client import OpenMeteoClient  # noqa: E402
from cloudbase.services.weather.sun_times import SunriseSunsetClient  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load region metadata and build the shared services on startup."""
    settings = Settings()
    context = AppContext.from_settings(settings)

    async with httpx.AsyncClient(timeout=30.0) as http:
        sheets = SheetsClient(settings, http_client=http, urls=context.urls)
        catalog = await load_metadata(context, sheets)
        if context.lift_parameters is None:
            logger.warning("Lift parameters unavailable; thermal forecasts will read zero")

        app.state.services = AppServices(
            context=context,
            catalog=catalog,
            forecasts=ForecastService(
                context,
                OpenMeteoClient(http_client=http, urls=context.urls, timezone=settings.timezone),
            ),
            readings=StationReadingsClient(context, http_client=http),
            sun=SunriseSunsetClient(context, http_client=http),
            tracks=TrackService(
                ZoneInfo(settings.timezone),
                http_client=http,
                max_concurrent=settings.max_concurrent_tracks,
            ),
        )
        yield


app = FastAPI(
    title="Cloudbase API",
    description="Paragliding site forecasts, flying potential and station readings",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sites.router, prefix="/api")
app.include_router(forecasts.router, prefix="/api")
app.include_router(favorites.router, prefix="/api")
app.include_router(readings.router, prefix="/api")
app.include_router(tracks.router, prefix="/api")


@app.get("/api/health")
async def health():
    services: AppServices | None = getattr(app.state, "services", None)
    if services is None:
        return {"status": "starting"}
    return {
        "status": "ok",
        "sites": len(services.catalog.sites),
        "areas": len(services.catalog.areas),
        "pilots": len(services.catalog.pilots),
        "lift_parameters_loaded": services.context.lift_parameters is not None,
        "app_urls": len(services.context.urls),
    }
