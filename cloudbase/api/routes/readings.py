"""Station readings and forecast-vs-actual comparison endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException

from cloudbase.api.deps import get_catalog, get_forecast_service, get_readings_client
from cloudbase.contracts.forecast import SiteForecast
from cloudbase.contracts.site import Site
from cloudbase.services.catalog import SiteCatalog
from cloudbase.services.errors import CloudbaseError
from cloudbase.services.readings_client import StationReadingsClient
from cloudbase.services.weather.comparison import build_comparison
from cloudbase.services.weather.forecast_service import ForecastService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["readings"])


def _station_site(catalog: SiteCatalog, site_name: str) -> Site:
    site = catalog.find(site_name)
    if site is None:
        raise HTTPException(status_code=404, detail=f"Site '{site_name}' not found")
    if not site.readings_station:
        raise HTTPException(status_code=404, detail=f"Site '{site_name}' has no station")
    return site


@router.get("/readings/{site_name}")
async def get_readings(
    site_name: str,
    catalog: SiteCatalog = Depends(get_catalog),
    client: StationReadingsClient = Depends(get_readings_client),
) -> dict[str, Any]:
    site = _station_site(catalog, site_name)
    readings = await client.get_readings(site.readings_station, site.readings_source)
    return readings.history.to_dict()


@router.get("/compare/{site_name}")
async def compare(
    site_name: str,
    catalog: SiteCatalog = Depends(get_catalog),
    client: StationReadingsClient = Depends(get_readings_client),
    service: ForecastService = Depends(get_forecast_service),
) -> dict[str, Any]:
    """Observed wind of the last hours against the forecast for the same span."""
    site = _station_site(catalog, site_name)
    readings = await client.get_readings(site.readings_station, site.readings_source)

    forecast: SiteForecast | None = None
    try:
        forecast = await service.fetch_forecast(site)
    except (httpx.HTTPError, CloudbaseError) as exc:
        logger.warning("Comparison for %s without forecast: %s", site_name, exc)

    comparison = build_comparison(readings.past, forecast)
    return {
        "error_message": readings.history.error_message,
        "comparison": comparison.to_dict() if comparison else None,
    }
