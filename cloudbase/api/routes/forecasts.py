"""Forecast and flying-potential endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query

from cloudbase.api.deps import get_catalog, get_context, get_forecast_service, get_sun_client
from cloudbase.config import AppContext
from cloudbase.contracts.enums import FlyingPotential, SiteType
from cloudbase.contracts.forecast import ColorMapping, SiteForecast
from cloudbase.contracts.site import Site
from cloudbase.services.catalog import SiteCatalog
from cloudbase.services.errors import CloudbaseError
from cloudbase.services.weather.forecast_service import ForecastService
from cloudbase.services.weather.normalize import forecast_hours
from cloudbase.services.weather.scoring import hour_colors
from cloudbase.services.weather.sun_times import SunriseSunsetClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["forecasts"])


def _site_or_404(catalog: SiteCatalog, site_name: str) -> Site:
    site = catalog.find(site_name)
    if site is None:
        raise HTTPException(status_code=404, detail=f"Site '{site_name}' not found")
    return site


def _hour_payload(forecast: SiteForecast, mappings: dict[str, list[ColorMapping]]) -> list[dict[str, Any]]:
    return [
        {
            **hour.to_dict(),
            "day_label": hour.day_label,
            "date_label": hour.date_label,
            "time_label": hour.time_label,
            "cloud_cover_label": hour.cloud_cover_label,
            "precipitation_label": hour.precipitation_label,
            "cape_label": hour.cape_label,
            "colors": hour_colors(hour, mappings),
        }
        for hour in forecast.hours
    ]


@router.get("/forecasts/{site_name}")
async def get_forecast(
    site_name: str,
    sunrise: str | None = Query(default=None, description="Local sunrise, h:mm"),
    sunset: str | None = Query(default=None, description="Local sunset, h:mm (12-hour)"),
    catalog: SiteCatalog = Depends(get_catalog),
    context: AppContext = Depends(get_context),
    service: ForecastService = Depends(get_forecast_service),
    sun: SunriseSunsetClient = Depends(get_sun_client),
) -> dict[str, Any]:
    """Display-windowed hourly forecast for one site.

    The window follows the region's sun times unless ``sunrise`` and
    ``sunset`` are given explicitly.
    """
    site = _site_or_404(catalog, site_name)
    if sunrise and sunset:
        start_hour, end_hour = forecast_hours(sunrise, sunset)
    else:
        start_hour, end_hour = await sun.display_hours()
    try:
        forecast = await service.fetch_display_forecast(site, start_hour=start_hour, end_hour=end_hour)
    except (httpx.HTTPError, CloudbaseError) as exc:
        logger.warning("Forecast for %s failed: %s", site_name, exc)
        raise HTTPException(status_code=502, detail=f"Forecast unavailable: {exc}")

    payload = forecast.model_dump(mode="json", exclude={"hours"})
    payload["hours"] = _hour_payload(forecast, context.color_mappings)
    return payload


@router.get("/forecasts/{site_name}/daily")
async def get_daily_forecast(
    site_name: str,
    catalog: SiteCatalog = Depends(get_catalog),
    service: ForecastService = Depends(get_forecast_service),
) -> dict[str, Any]:
    site = _site_or_404(catalog, site_name)
    try:
        daily = await service.fetch_daily(site)
    except (httpx.HTTPError, CloudbaseError) as exc:
        logger.warning("Daily forecast for %s failed: %s", site_name, exc)
        raise HTTPException(status_code=502, detail=f"Forecast unavailable: {exc}")
    return daily.to_dict()


@router.get("/potential")
async def get_flying_potential(
    catalog: SiteCatalog = Depends(get_catalog),
    service: ForecastService = Depends(get_forecast_service),
    sun: SunriseSunsetClient = Depends(get_sun_client),
) -> dict[str, Any]:
    """Combined flying potential per hour for every soaring / mountain site.

    Sites whose forecast could not be fetched are absent from ``sites``.
    """
    candidates = catalog.by_type(SiteType.SOARING, SiteType.MOUNTAIN)
    start_hour, end_hour = await sun.display_hours()
    forecasts = await service.fetch_forecasts(candidates, start_hour=start_hour, end_hour=end_hour)
    return {
        "sites": {
            name: [
                {
                    "time": hour.time.isoformat(),
                    "combined": hour.potential.combined,
                    "color": FlyingPotential(hour.potential.combined).color_name,
                    "thermal": hour.potential.thermal,
                    "top_of_lift": hour.top_of_lift_label,
                }
                for hour in forecast.hours
            ]
            for name, forecast in forecasts.items()
        },
        "missing": [s.site_name for s in candidates if s.site_name not in forecasts],
    }
