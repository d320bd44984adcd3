"""FastAPI dependency injection wiring."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request

from cloudbase.config import AppContext
from cloudbase.services.catalog import SiteCatalog
from cloudbase.services.readings_client import StationReadingsClient
from cloudbase.services.tracks import TrackService
from cloudbase.services.weather.forecast_service import ForecastService
from cloudbase.services.weather.sun_times import SunriseSunsetClient


@dataclass
class AppServices:
    """Long-lived services built once at startup."""

    context: AppContext
    catalog: SiteCatalog
    forecasts: ForecastService
    readings: StationReadingsClient
    sun: SunriseSunsetClient
    tracks: TrackService


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_context(services: AppServices = Depends(get_services)) -> AppContext:
    return services.context


def get_catalog(services: AppServices = Depends(get_services)) -> SiteCatalog:
    return services.catalog


def get_forecast_service(services: AppServices = Depends(get_services)) -> ForecastService:
    return services.forecasts


def get_readings_client(services: AppServices = Depends(get_services)) -> StationReadingsClient:
    return services.readings


def get_sun_client(services: AppServices = Depends(get_services)) -> SunriseSunsetClient:
    return services.sun


def get_track_service(services: AppServices = Depends(get_services)) -> TrackService:
    return services.tracks
