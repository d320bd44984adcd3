"""Open-Meteo API client for hourly and daily forecast data."""

from __future__ import annotations

from typing import Any

import httpx

from cloudbase.config import AppURLs, fill_url
from cloudbase.contracts.forecast import DailyForecast
from cloudbase.services.errors import ForecastDecodeError
from cloudbase.services.weather.normalize import (
    DAILY_VARIABLES,
    HOURLY_VARIABLES,
    normalize_daily,
)


class OpenMeteoClient:
    """Async HTTP client for the Open-Meteo forecast API.

    URLs come from the app URL catalog (``forecastURL`` and
    ``dailyForecastURL`` templates) so a region can point at another
    endpoint without a code change.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        urls: AppURLs | None = None,
        timezone: str = "America/Denver",
    ):
        self._client = http_client or httpx.AsyncClient(timeout=30.0)
        self._urls = urls or AppURLs()
        self._timezone = timezone

    def forecast_url(self, latitude: float, longitude: float) -> str:
        return fill_url(
            self._urls.require("forecastURL"),
            latitude=latitude,
            longitude=longitude,
            encodedTimezone=self._timezone,
            hourlyVariables=",".join(HOURLY_VARIABLES),
        )

    def daily_url(self, latitude: float, longitude: float) -> str:
        return fill_url(
            self._urls.require("dailyForecastURL"),
            latitude=latitude,
            longitude=longitude,
            encodedTimezone=self._timezone,
            dailyVariables=",".join(DAILY_VARIABLES),
        )

    async def fetch_json(self, url: str) -> dict[str, Any]:
        resp = await self._client.get(url)
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as exc:
            raise ForecastDecodeError(f"Invalid JSON from {url}") from exc
        if not isinstance(data, dict):
            raise ForecastDecodeError(f"Unexpected payload type from {url}")
        if data.get("error"):
            raise ForecastDecodeError(str(data.get("reason", "Open-Meteo error")))
        return data

    async def get_hourly(self, latitude: float, longitude: float) -> dict[str, Any]:
        """Raw hourly payload for one point (normalized by the caller)."""
        return await self.fetch_json(self.forecast_url(latitude, longitude))

    async def get_daily(self, latitude: float, longitude: float) -> DailyForecast:
        data = await self.fetch_json(self.daily_url(latitude, longitude))
        return normalize_daily(data)
