"""Forecast aggregation: per-site fetch, cache, batch fetch and publication."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from cloudbase.config import AppContext
from cloudbase.contracts.forecast import DailyForecast, SiteForecast
from cloudbase.contracts.site import Site
from cloudbase.services.errors import CloudbaseError
from cloudbase.services.weather.normalize import (
    DEFAULT_END_HOUR,
    DEFAULT_START_HOUR,
    display_window,
    normalize_forecast,
)
from cloudbase.services.weather.openmeteo_client import OpenMeteoClient

logger = logging.getLogger(__name__)

# Failures a single site's fetch may raise; anything else is a bug.
FETCH_ERRORS = (httpx.HTTPError, CloudbaseError, ValueError)


class ForecastCache:
    """URL-keyed payload cache with a fixed time-to-live."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class ForecastService:
    """Fetch and normalize forecasts for catalog sites.

    One site's failure never affects another: ``fetch_forecasts`` returns
    a dict keyed by site name from which failed sites are simply absent.
    """

    def __init__(
        self,
        context: AppContext,
        openmeteo: OpenMeteoClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._context = context
        settings = context.settings
        self._openmeteo = openmeteo or OpenMeteoClient(urls=context.urls, timezone=settings.timezone)
        self._tz = ZoneInfo(settings.timezone)
        self._cache = ForecastCache(settings.forecast_cache_seconds, clock)
        self._daily_cache = ForecastCache(settings.forecast_cache_seconds, clock)
        self._semaphore = asyncio.Semaphore(settings.max_concurrent_forecasts)
        self._in_flight: dict[str, asyncio.Future] = {}

    @property
    def timezone(self) -> ZoneInfo:
        return self._tz

    def clear_cache(self) -> None:
        self._cache.clear()
        self._daily_cache.clear()

    async def _cached(
        self,
        cache: ForecastCache,
        url: str,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Cached value for ``url``; concurrent misses share one upstream fetch."""
        cached = cache.get(url)
        if cached is not None:
            logger.debug("Forecast cache hit for %s", url)
            return cached
        pending = self._in_flight.get(url)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch_into(cache, url, fetch))
            self._in_flight[url] = pending
            pending.add_done_callback(lambda _: self._in_flight.pop(url, None))
        return await asyncio.shield(pending)

    async def _fetch_into(self, cache: ForecastCache, url: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        async with self._semaphore:
            value = await fetch()
        cache.put(url, value)
        return value

    async def _hourly_payload(self, site: Site) -> dict[str, Any]:
        url = self._openmeteo.forecast_url(site.latitude, site.longitude)
        return await self._cached(
            self._cache, url, lambda: self._openmeteo.get_hourly(site.latitude, site.longitude)
        )

    async def fetch_forecast(
        self,
        site: Site,
        *,
        start_hour: int = DEFAULT_START_HOUR,
        end_hour: int = DEFAULT_END_HOUR,
    ) -> SiteForecast:
        """Fetch and normalize every hour of one site's forecast.

        Raises:
            httpx.HTTPError: on transport or HTTP status failure.
            ForecastDecodeError: if the payload cannot be normalized.
        """
        payload = await self._hourly_payload(site)
        return normalize_forecast(
            payload,
            site,
            self._context.lift_parameters,
            self._tz,
            start_hour=start_hour,
            end_hour=end_hour,
        )

    async def fetch_display_forecast(
        self,
        site: Site,
        now: datetime | None = None,
        *,
        start_hour: int = DEFAULT_START_HOUR,
        end_hour: int = DEFAULT_END_HOUR,
    ) -> SiteForecast:
        forecast = await self.fetch_forecast(site, start_hour=start_hour, end_hour=end_hour)
        return display_window(
            forecast,
            now or datetime.now(self._tz),
            start_hour=start_hour,
            end_hour=end_hour,
        )

    async def fetch_daily(self, site: Site) -> DailyForecast:
        url = self._openmeteo.daily_url(site.latitude, site.longitude)
        return await self._cached(
            self._daily_cache, url, lambda: self._openmeteo.get_daily(site.latitude, site.longitude)
        )

    async def fetch_forecasts(
        self,
        sites: Iterable[Site],
        now: datetime | None = None,
        *,
        start_hour: int = DEFAULT_START_HOUR,
        end_hour: int = DEFAULT_END_HOUR,
    ) -> dict[str, SiteForecast]:
        """Display-windowed forecasts for many sites, keyed by site name."""
        sites = list(sites)
        tasks = [
            self.fetch_display_forecast(site, now, start_hour=start_hour, end_hour=end_hour)
            for site in sites
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        forecasts: dict[str, SiteForecast] = {}
        for site, result in zip(sites, results):
            if isinstance(result, FETCH_ERRORS):
                logger.warning("Forecast for %s unavailable: %s", site.site_name, result)
                continue
            if isinstance(result, BaseException):
                raise result
            forecasts[site.site_name] = result
        return forecasts


Subscriber = Callable[[str, SiteForecast], None]


class ForecastBoard:
    """Publishes forecasts to subscribers as they land.

    Each request for a site bumps that site's generation; a fetch that
    completes after a newer request for the same site is discarded
    instead of published.
    """

    def __init__(self, service: ForecastService):
        self._service = service
        self._subscribers: list[Subscriber] = []
        self._generations: dict[str, int] = {}
        self._latest: dict[str, SiteForecast] = {}

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def latest(self, site_name: str) -> SiteForecast | None:
        return self._latest.get(site_name)

    async def request(
        self,
        site: Site,
        fetch: Callable[[Site], Awaitable[SiteForecast]] | None = None,
    ) -> SiteForecast | None:
        """Fetch ``site`` and publish the result unless superseded.

        Returns the forecast when published, None when the fetch failed or
        was superseded.
        """
        generation = self._generations.get(site.site_name, 0) + 1
        self._generations[site.site_name] = generation
        fetch = fetch or self._service.fetch_display_forecast
        try:
            forecast = await fetch(site)
        except FETCH_ERRORS as exc:
            logger.warning("Forecast for %s unavailable: %s", site.site_name, exc)
            return None

        if self._generations.get(site.site_name) != generation:
            logger.debug("Discarding superseded forecast for %s", site.site_name)
            return None
        self._latest[site.site_name] = forecast
        for callback in list(self._subscribers):
            callback(site.site_name, forecast)
        return forecast

    async def request_all(self, sites: Iterable[Site]) -> dict[str, SiteForecast]:
        sites = list(sites)
        results = await asyncio.gather(*(self.request(site) for site in sites))
        return {
            site.site_name: forecast
            for site, forecast in zip(sites, results)
            if forecast is not None
        }
