"""Region sunrise / sunset lookup, used to size the forecast display window."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

import httpx

from cloudbase.config import AppContext, fill_url
from cloudbase.contracts.forecast import SunTimes
from cloudbase.services.weather.normalize import forecast_hours

logger = logging.getLogger(__name__)


def local_clock(iso_text: str, tz: tzinfo) -> str:
    """``"2026-07-01T11:45:00+00:00"`` -> ``"5:45"`` in ``tz`` (12-hour)."""
    moment = datetime.fromisoformat(iso_text).astimezone(tz)
    return f"{moment.hour % 12 or 12}:{moment.minute:02d}"


class SunriseSunsetClient:
    """Sunrise and sunset at the region's reference point.

    A successful lookup is kept for the rest of the local day. Failures
    are logged and not cached, so the next call tries again.
    """

    def __init__(
        self,
        context: AppContext,
        http_client: httpx.AsyncClient | None = None,
        now: Callable[[], datetime] = lambda: datetime.now(tz=timezone.utc),
    ):
        self._context = context
        self._client = http_client or httpx.AsyncClient(timeout=15.0)
        self._now = now
        self._tz = ZoneInfo(context.settings.timezone)
        self._cached: tuple[date, SunTimes] | None = None

    async def get_sun_times(self) -> SunTimes | None:
        today = self._now().astimezone(self._tz).date()
        if self._cached is not None and self._cached[0] == today:
            return self._cached[1]

        settings = self._context.settings
        url = fill_url(
            self._context.urls.require("sunriseSunsetAPI"),
            latitude=settings.sunrise_latitude,
            longitude=settings.sunrise_longitude,
        )
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            results = resp.json()["results"]
            times = SunTimes(
                sunrise=local_clock(results["sunrise"], self._tz),
                sunset=local_clock(results["sunset"], self._tz),
            )
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Sunrise/sunset lookup failed: %s", exc)
            return None

        self._cached = (today, times)
        return times

    async def display_hours(self) -> tuple[int, int]:
        """``(start_hour, end_hour)`` of the display window; 6..21 without sun times."""
        times = await self.get_sun_times()
        if times is None:
            return forecast_hours()
        return forecast_hours(times.sunrise, times.sunset)
