"""Weather-station readings clients (Synoptic Mesonet, CUASA, RMHPA)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from cloudbase.config import AppContext, fill_url
from cloudbase.contracts.enums import ReadingsSource
from cloudbase.contracts.readings import (
    ObservationPoint,
    PastReadings,
    ReadingsHistory,
    RecentReading,
    StationReadings,
)
from cloudbase.services.units import km_to_miles

logger = logging.getLogger(__name__)

RECENT_READINGS = 8
STALE_AFTER = timedelta(hours=2)
PAST_WINDOW = timedelta(hours=6)
CUASA_INTERVAL_SECONDS = 5 * 60
CUASA_INTERVALS = 10
RMHPA_READING_LIMIT = 100


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class StationReadingsClient:
    """Fetch a station's recent readings from whichever provider hosts it.

    Never raises for remote trouble: failures come back as an empty
    :class:`StationReadings` whose history carries ``error_message``.
    """

    def __init__(
        self,
        context: AppContext,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._context = context
        self._client = http_client or httpx.AsyncClient(timeout=15.0)
        self._clock = clock
        self._tz = ZoneInfo(context.settings.timezone)

    async def get_readings(self, station_id: str, readings_source: str) -> StationReadings:
        try:
            source = ReadingsSource(readings_source)
        except ValueError:
            logger.warning("Invalid readings source %r for station %s", readings_source, station_id)
            return _failed(station_id, f"Unknown readings source: {readings_source}")

        try:
            if source == ReadingsSource.MESONET:
                observations = await self._mesonet(station_id)
            elif source == ReadingsSource.CUASA:
                observations = await self._cuasa(station_id)
            else:
                observations = await self._rmhpa(station_id)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Readings for %s (%s) failed: %s", station_id, source.value, exc)
            return _failed(station_id, f"Error loading readings: {exc}")

        return summarize_readings(station_id, observations, self._clock(), self._tz)

    async def _mesonet(self, station_id: str) -> list[ObservationPoint]:
        url = fill_url(self._context.urls.require("mesonetHistoryReadingsAPIv2"), station=station_id)
        token = self._context.settings.synoptic_api_token
        if token:
            url += f"&token={token}"
        resp = await self._client.get(url)
        resp.raise_for_status()
        return _parse_mesonet(resp.json())

    async def _cuasa(self, station_id: str) -> list[ObservationPoint]:
        end = self._clock().timestamp()
        start = end - CUASA_INTERVAL_SECONDS * CUASA_INTERVALS
        url = fill_url(
            self._context.urls.require("CUASAHistoryReadingsAPI"),
            station=station_id,
            readingStart=start,
            readingEnd=end,
            readingInterval=float(CUASA_INTERVAL_SECONDS),
        )
        resp = await self._client.get(url)
        resp.raise_for_status()
        return _parse_cuasa(resp.json())

    async def _rmhpa(self, station_id: str) -> list[ObservationPoint]:
        url = fill_url(
            self._context.urls.require("RMHPAHistoryReadingsAPI"),
            station=station_id,
            readingLimit=RMHPA_READING_LIMIT,
        )
        headers = {
            "x-api-key": self._context.settings.rmhpa_api_key,
            "Accept": "application/json",
        }
        resp = await self._client.get(url, headers=headers)
        resp.raise_for_status()
        return _parse_rmhpa(resp.json())


def _failed(station_id: str, message: str) -> StationReadings:
    return StationReadings(
        history=ReadingsHistory(station_id=station_id, error_message=message),
        past=PastReadings(station_id=station_id),
    )


def _value(values: list[Any] | None, index: int) -> float | None:
    if values is None or index >= len(values) or values[index] is None:
        return None
    return float(values[index])


def _parse_iso(text: str) -> datetime:
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_mesonet(data: dict[str, Any]) -> list[ObservationPoint]:
    stations = data.get("STATION") or []
    if not stations:
        raise ValueError("No valid data found for station")
    obs = stations[0]["OBSERVATIONS"]
    speeds = obs.get("wind_speed_set_1") or []
    gusts = obs.get("wind_gust_set_1")
    directions = obs.get("wind_direction_set_1")
    points: list[ObservationPoint] = []
    for i, stamp in enumerate(obs.get("date_time") or []):
        if not stamp:
            continue
        points.append(
            ObservationPoint(
                timestamp=_parse_iso(stamp),
                wind_speed=_value(speeds, i) or 0.0,
                wind_gust=None if gusts is None else (_value(gusts, i) or 0.0),
                wind_direction=_value(directions, i) or 0.0,
            )
        )
    return points


def _parse_cuasa(data: list[dict[str, Any]]) -> list[ObservationPoint]:
    return [
        ObservationPoint(
            timestamp=datetime.fromtimestamp(float(entry["timestamp"]), tz=timezone.utc),
            wind_speed=km_to_miles(float(entry.get("windspeed_avg") or 0.0)),
            wind_gust=km_to_miles(float(entry.get("windspeed_max") or 0.0)),
            wind_direction=float(entry.get("wind_direction_avg") or 0.0),
        )
        for entry in data
    ]


def _parse_rmhpa(data: dict[str, Any]) -> list[ObservationPoint]:
    return [
        ObservationPoint(
            timestamp=_parse_iso(entry["timestamp"]),
            wind_speed=float(entry.get("wind_speed") or 0.0),
            wind_gust=float(entry.get("wind_gust") or 0.0),
            wind_direction=float(entry.get("wind_direction") or 0.0),
        )
        for entry in data.get("data") or []
    ]


def clock_label(moment: datetime, tz: tzinfo) -> str:
    """``h:mm`` in the region's local time."""
    local = moment.astimezone(tz)
    return f"{local.hour % 12 or 12}:{local.minute:02d}"


def summarize_readings(
    station_id: str,
    observations: list[ObservationPoint],
    now: datetime,
    tz: tzinfo,
) -> StationReadings:
    """Recent-history bars plus the comparison window for one station.

    A station whose latest reading is older than two hours is reported
    stale and yields no readings at all.
    """
    observations = sorted(observations, key=lambda o: o.timestamp)
    if not observations:
        return _failed(station_id, "No data available")
    latest = observations[-1].timestamp
    if now - latest > STALE_AFTER:
        logger.info("Station %s last reported at %s", station_id, latest.isoformat())
        return _failed(station_id, f"Station {station_id} has not updated in the past 2 hours")

    recent = [
        RecentReading(
            time_label=clock_label(o.timestamp, tz),
            wind_speed=o.wind_speed,
            wind_gust=o.wind_gust,
            wind_direction=o.wind_direction,
        )
        for o in observations[-RECENT_READINGS:]
    ]
    window_start = now - PAST_WINDOW
    past = [o for o in observations if window_start <= o.timestamp <= now]
    return StationReadings(
        history=ReadingsHistory(station_id=station_id, readings=recent),
        past=PastReadings(station_id=station_id, points=past),
    )
