"""InReach live-tracking: KML feed parsing, concurrent fetch and flight segments.

Garmin InReach share feeds are KML documents with one ``Placemark`` per
fix; the fix details live in ``ExtendedData/Data[@name]/value`` elements.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable
from datetime import datetime, time as dt_time, timedelta, timezone, tzinfo
from itertools import groupby

import httpx

from cloudbase.contracts.common import GeoPoint
from cloudbase.contracts.track import GroundProfilePoint, Pilot, PilotTrack, PilotTrackSegment
from cloudbase.services.elevation import get_ground_elevations
from cloudbase.services.units import km_to_miles, meters_to_feet, parse_float

logger = logging.getLogger(__name__)

TIME_FORMAT = "%m/%d/%Y %I:%M:%S %p"
SEGMENT_GAP = timedelta(seconds=7200)
TRACK_CACHE_SECONDS = 600.0
EARTH_RADIUS_KM = 6371.0


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _extended_data(placemark: ET.Element) -> dict[str, str]:
    values: dict[str, str] = {}
    for element in placemark.iter():
        if _local(element.tag) != "Data":
            continue
        value = next((child for child in element if _local(child.tag) == "value"), None)
        if value is not None and value.text is not None:
            values[element.get("name", "")] = value.text.strip()
    return values


def parse_feed(pilot_name: str, kml_text: str) -> list[PilotTrack]:
    """Fixes from one InReach KML feed, in feed order.

    Placemarks without time or position (e.g. the track line) are skipped.
    An unparseable document yields no fixes.
    """
    if not kml_text.strip():
        return []
    try:
        root = ET.fromstring(kml_text)
    except ET.ParseError as exc:
        logger.warning("Unparseable KML feed for %s: %s", pilot_name, exc)
        return []

    tracks: list[PilotTrack] = []
    for placemark in root.iter():
        if _local(placemark.tag) != "Placemark":
            continue
        data = _extended_data(placemark)
        stamp, lat, lon = data.get("Time UTC"), data.get("Latitude"), data.get("Longitude")
        if not (stamp and lat and lon):
            continue
        try:
            when = datetime.strptime(stamp, TIME_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            logger.warning("Skipping fix with bad time %r for %s", stamp, pilot_name)
            continue
        tracks.append(
            PilotTrack(
                pilot_name=pilot_name,
                date_time=when,
                latitude=parse_float(lat),
                longitude=parse_float(lon),
                speed=float(km_to_miles(_leading_number(data.get("Velocity", "")))),
                altitude=float(meters_to_feet(_leading_number(data.get("Elevation", "")))),
                heading=_leading_number(data.get("Course", "")),
                in_emergency=data.get("In Emergency", "").lower() == "true",
                message=data.get("Text") or None,
            )
        )
    return tracks


def _leading_number(text: str) -> float:
    """``"41.0 km/h" -> 41.0``; anything unparseable is 0."""
    return parse_float(text.split(" ", 1)[0] if text else "", 0.0)


# ------------------------------------------------------------------
# Segments
# ------------------------------------------------------------------


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def _point(track: PilotTrack) -> GeoPoint:
    return GeoPoint(latitude=track.latitude, longitude=track.longitude)


def duration_label(delta: timedelta) -> str:
    minutes = int(delta.total_seconds() // 60)
    return f"{minutes // 60}:{minutes % 60:02d}"


def summarize_segment(pilot_name: str, tracks: list[PilotTrack]) -> PilotTrackSegment:
    total = sum(haversine_km(_point(a), _point(b)) for a, b in zip(tracks, tracks[1:]))
    return PilotTrackSegment(
        pilot_name=pilot_name,
        tracks=tracks,
        duration_label=duration_label(tracks[-1].date_time - tracks[0].date_time),
        start_to_end_km=round(haversine_km(_point(tracks[0]), _point(tracks[-1])), 1),
        total_distance_km=round(total, 1),
        max_altitude=max(t.altitude for t in tracks),
    )


def build_segments(tracks: Iterable[PilotTrack], gap: timedelta = SEGMENT_GAP) -> list[PilotTrackSegment]:
    """Split each pilot's fixes into flights wherever fixes are ``gap`` apart."""
    segments: list[PilotTrackSegment] = []
    ordered = sorted(tracks, key=lambda t: (t.pilot_name, t.date_time))
    for pilot_name, pilot_tracks in groupby(ordered, key=lambda t: t.pilot_name):
        current: list[PilotTrack] = []
        for track in pilot_tracks:
            if current and track.date_time - current[-1].date_time > gap:
                segments.append(summarize_segment(pilot_name, current))
                current = []
            current.append(track)
        if current:
            segments.append(summarize_segment(pilot_name, current))
    return segments


# ------------------------------------------------------------------
# Fetch
# ------------------------------------------------------------------


def feed_start(days: int, now: datetime, tz: tzinfo) -> datetime:
    """12:01 AM local, ``days - 1`` days back (1 = today only)."""
    local = now.astimezone(tz)
    start = datetime.combine(local.date(), dt_time(0, 1), tzinfo=tz)
    return start - timedelta(days=max(days, 1) - 1)


class TrackService:
    """Fetch recent fixes for many pilots, at most N feeds at a time.

    Results are cached per pilot for ten minutes, keyed on the exact feed
    request, and the cache is dropped when the local date changes.
    """

    def __init__(
        self,
        tz: tzinfo,
        http_client: httpx.AsyncClient | None = None,
        max_concurrent: int = 8,
        cache_seconds: float = TRACK_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = lambda: datetime.now(tz=timezone.utc),
    ):
        self._tz = tz
        self._client = http_client or httpx.AsyncClient(timeout=30.0)
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._cache_seconds = cache_seconds
        self._clock = clock
        self._now = now
        self._cache: dict[str, tuple[str, float, list[PilotTrack]]] = {}
        self._cache_day = now().astimezone(tz).date()

    async def fetch_pilot(self, pilot: Pilot, days: int = 1) -> list[PilotTrack]:
        """Fixes for one pilot; failures and inactive pilots yield []."""
        if pilot.inactive:
            return []
        start = feed_start(days, self._now(), self._tz)
        params = {"d1": start.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")}
        request_key = f"{pilot.tracking_feed_url}?d1={params['d1']}"

        cached = self._cache.get(pilot.pilot_name)
        if cached and cached[0] == request_key and self._clock() - cached[1] < self._cache_seconds:
            return cached[2]

        try:
            async with self._semaphore:
                resp = await self._client.get(pilot.tracking_feed_url, params=params)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Track feed for %s failed: %s", pilot.pilot_name, exc)
            return []

        tracks = parse_feed(pilot.pilot_name, resp.text)
        self._cache[pilot.pilot_name] = (request_key, self._clock(), tracks)
        return tracks

    async def fetch_tracks(self, pilots: Iterable[Pilot], days: int = 1) -> list[PilotTrack]:
        """All pilots' fixes merged and sorted by time."""
        today = self._now().astimezone(self._tz).date()
        if today != self._cache_day:
            self._cache.clear()
            self._cache_day = today

        chunks = await asyncio.gather(*(self.fetch_pilot(p, days) for p in pilots))
        combined = [track for chunk in chunks for track in chunk]
        return sorted(combined, key=lambda t: t.date_time)

    async def ground_profile(self, segment: PilotTrackSegment, elevation_url: str) -> list[GroundProfilePoint]:
        """Each fix of ``segment`` with the terrain elevation beneath it."""
        grounds = await get_ground_elevations(
            [(t.latitude, t.longitude) for t in segment.tracks], elevation_url, self._client
        )
        return [
            GroundProfilePoint(
                date_time=track.date_time,
                latitude=track.latitude,
                longitude=track.longitude,
                altitude=track.altitude,
                ground_elevation=ground,
                height_above_ground=None if ground is None else track.altitude - ground,
            )
            for track, ground in zip(segment.tracks, grounds)
        ]
