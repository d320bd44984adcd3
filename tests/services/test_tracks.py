"""Tests for InReach feed parsing, flight segments and the track service."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import httpx

from cloudbase.config import DEFAULT_URLS
from cloudbase.contracts.common import GeoPoint
from cloudbase.contracts.track import Pilot, PilotTrack
from cloudbase.services.tracks import (
    TrackService,
    build_segments,
    duration_label,
    feed_start,
    haversine_km,
    parse_feed,
)

DENVER = ZoneInfo("America/Denver")

PLACEMARK = """
    <Placemark>
      <ExtendedData>
        <Data name="Time UTC"><value>{time}</value></Data>
        <Data name="Latitude"><value>{lat}</value></Data>
        <Data name="Longitude"><value>-111.90</value></Data>
        <Data name="Elevation"><value>2500.0 m from MSL</value></Data>
        <Data name="Velocity"><value>40.0 km/h</value></Data>
        <Data name="Course"><value>315.00 ° True</value></Data>
        <Data name="In Emergency"><value>False</value></Data>
        <Data name="Text"><value>{text}</value></Data>
      </ExtendedData>
    </Placemark>"""

KML = f"""<?xml version="1.0" encoding="utf-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <Folder>
      {PLACEMARK.format(time="7/1/2026 4:05:00 PM", lat="40.47", text="Launched")}
      {PLACEMARK.format(time="7/1/2026 4:15:00 PM", lat="40.52", text="")}
      {PLACEMARK.format(time="not a time", lat="40.60", text="")}
      <Placemark><name>Track line</name></Placemark>
    </Folder>
  </Document>
</kml>"""


def _track(pilot: str, minute: int, lat: float = 40.0, altitude: float = 7000.0) -> PilotTrack:
    return PilotTrack(
        pilot_name=pilot,
        date_time=datetime(2026, 7, 1, 16, 0, tzinfo=timezone.utc) + timedelta(minutes=minute),
        latitude=lat,
        longitude=-111.9,
        altitude=altitude,
    )


class TestParseFeed:
    def test_fixes_with_converted_units(self):
        tracks = parse_feed("Alex", KML)
        assert len(tracks) == 2
        first = tracks[0]
        assert first.date_time == datetime(2026, 7, 1, 16, 5, tzinfo=timezone.utc)
        assert first.latitude == 40.47
        assert first.altitude == 8202
        assert first.speed == 25
        assert first.heading == 315.0
        assert first.message == "Launched"
        assert tracks[1].message is None

    def test_unparseable_feed(self):
        assert parse_feed("Alex", "<kml><unclosed>") == []
        assert parse_feed("Alex", "   ") == []


class TestSegments:
    def test_gap_splits_flights(self):
        tracks = [_track("Alex", 0), _track("Alex", 30, 40.1, 9000), _track("Alex", 200), _track("Sam", 10)]
        segments = build_segments(tracks)
        assert [(s.pilot_name, len(s.tracks)) for s in segments] == [("Alex", 2), ("Alex", 1), ("Sam", 1)]
        first = segments[0]
        assert first.duration_label == "0:30"
        assert first.max_altitude == 9000
        assert first.start_to_end_km == 11.1
        assert first.total_distance_km == 11.1

    def test_haversine(self):
        assert round(haversine_km(GeoPoint(latitude=0, longitude=0), GeoPoint(latitude=0, longitude=1)), 1) == 111.2

    def test_duration_label(self):
        assert duration_label(timedelta(hours=2, minutes=5)) == "2:05"


class TestTrackService:
    def test_feed_start(self):
        now = datetime(2026, 7, 2, 3, 0, tzinfo=timezone.utc)  # 9 pm on 7/1 in Denver
        assert feed_start(1, now, DENVER) == datetime(2026, 7, 1, 0, 1, tzinfo=DENVER)
        assert feed_start(2, now, DENVER) == datetime(2026, 6, 30, 0, 1, tzinfo=DENVER)

    async def test_fetch_tracks_merges_and_caches(self):
        requests: list[httpx.Request] = []

        def handler(request):
            requests.append(request)
            if "Broken" in request.url.path:
                return httpx.Response(500)
            return httpx.Response(200, text=KML)

        pilots = [
            Pilot(pilot_name="Alex", tracking_share_url="https://share.garmin.com/Alex",
                  tracking_feed_url="https://share.garmin.com/Feed/Share/Alex"),
            Pilot(pilot_name="Broken", tracking_share_url="https://share.garmin.com/Broken",
                  tracking_feed_url="https://share.garmin.com/Feed/Share/Broken"),
            Pilot(pilot_name="Resting", inactive=True, tracking_share_url="https://share.garmin.com/Resting",
                  tracking_feed_url="https://share.garmin.com/Feed/Share/Resting"),
        ]
        now = datetime(2026, 7, 1, 22, 0, tzinfo=timezone.utc)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            service = TrackService(DENVER, http, clock=lambda: 0.0, now=lambda: now)
            tracks = await service.fetch_tracks(pilots)
            again = await service.fetch_tracks(pilots)

        assert [t.pilot_name for t in tracks] == ["Alex", "Alex"]
        assert again == tracks
        # Alex cached on the second pass; Broken retried
        assert len(requests) == 3
        assert requests[0].url.params["d1"] == "2026-07-01T06:01:00Z"

    async def test_ground_profile_marks_failed_lookups(self):
        def handler(request):
            assert request.url.path == "/v1/elevation"
            return httpx.Response(200, json={"elevation": [1500.0, "n/a"]})

        segment = build_segments([_track("Alex", 0, 40.0, 7000.0), _track("Alex", 10, 40.1, 8000.0)])[0]
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            service = TrackService(DENVER, http)
            profile = await service.ground_profile(segment, DEFAULT_URLS["groundElevation"])

        assert [p.altitude for p in profile] == [7000.0, 8000.0]
        assert profile[0].ground_elevation == 4921
        assert profile[0].height_above_ground == 2079
        assert profile[1].ground_elevation is None
        assert profile[1].height_above_ground is None
