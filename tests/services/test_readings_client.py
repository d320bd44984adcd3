"""Tests for the station readings client with mocked HTTP responses."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import httpx

from cloudbase.config import AppContext, Settings
from cloudbase.contracts.readings import ObservationPoint
from cloudbase.services.readings_client import StationReadingsClient, clock_label, summarize_readings

NOW = datetime(2026, 7, 1, 18, 0, tzinfo=timezone.utc)
DENVER = ZoneInfo("America/Denver")


def _stamps(count: int, last: datetime = NOW - timedelta(minutes=5), step: int = 5) -> list[datetime]:
    return [last - timedelta(minutes=step * i) for i in reversed(range(count))]


def _mesonet_payload(count: int = 10, with_gusts: bool = True, last: datetime = NOW - timedelta(minutes=5)) -> dict:
    stamps = _stamps(count, last)
    observations = {
        "date_time": [s.strftime("%Y-%m-%dT%H:%M:%SZ") for s in stamps],
        "wind_speed_set_1": [8.0 + i for i in range(count)],
        "wind_direction_set_1": [310] * count,
    }
    if with_gusts:
        observations["wind_gust_set_1"] = [None] + [15.0] * (count - 1)
    return {"STATION": [{"STID": "KSLC", "OBSERVATIONS": observations}]}


def _client(handler, **settings) -> StationReadingsClient:
    context = AppContext.from_settings(Settings(**settings))
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StationReadingsClient(context, http_client=http, clock=lambda: NOW)


class TestMesonet:
    async def test_recent_history_and_past_window(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=_mesonet_payload())

        client = _client(handler, synoptic_api_token="abc123")
        readings = await client.get_readings("KSLC", "Mesonet")

        assert seen[0].url.params["stid"] == "KSLC"
        assert seen[0].url.params["token"] == "abc123"
        history = readings.history
        assert history.error_message is None
        assert len(history.readings) == 8
        # 17:55 UTC is 11:55 MDT
        assert history.readings[-1].time_label == "11:55"
        assert history.readings[-1].wind_speed == 17.0
        assert len(readings.past.points) == 10
        assert readings.past.points[0].wind_gust == 0.0

    async def test_missing_gust_column_means_no_gusts(self):
        client = _client(lambda req: httpx.Response(200, json=_mesonet_payload(with_gusts=False)))
        readings = await client.get_readings("KSLC", "mesonet")
        assert all(r.wind_gust is None for r in readings.history.readings)

    async def test_stale_station(self):
        payload = _mesonet_payload(last=NOW - timedelta(hours=3))
        client = _client(lambda req: httpx.Response(200, json=payload))
        readings = await client.get_readings("KSLC", "Mesonet")
        assert readings.history.error_message == "Station KSLC has not updated in the past 2 hours"
        assert readings.history.readings == []

    async def test_empty_station_list(self):
        client = _client(lambda req: httpx.Response(200, json={"STATION": []}))
        readings = await client.get_readings("KSLC", "Mesonet")
        assert readings.history.error_message.startswith("Error loading readings")

    async def test_http_failure(self):
        client = _client(lambda req: httpx.Response(500))
        readings = await client.get_readings("KSLC", "Mesonet")
        assert readings.history.error_message.startswith("Error loading readings")
        assert readings.past.points == []


class TestOtherSources:
    async def test_cuasa_converts_kmh(self):
        stamps = _stamps(3)
        payload = [
            {
                "timestamp": s.timestamp(),
                "windspeed_avg": 16.09,
                "windspeed_max": 32.19,
                "wind_direction_avg": 200,
            }
            for s in stamps
        ]
        client = _client(lambda req: httpx.Response(200, json=payload))
        readings = await client.get_readings("ID-42", "CUASA")
        latest = readings.history.readings[-1]
        assert latest.wind_speed == 10
        assert latest.wind_gust == 20
        assert latest.wind_direction == 200

    async def test_rmhpa_sends_api_key(self):
        seen: list[httpx.Request] = []
        stamp = (NOW - timedelta(minutes=10)).isoformat()

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={"data": [{"timestamp": stamp, "wind_speed": 6, "wind_gust": 9, "wind_direction": 90}]},
            )

        client = _client(handler, rmhpa_api_key="secret")
        readings = await client.get_readings("lookout", "RMHPA")
        assert seen[0].headers["x-api-key"] == "secret"
        assert seen[0].url.params["limit"] == "100"
        assert readings.history.readings[0].wind_gust == 9.0

    async def test_unknown_source(self):
        client = _client(lambda req: httpx.Response(200, json={}))
        readings = await client.get_readings("X1", "Tempest")
        assert readings.history.error_message == "Unknown readings source: Tempest"


class TestSummary:
    def test_no_readings(self):
        readings = summarize_readings("KSLC", [], NOW, DENVER)
        assert readings.history.error_message == "No data available"

    def test_past_window_excludes_old_points(self):
        points = [
            ObservationPoint(timestamp=NOW - timedelta(hours=7), wind_speed=3.0),
            ObservationPoint(timestamp=NOW - timedelta(minutes=30), wind_speed=5.0),
        ]
        readings = summarize_readings("KSLC", points, NOW, DENVER)
        assert [p.wind_speed for p in readings.past.points] == [5.0]
        assert len(readings.history.readings) == 2

    def test_clock_label(self):
        assert clock_label(datetime(2026, 1, 15, 19, 5, tzinfo=timezone.utc), DENVER) == "12:05"
