"""Shared fixtures for API tests.

Services are wired to an ``httpx.MockTransport`` standing in for
Open-Meteo, Synoptic, sunrise-sunset.org and the InReach share feeds,
so every route runs its real code path.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from cloudbase.api.app import app
from cloudbase.api.deps import AppServices
from cloudbase.config import AppContext, Settings
from cloudbase.contracts.site import Area, Site, SiteWindDirection
from cloudbase.contracts.track import Pilot
from cloudbase.services.catalog import SiteCatalog
from cloudbase.services.readings_client import StationReadingsClient
from cloudbase.services.tracks import TrackService
from cloudbase.services.weather.forecast_service import ForecastService
from cloudbase.services.weather.openmeteo_client import OpenMeteoClient
from cloudbase.services.weather.sun_times import SunriseSunsetClient
from tests.services.weather.forecast_payloads import DENVER, build_payload, day_hours

FAILING_LATITUDE = "10.0"

SITES = [
    Site(id="Wasatch-Inspo", area="Wasatch", site_name="Inspo", site_type="Mountain",
         readings_source="Mesonet", readings_station="KSLC", latitude=40.47, longitude=-111.9, sheet_row=3),
    Site(id="Wasatch-Point of the Mountain", area="Wasatch", site_name="Point of the Mountain",
         site_type="Soaring", readings_source="Mesonet", readings_station="UTPOM",
         latitude=40.45, longitude=-111.89, sheet_row=2,
         wind_direction=SiteWindDirection(N="Good", NW="Good", W="Marginal")),
    Site(id="Uintas-Broken Ridge", area="Uintas", site_name="Broken Ridge", site_type="Mountain",
         latitude=float(FAILING_LATITUDE), longitude=-110.0, sheet_row=4),
    Site(id="Uintas-Valley Aloft", area="Uintas", site_name="Valley Aloft", site_type="Aloft",
         latitude=40.6, longitude=-110.5, sheet_row=5),
]
AREAS = [Area(name="Uintas", sort_index=0), Area(name="Wasatch", sort_index=1)]


def _pilot(name: str, inactive: bool = False) -> Pilot:
    return Pilot(
        pilot_name=name,
        inactive=inactive,
        tracking_share_url=f"https://share.garmin.com/{name}",
        tracking_feed_url=f"https://share.garmin.com/Feed/Share/{name}",
    )


PILOTS = [_pilot("Alex"), _pilot("Quiet"), _pilot("Jordan", inactive=True)]

# 05:45 and 20:10 Denver daylight time: display window 5..21
SUN_TIMES = {
    "results": {"sunrise": "2026-07-01T11:45:00+00:00", "sunset": "2026-07-02T02:10:00+00:00"},
    "status": "OK",
}

FIX = """
      <Placemark><ExtendedData>
        <Data name="Time UTC"><value>{time}</value></Data>
        <Data name="Latitude"><value>{lat}</value></Data>
        <Data name="Longitude"><value>-111.90</value></Data>
        <Data name="Elevation"><value>2500.0 m from MSL</value></Data>
        <Data name="Velocity"><value>40.0 km/h</value></Data>
      </ExtendedData></Placemark>"""

ALEX_KML = (
    '<kml xmlns="http://www.opengis.net/kml/2.2"><Document>'
    + FIX.format(time="7/1/2026 4:05:00 PM", lat="40.47")
    + FIX.format(time="7/1/2026 4:35:00 PM", lat="40.52")
    + FIX.format(time="7/1/2026 9:00:00 PM", lat="40.60")
    + "</Document></kml>"
)
EMPTY_KML = '<kml xmlns="http://www.opengis.net/kml/2.2"><Document></Document></kml>'
GROUND_M = 1500.0

DAILY = {
    "daily": {
        "time": ["2026-07-01", "2026-07-02"],
        "weather_code": [1, 61],
        "temperature_2m_max": [90.2, 70.0],
        "temperature_2m_min": [60.0, 50.0],
        "precipitation_sum": [0.0, 0.2],
        "precipitation_probability_max": [5, 70],
        "wind_speed_10m_mean": [6.0, 11.0],
        "wind_direction_10m_dominant": [320, 200],
        "cloud_cover_mean": [15, 85],
    }
}


def _today_and_tomorrow() -> list[str]:
    today = datetime.now(DENVER).date()
    return day_hours(today.isoformat()) + day_hours((today + timedelta(days=1)).isoformat())


def _synoptic(now: datetime) -> dict:
    stamps = [now - timedelta(minutes=5 * i) for i in reversed(range(12))]
    return {
        "STATION": [
            {
                "STID": "KSLC",
                "OBSERVATIONS": {
                    "date_time": [s.strftime("%Y-%m-%dT%H:%M:%SZ") for s in stamps],
                    "wind_speed_set_1": [9.0] * len(stamps),
                    "wind_gust_set_1": [14.0] * len(stamps),
                    "wind_direction_set_1": [330] * len(stamps),
                },
            }
        ]
    }


def upstream(request: httpx.Request) -> httpx.Response:
    """Fake upstream services, routed by host."""
    if request.url.host == "api.open-meteo.com":
        if request.url.path == "/v1/elevation":
            count = len(request.url.params["latitude"].split(","))
            return httpx.Response(200, json={"elevation": [GROUND_M] * count})
        if request.url.params.get("latitude") == FAILING_LATITUDE:
            return httpx.Response(503)
        if "daily" in request.url.params:
            return httpx.Response(200, json=DAILY)
        return httpx.Response(200, json=build_payload(_today_and_tomorrow()))
    if request.url.host == "api.synopticdata.com":
        if request.url.params.get("stid") != "KSLC":
            return httpx.Response(200, json={"STATION": []})
        return httpx.Response(200, json=_synoptic(datetime.now(timezone.utc)))
    if request.url.host == "api.sunrise-sunset.org":
        return httpx.Response(200, json=SUN_TIMES)
    if request.url.host == "share.garmin.com":
        kml = ALEX_KML if request.url.path.endswith("/Alex") else EMPTY_KML
        return httpx.Response(200, text=kml)
    return httpx.Response(404)


@pytest.fixture
async def test_app():
    """App with services built over the fake upstream."""
    context = AppContext.from_settings(Settings())
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as http:
        app.state.services = AppServices(
            context=context,
            catalog=SiteCatalog(sites=list(SITES), areas=list(AREAS), pilots=list(PILOTS)),
            forecasts=ForecastService(context, OpenMeteoClient(http_client=http, urls=context.urls)),
            readings=StationReadingsClient(context, http_client=http),
            sun=SunriseSunsetClient(context, http_client=http),
            tracks=TrackService(DENVER, http_client=http),
        )
        yield app
    del app.state.services
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    """httpx AsyncClient wired to the test app."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
