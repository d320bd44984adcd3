"""Google Sheets catalog client: sites, areas, pilots, lift parameters, URLs.

Every tab is read through the Sheets ``values`` endpoint, which returns a
``{"values": [[str, ...], ...]}`` table. Row parsing is done by plain
module functions so it can be exercised without HTTP.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cloudbase.config import AppURL, AppURLs, Settings, fill_url
from cloudbase.contracts.forecast import ColorMapping, LiftParameters
from cloudbase.contracts.site import Area, Site, SiteWindDirection
from cloudbase.contracts.track import Pilot
from cloudbase.services.errors import SheetFormatError

logger = logging.getLogger(__name__)

SITES_RANGE = "Sites"
AREAS_RANGE = "Areas!A2:B"
PILOTS_RANGE = "Pilots"
LIFT_PARAMETERS_RANGE = "LiftParameters"
URLS_RANGE = "URLs"

SITE_MIN_COLUMNS = 12
WIND_DIRECTION_FIRST_COLUMN = 12
INREACH_SHARE_PREFIX = "https://share.garmin.com/"
INREACH_FEED_URL = "https://share.garmin.com/Feed/Share/{shareID}"

_LIFT_PARAMETER_FIELDS = {
    "thermalLapseRate": "thermal_lapse_rate",
    "thermalVelocityConstant": "thermal_velocity_constant",
    "initialTriggerTempDiff": "initial_trigger_temp_diff",
    "ongoingTriggerTempDiff": "ongoing_trigger_temp_diff",
    "thermalRampDistance": "thermal_ramp_distance",
    "thermalRampStartPct": "thermal_ramp_start_pct",
    "cloudbaseLapseRatesDiff": "cloudbase_lapse_rates_diff",
    "thermalGliderSinkRate": "thermal_glider_sink_rate",
}


class SheetsClient:
    """Async client for the region and global metadata sheets."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        urls: AppURLs | None = None,
    ):
        self._settings = settings
        self._client = http_client or httpx.AsyncClient(timeout=30.0)
        self._urls = urls or AppURLs(country=settings.region_country)

    async def get_values(self, sheet_id: str, range_name: str) -> list[list[str]]:
        """Raw cell table for one range.

        Raises:
            httpx.HTTPError: on transport or HTTP status failure.
            SheetFormatError: if the response has no ``values`` table.
        """
        url = fill_url(self._urls.require("sheetsValuesURL"), sheetID=sheet_id, range=range_name)
        resp = await self._client.get(url, params={"alt": "json", "key": self._settings.google_api_key})
        resp.raise_for_status()
        data = resp.json()
        values = data.get("values") if isinstance(data, dict) else None
        if not isinstance(values, list):
            raise SheetFormatError(range_name, "response has no values table")
        return [[str(cell) for cell in row] for row in values if isinstance(row, list)]

    async def get_sites(self) -> list[Site]:
        rows = await self.get_values(self._settings.region_sheet_id, SITES_RANGE)
        return parse_site_rows(rows)

    async def get_area_order(self) -> list[Area]:
        rows = await self.get_values(self._settings.region_sheet_id, AREAS_RANGE)
        return parse_area_rows(rows)

    async def get_pilots(self) -> list[Pilot]:
        rows = await self.get_values(self._settings.region_sheet_id, PILOTS_RANGE)
        return parse_pilot_rows(rows)

    async def get_lift_parameters(self) -> tuple[LiftParameters, dict[str, list[ColorMapping]]]:
        rows = await self.get_values(self._settings.global_sheet_id, LIFT_PARAMETERS_RANGE)
        return parse_lift_parameter_rows(rows)

    async def get_app_urls(self) -> AppURLs:
        rows = await self.get_values(self._settings.global_sheet_id, URLS_RANGE)
        return AppURLs(parse_app_url_rows(rows), country=self._settings.region_country)


def _cell(row: list[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def parse_site_rows(rows: list[list[str]]) -> list[Site]:
    """Sites tab: header row, then one site per row.

    Rows that are short, flagged excluded (first column ``Yes``) or carry
    non-numeric coordinates are skipped.
    """
    sites: list[Site] = []
    for index, row in enumerate(rows):
        if index == 0 or len(row) < SITE_MIN_COLUMNS or row[0] == "Yes":
            continue
        lat, lon = _cell(row, 10), _cell(row, 11)
        if not (_is_number(lat) and _is_number(lon)):
            logger.warning("Skipping site row %d with invalid coordinates: %r, %r", index + 1, lat, lon)
            continue
        directions = {
            octant: _cell(row, WIND_DIRECTION_FIRST_COLUMN + offset)
            for offset, octant in enumerate(("N", "NE", "E", "SE", "S", "SW", "W", "NW"))
        }
        sites.append(
            Site(
                id=f"{row[1]}-{row[2]}",
                area=row[1],
                site_name=row[2],
                readings_note=row[3],
                forecast_note=row[4],
                site_type=row[5],
                readings_alt=row[6],
                readings_source=row[7],
                readings_station=row[8],
                pressure_zone_reading_time=row[9],
                latitude=float(lat),
                longitude=float(lon),
                sheet_row=index + 1,
                wind_direction=SiteWindDirection(**directions),
            )
        )
    return sites


def parse_area_rows(rows: list[list[str]]) -> list[Area]:
    """Areas tab (``A2:B``, no header): exclude flag, area name."""
    areas: list[Area] = []
    for row in rows:
        if len(row) < 2:
            continue
        if _cell(row, 0).lower() == "yes":
            continue
        areas.append(Area(name=_cell(row, 1), sort_index=len(areas)))
    return areas


def feed_url_for(share_url: str) -> str:
    return fill_url(INREACH_FEED_URL, shareID=share_url.rstrip("/").split("/")[-1])


def parse_pilot_rows(rows: list[list[str]]) -> list[Pilot]:
    """Pilots tab: name, InReach share URL, inactive flag."""
    pilots: list[Pilot] = []
    for row in rows[1:]:
        if len(row) < 2:
            logger.warning("Skipping malformed pilot row: %r", row)
            continue
        share_url = row[1].strip()
        if INREACH_SHARE_PREFIX not in share_url:
            logger.warning("Skipping pilot %r with non-InReach share URL", row[0])
            continue
        pilots.append(
            Pilot(
                pilot_name=row[0].strip(),
                inactive=_cell(row, 2).lower() == "yes",
                tracking_share_url=share_url,
                tracking_feed_url=feed_url_for(share_url),
            )
        )
    return pilots


def parse_lift_parameter_rows(
    rows: list[list[str]],
) -> tuple[LiftParameters, dict[str, list[ColorMapping]]]:
    """LiftParameters tab: ``param, value`` rows and ``param, min, max, colour`` rows."""
    values: dict[str, Any] = {}
    mappings: dict[str, list[ColorMapping]] = {}
    for row in rows[1:]:
        if not row:
            continue
        parameter = _cell(row, 0)
        if not _cell(row, 2):
            field = _LIFT_PARAMETER_FIELDS.get(parameter)
            raw = _cell(row, 1)
            if field and _is_number(raw):
                values[field] = float(raw)
            continue
        low, high = _cell(row, 1), _cell(row, 2)
        if len(row) < 4 or not (_is_number(low) and _is_number(high)):
            logger.warning("Invalid lift parameter range row: %r", row)
            continue
        mappings.setdefault(parameter, []).append(
            ColorMapping(min_value=float(low), max_value=float(high), color_name=_cell(row, 3))
        )
    for rows_for_param in mappings.values():
        rows_for_param.sort(key=lambda m: m.min_value)
    return LiftParameters(**values), mappings


def parse_app_url_rows(rows: list[list[str]]) -> list[AppURL]:
    """URLs tab: country (or ``Global``), URL name, template."""
    urls: list[AppURL] = []
    for row in rows[1:]:
        if len(row) < 3:
            logger.warning("Skipping malformed app URL row: %r", row)
            continue
        country, name, url = _cell(row, 0), _cell(row, 1), _cell(row, 2)
        if not name or not url:
            continue
        urls.append(AppURL(app_country=country, url_name=name, url=url))
    return urls

