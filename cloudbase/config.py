"""Runtime configuration: settings, URL catalog and the shared app context."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import quote

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudbase.contracts.forecast import ColorMapping, LiftParameters

GLOBAL_COUNTRY = "Global"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

# Built-in templates, overridden by rows of the global "URLs" sheet tab.
DEFAULT_URLS: dict[str, str] = {
    "forecastURL": (
        "https://api.open-meteo.com/v1/forecast?latitude={latitude}&longitude={longitude}"
        "&hourly={hourlyVariables}&wind_speed_unit=mph&precipitation_unit=inch"
        "&timezone={encodedTimezone}&forecast_days=4"
    ),
    "dailyForecastURL": (
        "https://api.open-meteo.com/v1/forecast?latitude={latitude}&longitude={longitude}"
        "&daily={dailyVariables}&temperature_unit=fahrenheit&wind_speed_unit=mph"
        "&precipitation_unit=inch&timezone={encodedTimezone}"
    ),
    "groundElevation": "https://api.open-meteo.com/v1/elevation",
    "mesonetHistoryReadingsAPIv2": (
        "https://api.synopticdata.com/v2/stations/timeseries?stid={station}"
        "&recent=420&vars=wind_speed,wind_gust,wind_direction&units=english,speed|mph"
        "&obtimezone=utc"
    ),
    "CUASAHistoryReadingsAPI": (
        "https://sierragliding.us/api/station/{station}/data"
        "?start={readingStart}&end={readingEnd}&sample={readingInterval}"
    ),
    "RMHPAHistoryReadingsAPI": (
        "https://api.rmhpa.org/stations/{station}/readings?limit={readingLimit}"
    ),
    "sunriseSunsetAPI": "https://api.sunrise-sunset.org/json?lat={latitude}&lng={longitude}&formatted=0",
    "sheetsValuesURL": (
        "https://sheets.googleapis.com/v4/spreadsheets/{sheetID}/values/{range}"
    ),
}


def fill_url(template: str, **values: object) -> str:
    """Substitute ``{name}`` placeholders; unknown placeholders are kept."""

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        return quote(str(values[name]), safe=",|:")

    return _PLACEHOLDER.sub(_replace, template)


class Settings(BaseSettings):
    """Process settings read from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    google_api_key: str = Field(default="", validation_alias="GOOGLE_API_KEY")
    global_sheet_id: str = Field(default="", validation_alias="CLOUDBASE_GLOBAL_SHEET_ID")
    region_sheet_id: str = Field(default="", validation_alias="CLOUDBASE_REGION_SHEET_ID")
    region_country: str = Field(default="US", validation_alias="CLOUDBASE_REGION_COUNTRY")
    timezone: str = Field(default="America/Denver", validation_alias="CLOUDBASE_TIMEZONE")
    sunrise_latitude: float = Field(default=40.7608, validation_alias="CLOUDBASE_SUNRISE_LATITUDE")
    sunrise_longitude: float = Field(default=-111.891, validation_alias="CLOUDBASE_SUNRISE_LONGITUDE")
    synoptic_api_token: str = Field(default="", validation_alias="SYNOPTIC_API_TOKEN")
    rmhpa_api_key: str = Field(default="", validation_alias="RMHPA_API_KEY")
    forecast_cache_seconds: float = Field(
        default=1800.0, ge=0, validation_alias="CLOUDBASE_FORECAST_CACHE_SECONDS"
    )
    max_concurrent_forecasts: int = Field(default=3, ge=1, validation_alias="CLOUDBASE_MAX_CONCURRENT_FORECASTS")
    max_concurrent_tracks: int = Field(default=8, ge=1, validation_alias="CLOUDBASE_MAX_CONCURRENT_TRACKS")


class AppURL(BaseModel):
    app_country: str
    url_name: str
    url: str


class AppURLs:
    """URL template catalog keyed by (country, name).

    Lookup prefers an exact country match, then the ``Global`` row, then
    the built-in default.
    """

    def __init__(self, urls: list[AppURL] | None = None, country: str = "US"):
        self.country = country
        self._urls: dict[tuple[str, str], str] = {}
        for entry in urls or []:
            self._urls[(entry.app_country, entry.url_name)] = entry.url

    def get(self, url_name: str, country: str | None = None) -> str | None:
        wanted = country or self.country
        for key in ((wanted, url_name), (GLOBAL_COUNTRY, url_name)):
            if key in self._urls:
                return self._urls[key]
        return DEFAULT_URLS.get(url_name)

    def require(self, url_name: str, country: str | None = None) -> str:
        url = self.get(url_name, country)
        if url is None:
            raise KeyError(f"No URL configured for {url_name!r}")
        return url

    def __len__(self) -> int:
        return len(self._urls)


@dataclass
class AppContext:
    """Everything a service needs besides its HTTP client."""

    settings: Settings
    urls: AppURLs
    lift_parameters: LiftParameters | None = None
    color_mappings: dict[str, list[ColorMapping]] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings) -> AppContext:
        return cls(settings=settings, urls=AppURLs(country=settings.region_country))
