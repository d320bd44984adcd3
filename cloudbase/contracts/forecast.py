"""Forecast contracts: lift parameters, per-hour forecast records, daily outlook."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import ConfigDict, Field

from cloudbase.contracts.common import CloudbaseModel
from cloudbase.contracts.enums import FlyingPotential


class LiftParameters(CloudbaseModel):
    """Constants of the thermal model, loaded from the global sheet."""

    thermal_lapse_rate: float = 0.0
    thermal_velocity_constant: float = 0.0
    initial_trigger_temp_diff: float = 0.0
    ongoing_trigger_temp_diff: float = 0.0
    thermal_ramp_distance: float = 0.0
    thermal_ramp_start_pct: float = 0.0
    cloudbase_lapse_rates_diff: float = 0.0
    thermal_glider_sink_rate: float = 0.0


class ColorMapping(CloudbaseModel):
    """A ``[min_value, max_value]`` range mapped to a display colour name."""

    model_config = ConfigDict(frozen=True)

    min_value: float
    max_value: float
    color_name: str


class PressureLevelReading(CloudbaseModel):
    """Conditions at one pressure level for one hour."""

    pressure_hpa: int
    wind_speed: float = 0.0
    wind_direction: float = 0.0
    temperature: float = 0.0
    dewpoint: float = 0.0
    geopotential_height_ft: float = 0.0
    thermal_velocity: float = 0.0
    thermal_potential: FlyingPotential = FlyingPotential.WHITE


class PotentialScores(CloudbaseModel):
    """Per-factor flying-potential levels and their combination."""

    cloud_cover: FlyingPotential = FlyingPotential.GREEN
    precipitation: FlyingPotential = FlyingPotential.GREEN
    cape: FlyingPotential = FlyingPotential.GREEN
    wind_direction: FlyingPotential = FlyingPotential.GREEN
    surface_wind: FlyingPotential = FlyingPotential.GREEN
    surface_gust: FlyingPotential = FlyingPotential.GREEN
    gust_factor: FlyingPotential = FlyingPotential.GREEN
    winds_aloft: FlyingPotential = FlyingPotential.GREEN
    thermal: FlyingPotential = FlyingPotential.WHITE
    combined: FlyingPotential = FlyingPotential.GREEN


class ForecastHour(CloudbaseModel):
    """One hour of a site forecast with every derived value.

    A forecast is a list of these records, so per-hour fields can never
    drift out of alignment with each other.
    """

    time: datetime
    new_date: bool = False
    weather_code: int = 0
    cloud_cover: float = 0.0
    cloud_cover_low: float = 0.0
    cloud_cover_mid: float = 0.0
    cloud_cover_high: float = 0.0
    precipitation_probability: float = 0.0
    precipitation: float = 0.0
    cape: float = 0.0
    surface_temp: float = 0.0
    surface_temp_f: int = 32
    surface_pressure: float = 0.0
    wind_speed: float = 0.0
    wind_gust: float = 0.0
    wind_direction: float = 0.0
    gust_factor: int = 0
    levels: list[PressureLevelReading] = Field(default_factory=list)
    cloudbase_ft: float = 0.0
    cloudbase_label: str = ""
    top_of_lift_ft: float = 0.0
    top_of_lift_label: str = ""
    top_of_lift_temp_f: int = 32
    winds_aloft_max: float = 0.0
    thermal_velocity_max: float = 0.0
    potential: PotentialScores = Field(default_factory=PotentialScores)

    @property
    def day_label(self) -> str:
        return self.time.strftime("%a")

    @property
    def date_label(self) -> str:
        return f"{self.time.month}/{self.time.day}"

    @property
    def time_label(self) -> str:
        suffix = "am" if self.time.hour < 12 else "pm"
        return f"{self.time.hour % 12 or 12} {suffix}"

    @property
    def cloud_cover_label(self) -> str:
        return str(int(self.cloud_cover)) if self.cloud_cover else ""

    @property
    def precipitation_label(self) -> str:
        return str(int(self.precipitation_probability)) if self.precipitation_probability else ""

    @property
    def cape_label(self) -> str:
        rounded = int(self.cape + 0.5) if self.cape > 0 else 0
        return str(rounded) if rounded else ""

    def level(self, pressure_hpa: int) -> PressureLevelReading | None:
        for reading in self.levels:
            if reading.pressure_hpa == pressure_hpa:
                return reading
        return None


class SiteForecast(CloudbaseModel):
    """Normalized hourly forecast for one site."""

    site_id: str
    site_name: str
    elevation_m: float = 0.0
    surface_altitude_ft: float = 0.0
    max_pressure_reading: int = 1000
    hours: list[ForecastHour] = Field(default_factory=list)

    @property
    def potential(self) -> list[FlyingPotential]:
        return [FlyingPotential(h.potential.combined) for h in self.hours]


class DailyForecastDay(CloudbaseModel):
    day: date
    day_label: str
    date_label: str
    weather_code: int = 0
    temp_max_f: int = 0
    temp_min_f: int = 0
    precipitation_sum: float = 0.0
    precipitation_probability_max: int = 0
    precipitation_kind: str = "rain"
    wind_speed_mean: float = 0.0
    wind_direction_dominant: int = 0
    cloud_cover_mean: int = 0


class DailyForecast(CloudbaseModel):
    days: list[DailyForecastDay] = Field(default_factory=list)


class SunTimes(CloudbaseModel):
    """Region sunrise and sunset as local 12-hour ``h:mm`` readings."""

    sunrise: str
    sunset: str
