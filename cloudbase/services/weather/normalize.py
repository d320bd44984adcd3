"""Normalize Open-Meteo payloads into per-hour forecast records.

``normalize_forecast`` keeps every hour of the payload (N timestamps in,
N records out); ``display_window`` is the separate filter that trims a
forecast to the daylight hours worth showing.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

from cloudbase.contracts.enums import FlyingPotential, SiteType
from cloudbase.contracts.forecast import (
    DailyForecast,
    DailyForecastDay,
    ForecastHour,
    LiftParameters,
    PotentialScores,
    PressureLevelReading,
    SiteForecast,
)
from cloudbase.contracts.site import Site
from cloudbase.services.errors import ForecastDecodeError
from cloudbase.services.units import celsius_to_fahrenheit, meters_to_feet, round_half_away
from cloudbase.services.weather import scoring
from cloudbase.services.weather.thermals import (
    DEFAULT_TOP_OF_LIFT_FT,
    SURFACE_BUFFER_FT,
    LevelConditions,
    compute_lift_profile,
)
from cloudbase.services.weather.wind_direction import wind_direction_potential

logger = logging.getLogger(__name__)

PRESSURE_LEVELS = (900, 850, 800, 750, 700, 650, 600, 550, 500)
# Levels scored for winds aloft / thermals; mountain sites look higher.
SCORED_LEVELS = (900, 850, 800)
MOUNTAIN_SCORED_LEVELS = (900, 850, 800, 750, 700, 650)

DEFAULT_MAX_PRESSURE_READING = 1000
DEFAULT_START_HOUR = 6
DEFAULT_END_HOUR = 21
SUNSET_HOUR_OFFSET = 13
SURFACE_ALTITUDE_OFFSET_FT = 10
CLOUDBASE_LABEL_CEILING_FT = 100_000

SURFACE_VARIABLES = [
    "weather_code",
    "cloud_cover",
    "cloud_cover_low",
    "cloud_cover_mid",
    "cloud_cover_high",
    "precipitation_probability",
    "precipitation",
    "cape",
    "temperature_2m",
    "surface_pressure",
    "wind_speed_10m",
    "wind_gusts_10m",
    "wind_direction_10m",
]
LEVEL_VARIABLES = [
    "temperature",
    "dew_point",
    "wind_speed",
    "wind_direction",
    "geopotential_height",
]
HOURLY_VARIABLES = SURFACE_VARIABLES + [
    f"{name}_{hpa}hPa" for hpa in PRESSURE_LEVELS for name in LEVEL_VARIABLES
]
DAILY_VARIABLES = [
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "precipitation_probability_max",
    "wind_speed_10m_mean",
    "wind_direction_10m_dominant",
    "cloud_cover_mean",
]


# ------------------------------------------------------------------
# Payload helpers
# ------------------------------------------------------------------


def _number(value: Any) -> float:
    """Nulls (and junk) become 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _columns(block: dict[str, Any], names: list[str], length: int) -> dict[str, list[float]]:
    columns: dict[str, list[float]] = {}
    for name in names:
        raw = block.get(name)
        if raw is None:
            columns[name] = [0.0] * length
            continue
        if not isinstance(raw, list) or len(raw) != length:
            raise ForecastDecodeError(
                f"Column {name!r} has {len(raw) if isinstance(raw, list) else 'no'} values, expected {length}"
            )
        columns[name] = [_number(v) for v in raw]
    return columns


def _time_column(block: Any, key: str) -> list[str]:
    if not isinstance(block, dict):
        raise ForecastDecodeError(f"Missing {key!r} block")
    times = block.get("time")
    if not isinstance(times, list) or not times:
        raise ForecastDecodeError(f"Missing {key}.time")
    return times


def _parse_time(raw: Any, tz: tzinfo) -> datetime:
    try:
        parsed = datetime.fromisoformat(str(raw))
    except ValueError as exc:
        raise ForecastDecodeError(f"Unparseable forecast time {raw!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def altitude_label(feet: float) -> str:
    """``12_600 -> "13k"``."""
    return f"{round_half_away(feet / 1000)}k"


def max_pressure_reading(first_heights: dict[int, float], surface_altitude: float) -> int:
    """Highest pressure level worth displaying for a site.

    Every level whose first-hour height sits within the surface buffer
    pushes the cut-off to the next level up (50 hPa lower).
    """
    result = DEFAULT_MAX_PRESSURE_READING
    for hpa in PRESSURE_LEVELS:
        if round_half_away(first_heights.get(hpa, 0.0)) < surface_altitude + SURFACE_BUFFER_FT:
            result = hpa - 50
    return result


# ------------------------------------------------------------------
# Hourly forecast
# ------------------------------------------------------------------


def normalize_forecast(
    payload: dict[str, Any],
    site: Site,
    lift_parameters: LiftParameters | None,
    tz: tzinfo,
    *,
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
) -> SiteForecast:
    """Turn a raw hourly payload into a :class:`SiteForecast`.

    ``start_hour``/``end_hour`` bound the hours whose thermals count toward
    the day's trigger state; hours outside that band are still emitted but
    evaluated as if no thermal had triggered yet.

    Raises:
        ForecastDecodeError: if the payload has no usable time axis or a
            column whose length disagrees with it.
    """
    if not isinstance(payload, dict):
        raise ForecastDecodeError("Forecast payload is not an object")
    hourly = payload.get("hourly")
    times = _time_column(hourly, "hourly")
    count = len(times)
    columns = _columns(hourly, HOURLY_VARIABLES, count)

    elevation_m = _number(payload.get("elevation"))
    surface_altitude = float(meters_to_feet(elevation_m) + SURFACE_ALTITUDE_OFFSET_FT)
    heights = {
        hpa: [float(meters_to_feet(v)) for v in columns[f"geopotential_height_{hpa}hPa"]]
        for hpa in PRESSURE_LEVELS
    }
    max_pressure = max_pressure_reading({hpa: h[0] for hpa, h in heights.items()}, surface_altitude)

    scored_levels = MOUNTAIN_SCORED_LEVELS if site.is_mountain else SCORED_LEVELS

    hours: list[ForecastHour] = []
    prior_date: date | None = None
    trigger_reached = False

    for index, raw_time in enumerate(times):
        when = _parse_time(raw_time, tz)
        new_date = when.date() != prior_date
        if new_date:
            trigger_reached = False
        prior_date = when.date()
        in_band = start_hour <= when.hour <= end_hour

        def value(name: str) -> float:
            return columns[name][index]

        surface_temp = value("temperature_2m")
        conditions = [
            LevelConditions(
                pressure_hpa=hpa,
                altitude=heights[hpa][index],
                temperature=value(f"temperature_{hpa}hPa"),
                dewpoint=value(f"dew_point_{hpa}hPa"),
            )
            for hpa in PRESSURE_LEVELS
        ]
        lift = compute_lift_profile(
            conditions,
            surface_altitude=surface_altitude,
            surface_temp=surface_temp,
            trigger_reached=trigger_reached and in_band,
            params=lift_parameters,
        )
        if in_band:
            trigger_reached = lift.trigger_reached

        levels = [
            PressureLevelReading(
                pressure_hpa=c.pressure_hpa,
                wind_speed=value(f"wind_speed_{c.pressure_hpa}hPa"),
                wind_direction=value(f"wind_direction_{c.pressure_hpa}hPa"),
                temperature=c.temperature,
                dewpoint=c.dewpoint,
                geopotential_height_ft=c.altitude,
                thermal_velocity=lift.velocities.get(c.pressure_hpa, 0.0),
                thermal_potential=scoring.thermal_potential(lift.velocities.get(c.pressure_hpa, 0.0)),
            )
            for c in conditions
        ]

        cloudbase_label = ""
        if 0 < lift.cloudbase_altitude < CLOUDBASE_LABEL_CEILING_FT:
            cloudbase_label = altitude_label(lift.cloudbase_altitude)

        top_of_lift = lift.top_of_lift_altitude
        top_of_lift_label = ""
        top_of_lift_temp = 0.0
        if top_of_lift > 0:
            if top_of_lift > surface_altitude:
                top_of_lift_label = altitude_label(top_of_lift)
                top_of_lift_temp = lift.top_of_lift_temp
            else:
                top_of_lift_temp = surface_temp
        elif lift_parameters is not None and lift.thermal_dp_temp > value("dew_point_500hPa"):
            # Parcel never stopped rising through the whole column.
            top_of_lift_label = "rocket"
            top_of_lift = DEFAULT_TOP_OF_LIFT_FT
            top_of_lift_temp = value("temperature_500hPa")

        speed = value("wind_speed_10m")
        gust = value("wind_gusts_10m")
        winds_aloft_max = max(value(f"wind_speed_{hpa}hPa") for hpa in scored_levels)
        thermal_max = max(lift.velocities.get(hpa, 0.0) for hpa in scored_levels)
        potential = score_hour(
            site,
            cloud_cover=value("cloud_cover"),
            precipitation_probability=value("precipitation_probability"),
            cape=value("cape"),
            wind_speed=speed,
            wind_gust=gust,
            wind_direction=value("wind_direction_10m"),
            winds_aloft_max=winds_aloft_max,
            thermal_velocity_max=thermal_max,
        )

        hours.append(
            ForecastHour(
                time=when,
                new_date=new_date,
                weather_code=int(value("weather_code")),
                cloud_cover=value("cloud_cover"),
                cloud_cover_low=value("cloud_cover_low"),
                cloud_cover_mid=value("cloud_cover_mid"),
                cloud_cover_high=value("cloud_cover_high"),
                precipitation_probability=value("precipitation_probability"),
                precipitation=value("precipitation"),
                cape=value("cape"),
                surface_temp=surface_temp,
                surface_temp_f=celsius_to_fahrenheit(int(surface_temp)),
                surface_pressure=value("surface_pressure"),
                wind_speed=speed,
                wind_gust=gust,
                wind_direction=value("wind_direction_10m"),
                gust_factor=scoring.gust_factor(speed, gust),
                levels=levels,
                cloudbase_ft=lift.cloudbase_altitude,
                cloudbase_label=cloudbase_label,
                top_of_lift_ft=max(top_of_lift, surface_altitude),
                top_of_lift_label=top_of_lift_label,
                top_of_lift_temp_f=celsius_to_fahrenheit(int(top_of_lift_temp)),
                winds_aloft_max=winds_aloft_max,
                thermal_velocity_max=thermal_max,
                potential=potential,
            )
        )

    logger.debug("Normalized %d forecast hours for %s", len(hours), site.site_name)
    return SiteForecast(
        site_id=site.id,
        site_name=site.site_name,
        elevation_m=elevation_m,
        surface_altitude_ft=surface_altitude,
        max_pressure_reading=max_pressure,
        hours=hours,
    )


def score_hour(
    site: Site,
    *,
    cloud_cover: float,
    precipitation_probability: float,
    cape: float,
    wind_speed: float,
    wind_gust: float,
    wind_direction: float,
    winds_aloft_max: float,
    thermal_velocity_max: float,
) -> PotentialScores:
    """Per-factor levels for one hour and their combination.

    Soaring sites with nothing worse than GREEN are rated on surface
    wind alone, which downgrades hours too light to soar.
    """
    site_type = SiteType(site.site_type)
    scores = {
        "cloud_cover": scoring.cloud_cover_potential(cloud_cover),
        "precipitation": scoring.precipitation_potential(precipitation_probability),
        "cape": scoring.cape_potential(cape),
        "winds_aloft": scoring.wind_speed_potential(winds_aloft_max, site_type),
        "surface_wind": scoring.wind_speed_potential(wind_speed, site_type),
        "surface_gust": scoring.wind_speed_potential(wind_gust, site_type),
        "gust_factor": scoring.gust_factor_potential(scoring.gust_factor(wind_speed, wind_gust)),
        "wind_direction": wind_direction_potential(
            site.wind_direction, site_type, wind_direction, wind_speed, wind_gust
        ),
    }
    combined = scoring.combine(*scores.values())
    if site.is_soaring and combined <= FlyingPotential.GREEN:
        combined = scoring.combine(scores["surface_wind"], scores["surface_gust"])

    return PotentialScores(
        **scores,
        thermal=scoring.thermal_potential(thermal_velocity_max),
        combined=combined,
    )


# ------------------------------------------------------------------
# Display window
# ------------------------------------------------------------------


def forecast_hours(sunrise: str | None = None, sunset: str | None = None) -> tuple[int, int]:
    """Displayed hour band from ``"h:mm"`` sunrise / sunset strings.

    Sunset is a 12-hour clock reading, hence the afternoon offset.
    """
    start, end = DEFAULT_START_HOUR, DEFAULT_END_HOUR
    if sunrise and sunset:
        start = _leading_hour(sunrise, DEFAULT_START_HOUR)
        end = _leading_hour(sunset, DEFAULT_START_HOUR) + SUNSET_HOUR_OFFSET
    return start, end


def _leading_hour(text: str, default: int) -> int:
    try:
        return int(text.split(":", 1)[0])
    except ValueError:
        return default


def display_window(
    forecast: SiteForecast,
    now: datetime,
    *,
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
) -> SiteForecast:
    """Hours inside ``[start_hour, end_hour]`` and no older than an hour ago."""
    cutoff = now - timedelta(hours=1)
    kept: list[ForecastHour] = []
    prior_date: date | None = None
    for hour in forecast.hours:
        if not start_hour <= hour.time.hour <= end_hour or hour.time < cutoff:
            continue
        kept.append(hour.model_copy(update={"new_date": hour.time.date() != prior_date}))
        prior_date = hour.time.date()
    return forecast.model_copy(update={"hours": kept})


# ------------------------------------------------------------------
# Daily forecast
# ------------------------------------------------------------------


def normalize_daily(payload: dict[str, Any]) -> DailyForecast:
    """Daily outlook with labels and rain/snow marker (temps in °F)."""
    if not isinstance(payload, dict):
        raise ForecastDecodeError("Daily payload is not an object")
    daily = payload.get("daily")
    times = _time_column(daily, "daily")
    columns = _columns(daily, DAILY_VARIABLES, len(times))

    days: list[DailyForecastDay] = []
    for index, raw in enumerate(times):
        try:
            day = date.fromisoformat(str(raw))
        except ValueError as exc:
            raise ForecastDecodeError(f"Unparseable forecast date {raw!r}") from exc
        temp_max = round_half_away(columns["temperature_2m_max"][index])
        days.append(
            DailyForecastDay(
                day=day,
                day_label=day.strftime("%a"),
                date_label=f"{day.month}/{day.day}",
                weather_code=int(columns["weather_code"][index]),
                temp_max_f=temp_max,
                temp_min_f=round_half_away(columns["temperature_2m_min"][index]),
                precipitation_sum=columns["precipitation_sum"][index],
                precipitation_probability_max=int(columns["precipitation_probability_max"][index]),
                precipitation_kind="snow" if temp_max <= 32 else "rain",
                wind_speed_mean=columns["wind_speed_10m_mean"][index],
                wind_direction_dominant=int(columns["wind_direction_10m_dominant"][index]),
                cloud_cover_mean=int(columns["cloud_cover_mean"][index]),
            )
        )
    return DailyForecast(days=days)
