"""Flying-potential colour scoring.

Each metric maps to a :class:`FlyingPotential` level through an ordered
table of ``(upper_bound, level)`` rows; the first row whose bound is not
exceeded wins, values above the last bound get the table's ceiling level.
Missing inputs are scored as zero. Every function is total and monotonic
non-decreasing in its input.
"""

from __future__ import annotations

from cloudbase.contracts.enums import FlyingPotential, SiteType
from cloudbase.contracts.forecast import ColorMapping, ForecastHour

G = FlyingPotential

Threshold = tuple[tuple[float, FlyingPotential], ...]

CLOUD_COVER: Threshold = ((39, G.GREEN), (59, G.YELLOW), (79, G.ORANGE))
PRECIPITATION: Threshold = ((19, G.GREEN), (39, G.YELLOW), (59, G.ORANGE))
CAPE: Threshold = ((299, G.GREEN), (599, G.YELLOW), (799, G.ORANGE))
GUST_FACTOR: Threshold = ((4, G.GREEN), (7, G.YELLOW), (11, G.ORANGE))
THERMAL_VELOCITY: Threshold = (
    (0.9, G.WHITE),
    (1.9, G.LIME),
    (3.9, G.GREEN),
    (4.9, G.YELLOW),
    (5.9, G.ORANGE),
)

WIND_SPEED: dict[str, Threshold] = {
    SiteType.SOARING.value: (
        (8, G.LIME),
        (19, G.GREEN),
        (24, G.YELLOW),
        (29, G.ORANGE),
    ),
    "default": ((11, G.GREEN), (17, G.YELLOW), (23, G.ORANGE)),
}


def _bucket(value: float, table: Threshold, ceiling: FlyingPotential = G.RED) -> FlyingPotential:
    for upper, level in table:
        if value <= upper:
            return level
    return ceiling


def _whole(value: float | None) -> int:
    # Truncates toward zero so 39.9% cloud still reads as 39.
    return int(value or 0)


def cloud_cover_potential(percent: float | None) -> FlyingPotential:
    return _bucket(_whole(percent), CLOUD_COVER)


def precipitation_potential(percent: float | None) -> FlyingPotential:
    return _bucket(_whole(percent), PRECIPITATION)


def cape_potential(cape: float | None) -> FlyingPotential:
    return _bucket(_whole(cape), CAPE)


def gust_factor_potential(gust_factor: float | None) -> FlyingPotential:
    return _bucket(_whole(gust_factor), GUST_FACTOR)


def wind_speed_potential(speed: float | None, site_type: str | SiteType = SiteType.OTHER) -> FlyingPotential:
    """Score a surface or aloft wind speed (mph) for a site type."""
    key = SiteType(site_type).value
    table = WIND_SPEED.get(key, WIND_SPEED["default"])
    return _bucket(_whole(speed), table)


def thermal_potential(velocity: float | None) -> FlyingPotential:
    """Score a thermal velocity in m/s (already rounded to one decimal)."""
    return _bucket(velocity or 0.0, THERMAL_VELOCITY)


def gust_factor(speed: float | None, gust: float | None) -> int:
    return _whole(gust) - _whole(speed)


def combine(*levels: FlyingPotential | int) -> FlyingPotential:
    """Highest (worst) of the given levels; GREEN when nothing is given."""
    if not levels:
        return G.GREEN
    return FlyingPotential(max(int(level) for level in levels))


# ------------------------------------------------------------------
# Sheet-configured display colours
# ------------------------------------------------------------------


def color_for(mappings: dict[str, list[ColorMapping]], parameter: str, value: float | None) -> str | None:
    """Colour name of the first range containing ``value``, if any."""
    if value is None:
        return None
    for mapping in mappings.get(parameter, []):
        if mapping.min_value <= value <= mapping.max_value:
            return mapping.color_name
    return None


def hour_colors(hour: ForecastHour, mappings: dict[str, list[ColorMapping]]) -> dict[str, str]:
    """Colours for the hour's numeric fields that have a configured range.

    Mapping parameters are matched against :class:`ForecastHour` field names.
    """
    colors: dict[str, str] = {}
    for parameter in mappings:
        value = getattr(hour, parameter, None)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        color = color_for(mappings, parameter, value)
        if color is not None:
            colors[parameter] = color
    return colors
