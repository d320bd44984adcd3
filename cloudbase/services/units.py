"""Unit conversions and rounding helpers.

Rounding is half away from zero (``2.5 -> 3``, ``-2.5 -> -3``), not
Python's banker's rounding.
"""

from __future__ import annotations

import math

METERS_TO_FEET = 3.28084
KM_TO_MILES = 0.621371


def round_half_away(value: float) -> int:
    if value >= 0:
        return int(math.floor(value + 0.5))
    return int(math.ceil(value - 0.5))


def round_to_one_decimal(value: float) -> float:
    return round_half_away(value * 10) / 10


def celsius_to_fahrenheit(celsius: float) -> int:
    return round_half_away(celsius * 9 / 5 + 32)


def meters_to_feet(meters: float) -> int:
    return round_half_away(meters * METERS_TO_FEET)


def feet_to_meters(feet: float) -> int:
    return round_half_away(feet / METERS_TO_FEET)


def km_to_miles(km: float) -> int:
    return round_half_away(km * KM_TO_MILES)


def parse_float(text: object, default: float = 0.0) -> float:
    """Lenient numeric parse for sheet cells and feed values."""
    try:
        value = float(str(text).strip())
    except (TypeError, ValueError):
        return default
    if math.isnan(value):
        return default
    return value
