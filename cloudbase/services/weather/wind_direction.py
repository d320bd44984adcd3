"""Wind direction geometry and site suitability scoring."""

from __future__ import annotations

from cloudbase.contracts.enums import DirectionRating, FlyingPotential, SiteType
from cloudbase.contracts.site import OCTANTS, SiteWindDirection

OCTANT_WIDTH = 45.0

# Below this speed (mph) direction does not matter.
CALM_WIND_MPH = 3.0

_GOOD_WORDS = {"good", "yes", "y", "ideal", "best"}
_MARGINAL_WORDS = {"marginal", "ok", "okay", "fair", "maybe", "light"}


def normalize_degrees(degrees: float) -> float:
    return degrees % 360.0


def in_range(angle: float, start: float, end: float, *, include_end: bool = True) -> bool:
    """Whether ``angle`` lies on the clockwise arc from ``start`` to ``end``.

    Arcs may wrap through north (e.g. 330 -> 30). All inputs are
    normalized to [0, 360) first.
    """
    a = normalize_degrees(angle)
    s = normalize_degrees(start)
    e = normalize_degrees(end)
    if s <= e:
        return s <= a <= e if include_end else s <= a < e
    if include_end:
        return a >= s or a <= e
    return a >= s or a < e


def octant_range(octant: str) -> tuple[float, float]:
    center = OCTANTS.index(octant.upper()) * OCTANT_WIDTH
    half = OCTANT_WIDTH / 2
    return normalize_degrees(center - half), normalize_degrees(center + half)


def octant_for(direction: float) -> str:
    """Compass octant containing ``direction``; boundaries belong to the clockwise octant."""
    for octant in OCTANTS:
        start, end = octant_range(octant)
        if in_range(direction, start, end, include_end=False):
            return octant
    return OCTANTS[0]


def parse_rating(text: str) -> DirectionRating:
    word = text.strip().lower()
    if word in _GOOD_WORDS:
        return DirectionRating.GOOD
    if word in _MARGINAL_WORDS:
        return DirectionRating.MARGINAL
    return DirectionRating.UNFAVORABLE


def classify_direction(ratings: SiteWindDirection, direction: float) -> DirectionRating:
    return parse_rating(ratings.rating_text(octant_for(direction)))


def wind_direction_potential(
    ratings: SiteWindDirection | None,
    site_type: str | SiteType,
    direction: float | None,
    speed: float | None,
    gust: float | None,
) -> FlyingPotential:
    """Score the surface wind direction against the site's octant ratings.

    Sites without ratings, and calm winds, score GREEN.
    """
    if ratings is None or ratings.is_empty:
        return FlyingPotential.GREEN
    if (speed or 0) < CALM_WIND_MPH and (gust or 0) < CALM_WIND_MPH:
        return FlyingPotential.GREEN

    rating = classify_direction(ratings, direction or 0.0)
    if rating == DirectionRating.GOOD:
        return FlyingPotential.GREEN
    if rating == DirectionRating.MARGINAL:
        return FlyingPotential.YELLOW
    # Crossed or over-the-back wind matters most where pilots ridge soar.
    if SiteType(site_type) == SiteType.SOARING:
        return FlyingPotential.RED
    return FlyingPotential.ORANGE
