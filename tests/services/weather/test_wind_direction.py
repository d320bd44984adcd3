"""Tests for circular direction ranges and site direction scoring."""

from __future__ import annotations

import pytest

from cloudbase.contracts.enums import DirectionRating, FlyingPotential, SiteType
from cloudbase.contracts.site import SiteWindDirection
from cloudbase.services.weather.wind_direction import (
    classify_direction,
    in_range,
    octant_for,
    octant_range,
    parse_rating,
    wind_direction_potential,
)


class TestInRange:
    def test_wraparound_arc(self):
        assert in_range(350, 340, 10)
        assert in_range(5, 340, 10)
        assert not in_range(180, 340, 10)

    def test_plain_arc(self):
        assert in_range(90, 45, 135)
        assert not in_range(200, 45, 135)

    def test_endpoints(self):
        assert in_range(340, 340, 10)
        assert in_range(10, 340, 10)
        assert not in_range(10, 340, 10, include_end=False)

    def test_normalizes_inputs(self):
        assert in_range(-10, 340, 10)
        assert in_range(720, 350, 10)


class TestOctants:
    @pytest.mark.parametrize(
        ("direction", "octant"),
        [(0, "N"), (359, "N"), (22.4, "N"), (22.5, "NE"), (90, "E"), (180, "S"),
         (225, "SW"), (292.4, "W"), (315, "NW"), (337.5, "N"), (360, "N")],
    )
    def test_octant_for(self, direction, octant):
        assert octant_for(direction) == octant

    def test_octant_range_wraps_for_north(self):
        assert octant_range("N") == (337.5, 22.5)
        assert octant_range("e") == (67.5, 112.5)


class TestDirectionRating:
    RATINGS = SiteWindDirection(N="good", NE="marginal", E="", NW="Yes")

    def test_parse_rating(self):
        assert parse_rating(" Good ") == DirectionRating.GOOD
        assert parse_rating("ok") == DirectionRating.MARGINAL
        assert parse_rating("") == DirectionRating.UNFAVORABLE

    def test_classify(self):
        assert classify_direction(self.RATINGS, 10) == DirectionRating.GOOD
        assert classify_direction(self.RATINGS, 45) == DirectionRating.MARGINAL
        assert classify_direction(self.RATINGS, 90) == DirectionRating.UNFAVORABLE
        assert classify_direction(self.RATINGS, 315) == DirectionRating.GOOD

    def test_potential_by_rating(self):
        assert wind_direction_potential(self.RATINGS, "Mountain", 0, 10, 12) == FlyingPotential.GREEN
        assert wind_direction_potential(self.RATINGS, "Mountain", 45, 10, 12) == FlyingPotential.YELLOW
        assert wind_direction_potential(self.RATINGS, "Mountain", 180, 10, 12) == FlyingPotential.ORANGE
        assert wind_direction_potential(self.RATINGS, SiteType.SOARING, 180, 10, 12) == FlyingPotential.RED

    def test_calm_wind_is_neutral(self):
        assert wind_direction_potential(self.RATINGS, "Soaring", 180, 1, 2) == FlyingPotential.GREEN

    def test_site_without_ratings_is_neutral(self):
        assert wind_direction_potential(SiteWindDirection(), "Soaring", 180, 15, 20) == FlyingPotential.GREEN
        assert wind_direction_potential(None, "station", 180, 15, 20) == FlyingPotential.GREEN
