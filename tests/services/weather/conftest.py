"""Shared fixtures for forecast tests."""

from __future__ import annotations

import pytest

from cloudbase.contracts.site import Site, SiteWindDirection
from tests.services.weather.forecast_payloads import make_site


@pytest.fixture
def mountain_site() -> Site:
    return make_site()


@pytest.fixture
def soaring_site() -> Site:
    return make_site(
        "Point of the Mountain",
        "Soaring",
        wind_direction=SiteWindDirection(NW="Good", W="Good", SW="Marginal"),
    )
