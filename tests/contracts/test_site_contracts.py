"""Tests for site, forecast-hour and enum contracts."""

from __future__ import annotations

from datetime import datetime, timezone

from cloudbase.contracts import FlyingPotential, ForecastHour, Site, SiteType, SiteWindDirection


def _site(**kwargs) -> Site:
    return Site(id="Wasatch-Inspo", area="Wasatch", site_name="Inspo", latitude=40.47, longitude=-111.9, **kwargs)


class TestSite:
    def test_site_type_any_casing(self):
        assert _site(site_type="Soaring").site_type == "soaring"
        assert _site(site_type=" MOUNTAIN ").is_mountain

    def test_unknown_or_blank_site_type(self):
        assert _site(site_type="Paramotor").site_type == SiteType.OTHER
        assert _site(site_type="").site_type == SiteType.OTHER
        assert _site().site_type == SiteType.OTHER

    def test_wind_direction_by_octant(self):
        ratings = SiteWindDirection(N="Good", SW="Marginal")
        assert ratings.rating_text("sw") == "Marginal"
        assert ratings.nw == ""
        assert not ratings.is_empty
        assert SiteWindDirection().is_empty

    def test_serializes_with_octant_names(self):
        data = _site(wind_direction=SiteWindDirection(N="Good")).to_dict()
        assert data["wind_direction"]["N"] == "Good"
        assert data["site_type"] == "other"
        assert Site.from_dict(data).wind_direction.n == "Good"


class TestForecastHour:
    def test_labels(self):
        hour = ForecastHour(
            time=datetime(2026, 7, 4, 15, 0, tzinfo=timezone.utc),
            cloud_cover=35.6,
            precipitation_probability=0,
            cape=249.5,
        )
        assert hour.day_label == "Sat"
        assert hour.date_label == "7/4"
        assert hour.time_label == "3 pm"
        assert hour.cloud_cover_label == "35"
        assert hour.precipitation_label == ""
        assert hour.cape_label == "250"

    def test_midnight_and_noon(self):
        midnight = ForecastHour(time=datetime(2026, 7, 4, 0, 0, tzinfo=timezone.utc))
        noon = ForecastHour(time=datetime(2026, 7, 4, 12, 0, tzinfo=timezone.utc))
        assert midnight.time_label == "12 am"
        assert noon.time_label == "12 pm"


class TestFlyingPotential:
    def test_ordering_and_names(self):
        assert FlyingPotential.WHITE < FlyingPotential.LIME < FlyingPotential.RED
        assert FlyingPotential.ORANGE.color_name == "orange"
