"""Cloudbase data contracts.

Re-exports all public models and enums for convenient imports::

    from cloudbase.contracts import Site, SiteForecast, FlyingPotential
"""

from cloudbase.contracts.chart import (
    ACTUAL_GUST,
    ACTUAL_WIND,
    FORECAST_GUST,
    FORECAST_WIND,
    ForecastActualComparison,
    WindArrowSample,
    WindSeriesPoint,
)
from cloudbase.contracts.common import CloudbaseModel, GeoPoint
from cloudbase.contracts.enums import (
    DirectionRating,
    FavoriteType,
    FlyingPotential,
    ReadingsSource,
    SiteType,
)
from cloudbase.contracts.favorite import ResolvedFavorite, UserFavoriteSite
from cloudbase.contracts.forecast import (
    ColorMapping,
    DailyForecast,
    DailyForecastDay,
    ForecastHour,
    LiftParameters,
    PotentialScores,
    PressureLevelReading,
    SiteForecast,
    SunTimes,
)
from cloudbase.contracts.readings import (
    ObservationPoint,
    PastReadings,
    ReadingsHistory,
    RecentReading,
    StationReadings,
)
from cloudbase.contracts.site import OCTANTS, Area, Site, SiteWindDirection
from cloudbase.contracts.track import GroundProfilePoint, Pilot, PilotTrack, PilotTrackSegment

__all__ = [
    # Common
    "CloudbaseModel",
    "GeoPoint",
    # Enums
    "DirectionRating",
    "FavoriteType",
    "FlyingPotential",
    "ReadingsSource",
    "SiteType",
    # Site
    "OCTANTS",
    "Area",
    "Site",
    "SiteWindDirection",
    # Forecast
    "ColorMapping",
    "DailyForecast",
    "DailyForecastDay",
    "ForecastHour",
    "LiftParameters",
    "PotentialScores",
    "PressureLevelReading",
    "SiteForecast",
    "SunTimes",
    # Readings
    "ObservationPoint",
    "PastReadings",
    "ReadingsHistory",
    "RecentReading",
    "StationReadings",
    # Favorites
    "ResolvedFavorite",
    "UserFavoriteSite",
    # Tracks
    "GroundProfilePoint",
    "Pilot",
    "PilotTrack",
    "PilotTrackSegment",
    # Chart
    "ACTUAL_GUST",
    "ACTUAL_WIND",
    "FORECAST_GUST",
    "FORECAST_WIND",
    "ForecastActualComparison",
    "WindArrowSample",
    "WindSeriesPoint",
]
