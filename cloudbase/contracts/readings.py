"""Station readings contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from cloudbase.contracts.common import CloudbaseModel


class RecentReading(CloudbaseModel):
    """One bar of the recent-history chart."""

    time_label: str
    wind_speed: float
    wind_gust: float | None = None
    wind_direction: float = 0.0


class ReadingsHistory(CloudbaseModel):
    """Latest station readings, oldest first.

    ``error_message`` is set when the station could not be read or has
    gone stale; ``readings`` may still carry whatever was available.
    """

    station_id: str
    readings: list[RecentReading] = Field(default_factory=list)
    error_message: str | None = None


class ObservationPoint(CloudbaseModel):
    timestamp: datetime
    wind_speed: float
    wind_gust: float | None = None
    wind_direction: float = 0.0


class PastReadings(CloudbaseModel):
    """Observations covering the comparison window, in time order."""

    station_id: str
    points: list[ObservationPoint] = Field(default_factory=list)


class StationReadings(CloudbaseModel):
    history: ReadingsHistory
    past: PastReadings
