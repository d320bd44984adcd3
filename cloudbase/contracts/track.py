"""Pilot live-tracking contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from cloudbase.contracts.common import CloudbaseModel


class Pilot(CloudbaseModel):
    pilot_name: str
    inactive: bool = False
    tracking_share_url: str
    tracking_feed_url: str


class PilotTrack(CloudbaseModel):
    """One tracker fix, converted to mph / feet."""

    pilot_name: str
    date_time: datetime
    latitude: float
    longitude: float
    speed: float = 0.0
    altitude: float = 0.0
    heading: float = 0.0
    in_emergency: bool = False
    message: str | None = None


class PilotTrackSegment(CloudbaseModel):
    """A run of fixes with no gap longer than the segment threshold."""

    pilot_name: str
    tracks: list[PilotTrack] = Field(default_factory=list)
    duration_label: str = "0:00"
    start_to_end_km: float = 0.0
    total_distance_km: float = 0.0
    max_altitude: float = 0.0

    @property
    def start(self) -> datetime:
        return self.tracks[0].date_time

    @property
    def end(self) -> datetime:
        return self.tracks[-1].date_time


class GroundProfilePoint(CloudbaseModel):
    """A fix's altitude against the terrain below it (feet).

    ``ground_elevation`` and ``height_above_ground`` are None where the
    terrain lookup failed.
    """

    date_time: datetime
    latitude: float
    longitude: float
    altitude: float
    ground_elevation: int | None = None
    height_above_ground: float | None = None
