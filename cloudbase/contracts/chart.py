"""Forecast vs. actual chart contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from cloudbase.contracts.common import CloudbaseModel

ACTUAL_WIND = "Actual Wind"
ACTUAL_GUST = "Actual Gust"
FORECAST_WIND = "Forecast Wind"
FORECAST_GUST = "Forecast Gust"


class WindSeriesPoint(CloudbaseModel):
    time: datetime
    value: float | None = None
    series: str


class WindArrowSample(CloudbaseModel):
    time: datetime
    speed: float
    direction: float


class ForecastActualComparison(CloudbaseModel):
    """Chart-ready series aligned to a shared time domain."""

    domain_start: datetime
    domain_end: datetime
    y_min: float | None = None
    y_max: float | None = None
    points: list[WindSeriesPoint] = Field(default_factory=list)
    actual_arrows: list[WindArrowSample] = Field(default_factory=list)
    forecast_arrows: list[WindArrowSample] = Field(default_factory=list)

    def series(self, name: str) -> list[WindSeriesPoint]:
        return [p for p in self.points if p.series == name]
