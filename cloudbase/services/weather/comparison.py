"""Forecast vs. observed wind: chart-ready series on a shared time domain."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from cloudbase.contracts.chart import (
    ACTUAL_GUST,
    ACTUAL_WIND,
    FORECAST_GUST,
    FORECAST_WIND,
    ForecastActualComparison,
    WindArrowSample,
    WindSeriesPoint,
)
from cloudbase.contracts.forecast import SiteForecast
from cloudbase.contracts.readings import ObservationPoint, PastReadings

ARROW_BUCKET_MINUTES = 20
Y_PADDING_FRACTION = 0.1


def _interpolate(a: WindSeriesPoint, b: WindSeriesPoint, at: datetime) -> float | None:
    if a.value is None or b.value is None:
        return None
    span = (b.time - a.time).total_seconds()
    if span == 0:
        return None
    fraction = (at - a.time).total_seconds() / span
    return a.value + (b.value - a.value) * fraction


def extrapolate_to_domain_edges(
    points: list[WindSeriesPoint],
    start: datetime,
    end: datetime,
) -> list[WindSeriesPoint]:
    """In-domain points of one series plus interpolated points at both edges.

    An edge point is added only when a point exists on each side of the
    edge and neither carries a missing value; a series that already has a
    point exactly on an edge gets no extra one.
    """
    if not points:
        return []
    ordered = sorted(points, key=lambda p: p.time)
    result: list[WindSeriesPoint] = []

    first_in = next((i for i, p in enumerate(ordered) if p.time >= start), None)
    if first_in is not None and first_in > 0 and ordered[first_in].time != start:
        value = _interpolate(ordered[first_in - 1], ordered[first_in], start)
        if value is not None:
            result.append(WindSeriesPoint(time=start, value=value, series=ordered[first_in].series))

    result.extend(p for p in ordered if start <= p.time <= end)

    last_in = next((i for i in range(len(ordered) - 1, -1, -1) if ordered[i].time <= end), None)
    if last_in is not None and last_in < len(ordered) - 1 and ordered[last_in].time != end:
        value = _interpolate(ordered[last_in], ordered[last_in + 1], end)
        if value is not None:
            result.append(WindSeriesPoint(time=end, value=value, series=ordered[last_in].series))

    return result


def bucket_start(moment: datetime, minutes: int = ARROW_BUCKET_MINUTES) -> datetime:
    return moment.replace(minute=moment.minute - moment.minute % minutes, second=0, microsecond=0)


def sample_actuals(
    observations: Iterable[ObservationPoint],
    minutes: int = ARROW_BUCKET_MINUTES,
) -> list[WindArrowSample]:
    """First observation of every ``minutes``-wide bucket, in time order."""
    firsts: dict[datetime, ObservationPoint] = {}
    for obs in observations:
        firsts.setdefault(bucket_start(obs.timestamp, minutes), obs)
    samples = [
        WindArrowSample(time=obs.timestamp, speed=obs.wind_speed, direction=obs.wind_direction)
        for obs in firsts.values()
    ]
    return sorted(samples, key=lambda s: s.time)


def y_domain(values: Iterable[float | None]) -> tuple[float, float] | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    low, high = min(present), max(present)
    spread = high - low
    padding = max(1.0, high) * Y_PADDING_FRACTION if spread == 0 else spread * Y_PADDING_FRACTION
    return low - padding, high + padding


def build_comparison(
    actual: PastReadings,
    forecast: SiteForecast | None = None,
) -> ForecastActualComparison | None:
    """Merge observations with the forecast over the observed time span.

    The y range covers the plotted points only. Returns None when there
    are no observations to anchor the domain.
    """
    if not actual.points:
        return None
    start = min(p.timestamp for p in actual.points)
    end = max(p.timestamp for p in actual.points)

    points: list[WindSeriesPoint] = []
    for obs in actual.points:
        points.append(WindSeriesPoint(time=obs.timestamp, value=obs.wind_speed, series=ACTUAL_WIND))
        gust = obs.wind_gust or None
        points.append(WindSeriesPoint(time=obs.timestamp, value=gust, series=ACTUAL_GUST))

    forecast_arrows: list[WindArrowSample] = []
    if forecast is not None and forecast.hours:
        wind = [WindSeriesPoint(time=h.time, value=h.wind_speed, series=FORECAST_WIND) for h in forecast.hours]
        gust = [WindSeriesPoint(time=h.time, value=h.wind_gust, series=FORECAST_GUST) for h in forecast.hours]
        points += extrapolate_to_domain_edges(wind, start, end)
        points += extrapolate_to_domain_edges(gust, start, end)
        forecast_arrows = [
            WindArrowSample(time=h.time, speed=h.wind_speed, direction=h.wind_direction)
            for h in forecast.hours
            if start <= h.time <= end
        ]

    bounds = y_domain(p.value for p in points)
    return ForecastActualComparison(
        domain_start=start,
        domain_end=end,
        y_min=bounds[0] if bounds else None,
        y_max=bounds[1] if bounds else None,
        points=points,
        actual_arrows=[s for s in sample_actuals(actual.points) if start <= s.time <= end],
        forecast_arrows=forecast_arrows,
    )
