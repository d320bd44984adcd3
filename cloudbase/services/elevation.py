"""Ground elevation lookups against the Open-Meteo elevation API.

The API accepts at most 99 points per call, so larger inputs are paged.
Each page fails independently: its points come back as None while the
other pages' elevations are still returned.
"""

from __future__ import annotations

import logging

import httpx

from cloudbase.services.units import meters_to_feet

logger = logging.getLogger(__name__)

PAGE_SIZE = 99


def pages(coordinates: list[tuple[float, float]], size: int = PAGE_SIZE) -> list[list[tuple[float, float]]]:
    return [coordinates[start : start + size] for start in range(0, len(coordinates), size)]


async def get_ground_elevations(
    coordinates: list[tuple[float, float]],
    url: str,
    http_client: httpx.AsyncClient | None = None,
) -> list[int | None]:
    """Query ground elevations in feet.

    Parameters
    ----------
    coordinates:
        List of (latitude, longitude) tuples.
    url:
        Elevation endpoint (the ``groundElevation`` catalog entry).

    Returns
    -------
    One entry per input coordinate, in order: elevation in feet, or None
    where the lookup failed.
    """
    if not coordinates:
        return []

    client = http_client or httpx.AsyncClient(timeout=30.0)
    results: list[int | None] = []
    try:
        for page in pages(coordinates):
            results.extend(await _elevation_page(client, url, page))
    finally:
        if http_client is None:
            await client.aclose()
    return results


async def _elevation_page(
    client: httpx.AsyncClient,
    url: str,
    page: list[tuple[float, float]],
) -> list[int | None]:
    params = {
        "latitude": ",".join(str(lat) for lat, _lon in page),
        "longitude": ",".join(str(lon) for _lat, lon in page),
    }
    try:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
        elevations = resp.json().get("elevation") or []
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        logger.warning("Elevation lookup failed for %d points: %s", len(page), exc)
        return [None] * len(page)

    results: list[int | None] = []
    for i in range(len(page)):
        meters = elevations[i] if i < len(elevations) else None
        results.append(meters_to_feet(meters) if isinstance(meters, (int, float)) else None)
    return results

