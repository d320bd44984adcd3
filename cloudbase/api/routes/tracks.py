"""Pilot live-tracking endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from cloudbase.api.deps import get_catalog, get_context, get_track_service
from cloudbase.config import AppContext
from cloudbase.services.catalog import SiteCatalog
from cloudbase.services.tracks import TrackService, build_segments

router = APIRouter(prefix="/tracks", tags=["tracks"])

MAX_TRACK_DAYS = 7


@router.get("")
async def list_segments(
    days: int = Query(default=1, ge=1, le=MAX_TRACK_DAYS),
    catalog: SiteCatalog = Depends(get_catalog),
    service: TrackService = Depends(get_track_service),
) -> dict[str, Any]:
    """Flight segments of every active pilot over the last ``days`` days."""
    tracks = await service.fetch_tracks(catalog.pilots, days)
    return {
        "pilots": [p.pilot_name for p in catalog.pilots if not p.inactive],
        "segments": [segment.to_dict() for segment in build_segments(tracks)],
    }


@router.get("/{pilot_name}/profile")
async def latest_profile(
    pilot_name: str,
    days: int = Query(default=1, ge=1, le=MAX_TRACK_DAYS),
    catalog: SiteCatalog = Depends(get_catalog),
    context: AppContext = Depends(get_context),
    service: TrackService = Depends(get_track_service),
) -> dict[str, Any]:
    """Altitude against terrain for the pilot's most recent flight segment."""
    pilot = catalog.find_pilot(pilot_name)
    if pilot is None:
        raise HTTPException(status_code=404, detail=f"Pilot '{pilot_name}' not found")

    segments = build_segments(await service.fetch_pilot(pilot, days))
    if not segments:
        raise HTTPException(status_code=404, detail=f"No recent track for '{pilot_name}'")

    latest = segments[-1]
    profile = await service.ground_profile(latest, context.urls.require("groundElevation"))
    return {
        "pilot_name": pilot_name,
        "duration_label": latest.duration_label,
        "max_altitude": latest.max_altitude,
        "profile": [point.to_dict() for point in profile],
    }
