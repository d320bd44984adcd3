"""Site catalog endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from cloudbase.api.deps import get_catalog
from cloudbase.services.catalog import SiteCatalog

router = APIRouter(prefix="/sites", tags=["sites"])


@router.get("")
async def list_sites(catalog: SiteCatalog = Depends(get_catalog)) -> dict[str, Any]:
    """Sites in area order, with the area list itself."""
    return {
        "areas": [a.name for a in catalog.areas],
        "sites": [s.to_dict() for s in catalog.ordered()],
    }


@router.get("/{site_name}")
async def get_site(site_name: str, catalog: SiteCatalog = Depends(get_catalog)) -> dict[str, Any]:
    site = catalog.find(site_name)
    if site is None:
        raise HTTPException(status_code=404, detail=f"Site '{site_name}' not found")
    return site.to_dict()
