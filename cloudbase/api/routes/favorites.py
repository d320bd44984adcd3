"""Favorites resolution endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cloudbase.api.deps import get_catalog
from cloudbase.contracts.favorite import UserFavoriteSite
from cloudbase.services.catalog import SiteCatalog
from cloudbase.services.favorites import resolve_favorites

router = APIRouter(prefix="/favorites", tags=["favorites"])


class ResolveRequest(BaseModel):
    """Favorites to resolve, as stored by the client."""

    favorites: list[UserFavoriteSite] = Field(default_factory=list)
    app_region: str | None = Field(default=None, description="Only resolve this region's favorites")


@router.post("/resolve")
async def resolve(
    request: ResolveRequest,
    catalog: SiteCatalog = Depends(get_catalog),
) -> list[dict[str, Any]]:
    """Favorites that still resolve, in sort order; stale ones are dropped."""
    favorites = request.favorites
    if request.app_region:
        favorites = [f for f in favorites if f.app_region == request.app_region]
    return [
        {
            "display_name": entry.display_name,
            "favorite": entry.favorite.to_dict(),
            "site": entry.site.to_dict(),
        }
        for entry in resolve_favorites(favorites, catalog.sites)
    ]
