"""User favorite contracts."""

from __future__ import annotations

from uuid import uuid4

from pydantic import Field, field_validator

from cloudbase.contracts.common import CloudbaseModel
from cloudbase.contracts.enums import FavoriteType
from cloudbase.contracts.site import Site


class UserFavoriteSite(CloudbaseModel):
    """A saved reference to a catalog site or a bare weather station.

    ``favorite_id`` is the site name for site favorites and the station
    id for station favorites. Coordinates are kept as entered (text).
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    app_region: str
    favorite_type: FavoriteType
    favorite_id: str
    favorite_name: str = ""
    readings_source: str = ""
    station_id: str = ""
    readings_alt: str = ""
    site_lat: str = ""
    site_lon: str = ""
    sort_sequence: int = 0

    @field_validator("favorite_type", mode="before")
    @classmethod
    def _coerce_type(cls, value):
        return FavoriteType(value)

    @property
    def display_name(self) -> str:
        return self.favorite_name or self.favorite_id


class ResolvedFavorite(CloudbaseModel):
    """A favorite turned into a displayable site."""

    favorite: UserFavoriteSite
    site: Site
    display_name: str
