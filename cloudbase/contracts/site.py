"""Flying site contracts."""

from __future__ import annotations

from pydantic import ConfigDict, Field, field_validator

from cloudbase.contracts.common import CloudbaseModel
from cloudbase.contracts.enums import SiteType

OCTANTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


class SiteWindDirection(CloudbaseModel):
    """Per-octant suitability text as entered in the site sheet.

    Values are free text; ``good``/``marginal`` style words are interpreted
    by the wind-direction scorer, anything else counts as unfavorable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    n: str = Field(default="", alias="N")
    ne: str = Field(default="", alias="NE")
    e: str = Field(default="", alias="E")
    se: str = Field(default="", alias="SE")
    s: str = Field(default="", alias="S")
    sw: str = Field(default="", alias="SW")
    w: str = Field(default="", alias="W")
    nw: str = Field(default="", alias="NW")

    def rating_text(self, octant: str) -> str:
        return getattr(self, octant.lower())

    @property
    def is_empty(self) -> bool:
        return not any(self.rating_text(o).strip() for o in OCTANTS)


class Site(CloudbaseModel):
    """A flying site or weather station from the site catalog.

    Invariant: ``id`` is unique across the catalog (``{area}-{name}``).
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        use_enum_values=True,
    )

    id: str
    area: str
    site_name: str
    readings_note: str = ""
    forecast_note: str = ""
    site_type: SiteType = SiteType.OTHER
    readings_alt: str = ""
    readings_source: str = ""
    readings_station: str = ""
    pressure_zone_reading_time: str = ""
    latitude: float
    longitude: float
    sheet_row: int = 0
    wind_direction: SiteWindDirection = Field(default_factory=SiteWindDirection)

    @field_validator("site_type", mode="before")
    @classmethod
    def _coerce_site_type(cls, value):
        if value is None or value == "":
            return SiteType.OTHER
        return SiteType(value)

    @property
    def is_mountain(self) -> bool:
        return self.site_type == SiteType.MOUNTAIN

    @property
    def is_soaring(self) -> bool:
        return self.site_type == SiteType.SOARING


class Area(CloudbaseModel):
    """Named grouping of sites, in display order."""

    name: str
    sort_index: int = 0
