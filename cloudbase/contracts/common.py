"""Base classes and shared types for Cloudbase contracts.

Unit conventions (all contracts and API responses):
- **Wind speeds**: miles per hour
- **Altitudes**: feet MSL, suffix ``_ft``; ``_m`` marks raw meters
- **Temperatures**: degrees Celsius unless suffixed ``_f``
- **Directions**: degrees true, meteorological "from" convention
- **Datetimes**: timezone-aware; forecast hours in the region timezone,
  station observations in UTC
- **Coordinates**: WGS84 decimal degrees
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class CloudbaseModel(BaseModel):
    """Base model with JSON-friendly serialization.

    - Enums serialize as their values.
    - ``to_dict()`` produces a JSON-safe dict (datetimes as ISO 8601).
    - ``from_dict()`` hydrates from such a dict.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CloudbaseModel":
        return cls.model_validate(data)


class GeoPoint(BaseModel):
    """WGS84 geographic coordinate."""

    latitude: float
    longitude: float

    model_config = ConfigDict(frozen=True)
