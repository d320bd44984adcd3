"""Enumerations shared across all Cloudbase contracts."""

from enum import Enum, IntEnum


class _CaseInsensitiveEnum(str, Enum):
    """String enum that accepts any casing / surrounding whitespace."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None


class SiteType(_CaseInsensitiveEnum):
    """Kind of flying site; drives wind thresholds and scored levels."""
    MOUNTAIN = "mountain"
    SOARING = "soaring"
    ALOFT = "aloft"
    STATION = "station"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        member = super()._missing_(value)
        if member is None and isinstance(value, str):
            return cls.OTHER
        return member


class ReadingsSource(_CaseInsensitiveEnum):
    """Provider a station's readings are fetched from."""
    MESONET = "Mesonet"
    CUASA = "CUASA"
    RMHPA = "RMHPA"


class FavoriteType(_CaseInsensitiveEnum):
    SITE = "site"
    STATION = "station"


class DirectionRating(str, Enum):
    """Suitability of a wind octant for a site."""
    GOOD = "good"
    MARGINAL = "marginal"
    UNFAVORABLE = "unfavorable"


class FlyingPotential(IntEnum):
    """Ordinal flying-potential level, lowest (no concern) to highest."""
    WHITE = 0
    LIME = 1
    GREEN = 2
    YELLOW = 3
    ORANGE = 4
    RED = 5

    @property
    def color_name(self) -> str:
        return self.name.lower()

