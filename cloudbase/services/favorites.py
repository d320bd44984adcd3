"""User favorites: resolution against the site catalog and the favorites book."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cloudbase.contracts.enums import FavoriteType, SiteType
from cloudbase.contracts.favorite import ResolvedFavorite, UserFavoriteSite
from cloudbase.contracts.site import Site, SiteWindDirection
from cloudbase.services.errors import FavoriteExistsError, FavoriteNotFoundError
from cloudbase.services.units import parse_float

logger = logging.getLogger(__name__)

FAVORITES_AREA = "Favorites"


def station_site(favorite: UserFavoriteSite) -> Site:
    """Transient site record for a station favorite (no wind-direction ratings)."""
    return Site(
        id=f"favorite-{favorite.station_id}",
        area=FAVORITES_AREA,
        site_name=favorite.favorite_id,
        site_type=SiteType.STATION,
        readings_alt=favorite.readings_alt,
        readings_source=favorite.readings_source,
        readings_station=favorite.station_id,
        latitude=parse_float(favorite.site_lat),
        longitude=parse_float(favorite.site_lon),
        sheet_row=0,
        wind_direction=SiteWindDirection(),
    )


def resolve_favorite(favorite: UserFavoriteSite, sites: Iterable[Site]) -> ResolvedFavorite | None:
    """Concrete site for ``favorite``, or None when its site left the catalog."""
    if favorite.favorite_type == FavoriteType.STATION:
        site = station_site(favorite)
    else:
        site = next((s for s in sites if s.site_name == favorite.favorite_id), None)
        if site is None:
            logger.info("Favorite site %r no longer in catalog", favorite.favorite_id)
            return None
    return ResolvedFavorite(favorite=favorite, site=site, display_name=favorite.display_name)


def resolve_favorites(
    favorites: Iterable[UserFavoriteSite],
    sites: Iterable[Site],
) -> list[ResolvedFavorite]:
    """Resolve in sort order, silently dropping favorites that do not resolve."""
    sites = list(sites)
    resolved: list[ResolvedFavorite] = []
    for favorite in sorted(favorites, key=lambda f: f.sort_sequence):
        entry = resolve_favorite(favorite, sites)
        if entry is not None:
            resolved.append(entry)
    return resolved


def matching_favorite(site: Site, favorites: Iterable[UserFavoriteSite]) -> UserFavoriteSite | None:
    """Favorite pointing at ``site``: by name for sites, by station id for stations."""
    for favorite in favorites:
        if favorite.favorite_type == FavoriteType.SITE and favorite.favorite_id == site.site_name:
            return favorite
        if favorite.favorite_type == FavoriteType.STATION and favorite.station_id == site.readings_station:
            return favorite
    return None


class FavoritesBook:
    """In-memory favorites list for all regions.

    Persisting the list is left to the caller (``to_dicts`` /
    ``from_dicts``).
    """

    def __init__(self, favorites: Iterable[UserFavoriteSite] | None = None):
        self._favorites: list[UserFavoriteSite] = list(favorites or [])

    @classmethod
    def from_dicts(cls, rows: Iterable[dict]) -> FavoritesBook:
        return cls(UserFavoriteSite.model_validate(row) for row in rows)

    def to_dicts(self) -> list[dict]:
        return [f.to_dict() for f in self._favorites]

    def __len__(self) -> int:
        return len(self._favorites)

    def _index(self, favorite_type: str | FavoriteType, favorite_id: str) -> int | None:
        wanted = FavoriteType(favorite_type)
        for i, favorite in enumerate(self._favorites):
            if favorite.favorite_type == wanted and favorite.favorite_id == favorite_id:
                return i
        return None

    def contains(self, favorite_type: str | FavoriteType, favorite_id: str) -> bool:
        return self._index(favorite_type, favorite_id) is not None

    def add(
        self,
        app_region: str,
        favorite_type: str | FavoriteType,
        favorite_id: str,
        favorite_name: str = "",
        *,
        readings_source: str = "",
        station_id: str = "",
        readings_alt: str = "",
        site_lat: str = "",
        site_lon: str = "",
    ) -> UserFavoriteSite:
        """Append a favorite after the current last one.

        Raises:
            FavoriteExistsError: if the same type and id is already saved.
        """
        favorite_type = FavoriteType(favorite_type)
        if self.contains(favorite_type, favorite_id):
            raise FavoriteExistsError(favorite_type.value, favorite_id)
        next_sequence = max((f.sort_sequence for f in self._favorites), default=0) + 1
        favorite = UserFavoriteSite(
            app_region=app_region,
            favorite_type=favorite_type,
            favorite_id=favorite_id,
            favorite_name=favorite_name,
            readings_source=readings_source,
            station_id=station_id,
            readings_alt=readings_alt,
            site_lat=site_lat,
            site_lon=site_lon,
            sort_sequence=next_sequence,
        )
        self._favorites.append(favorite)
        return favorite

    def remove(self, favorite_type: str | FavoriteType, favorite_id: str) -> UserFavoriteSite:
        """Raises FavoriteNotFoundError if no such favorite is saved."""
        index = self._index(favorite_type, favorite_id)
        if index is None:
            raise FavoriteNotFoundError(FavoriteType(favorite_type).value, favorite_id)
        return self._favorites.pop(index)

    def rename(self, favorite_type: str | FavoriteType, favorite_id: str, favorite_name: str) -> UserFavoriteSite:
        index = self._index(favorite_type, favorite_id)
        if index is None:
            raise FavoriteNotFoundError(FavoriteType(favorite_type).value, favorite_id)
        renamed = self._favorites[index].model_copy(update={"favorite_name": favorite_name})
        self._favorites[index] = renamed
        return renamed

    def for_region(self, app_region: str) -> list[UserFavoriteSite]:
        return sorted(
            (f for f in self._favorites if f.app_region == app_region),
            key=lambda f: f.sort_sequence,
        )

    def move(self, app_region: str, from_index: int, to_index: int) -> list[UserFavoriteSite]:
        """Move one of a region's favorites and renumber them 0..n-1.

        Raises:
            FavoriteNotFoundError: if ``from_index`` is out of range.
        """
        ordered = self.for_region(app_region)
        if not 0 <= from_index < len(ordered):
            raise FavoriteNotFoundError("index", str(from_index))
        moved = ordered.pop(from_index)
        ordered.insert(max(0, min(to_index, len(ordered))), moved)

        renumbered = {f.id: f.model_copy(update={"sort_sequence": i}) for i, f in enumerate(ordered)}
        self._favorites = [renumbered.get(f.id, f) for f in self._favorites]
        return [renumbered[f.id] for f in ordered]
