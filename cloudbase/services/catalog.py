"""Region metadata loader: site catalog, area order, pilots, lift parameters, URLs."""

from __future__ import annotations

import asyncio
import logging

import httpx

from cloudbase.config import AppContext
from cloudbase.contracts.site import Area, Site
from cloudbase.contracts.track import Pilot
from cloudbase.services.errors import CloudbaseError
from cloudbase.services.sheets_client import SheetsClient

logger = logging.getLogger(__name__)

LOAD_ERRORS = (httpx.HTTPError, CloudbaseError, ValueError)


class SiteCatalog:
    """Sites, areas and tracked pilots of the active region, looked up by name."""

    def __init__(
        self,
        sites: list[Site] | None = None,
        areas: list[Area] | None = None,
        pilots: list[Pilot] | None = None,
    ):
        self.sites: list[Site] = sites or []
        self.areas: list[Area] = areas or []
        self.pilots: list[Pilot] = pilots or []

    def find(self, site_name: str) -> Site | None:
        return next((s for s in self.sites if s.site_name == site_name), None)

    def find_pilot(self, pilot_name: str) -> Pilot | None:
        return next((p for p in self.pilots if p.pilot_name == pilot_name), None)

    def by_type(self, *site_types: str) -> list[Site]:
        return [s for s in self.sites if s.site_type in site_types]

    def ordered(self) -> list[Site]:
        """Sites grouped by area order; unknown areas sort last, sheet order within."""
        rank = {a.name: a.sort_index for a in self.areas}
        return sorted(self.sites, key=lambda s: (rank.get(s.area, len(rank)), s.sheet_row))


async def load_metadata(context: AppContext, sheets: SheetsClient) -> SiteCatalog:
    """Fetch every metadata tab concurrently, then apply what arrived.

    A tab that fails leaves the matching part of ``context`` (or the
    catalog) at its previous / empty value.
    """
    urls, lift, sites, areas, pilots = await asyncio.gather(
        sheets.get_app_urls(),
        sheets.get_lift_parameters(),
        sheets.get_sites(),
        sheets.get_area_order(),
        sheets.get_pilots(),
        return_exceptions=True,
    )
    tabs = (("URLs", urls), ("LiftParameters", lift), ("Sites", sites), ("Areas", areas), ("Pilots", pilots))
    for name, result in tabs:
        if isinstance(result, LOAD_ERRORS):
            logger.warning("Failed to load %s metadata: %s", name, result)
        elif isinstance(result, BaseException):
            raise result

    if not isinstance(urls, BaseException):
        context.urls = urls
    if not isinstance(lift, BaseException):
        context.lift_parameters, context.color_mappings = lift
    catalog = SiteCatalog(
        sites=[] if isinstance(sites, BaseException) else sites,
        areas=[] if isinstance(areas, BaseException) else areas,
        pilots=[] if isinstance(pilots, BaseException) else pilots,
    )
    logger.info(
        "Loaded %d sites in %d areas, %d pilots",
        len(catalog.sites),
        len(catalog.areas),
        len(catalog.pilots),
    )
    return catalog
