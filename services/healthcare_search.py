"""
Healthcare facility discovery

Public search API over the Overpass mirror client:

    query builder -> mirror failover -> normalizer (or synthetic fallback)

A search never raises for upstream trouble. When every mirror fails the
result holds four placeholder facilities and fallback_used is True, so
callers can tell users that live data was unavailable.

HealthcareSearchService holds no per-search state; the fallback flag is
returned with each SearchResult rather than stored on the service, so
concurrent searches cannot observe each other's outcome.
"""

import random
import re
import time
from typing import Any, Dict, Optional

from data_sources import async_geocoding
from data_sources.async_osm_api import OverpassMirrorClient
from data_sources.facility_normalization import normalize_elements
from data_sources.fallback_data import generate_demo_facilities
from data_sources.models import GeocodeResult, ReverseGeocodeResult, SearchResult
from data_sources.overpass_query import build_healthcare_query, normalize_facility_type
from logging_config import get_logger, log_performance

logger = get_logger(__name__)

DEFAULT_RADIUS_KM = 10.0

_FACILITY_ID = re.compile(r"^osm_(node|way|relation)_(\d+)$")


class HealthcareSearchService:
    """Nearby healthcare search, geocoding and mirror availability."""

    def __init__(self, client: Optional[OverpassMirrorClient] = None,
                 rng: Optional[random.Random] = None,
                 geocoding_session=None):
        self.client = client or OverpassMirrorClient()
        self._rng = rng
        self._geocoding_session = geocoding_session

    async def search_nearby_healthcare(self, lat: float, lon: float,
                                       radius_km: float = DEFAULT_RADIUS_KM,
                                       facility_type: Optional[str] = None) -> SearchResult:
        """
        Find healthcare facilities around a point.

        Args:
            lat, lon: Search origin
            radius_km: Search radius in kilometers
            facility_type: hospital, clinic, pharmacy, doctors, or None/"any"

        Returns:
            SearchResult with facilities sorted by distance
        """
        start = time.time()
        query = build_healthcare_query(lat, lon, radius_km, facility_type)
        fetched = await self.client.fetch(query, caller="healthcare")

        if fetched is not None:
            endpoint, payload = fetched
            result = SearchResult(
                facilities=normalize_elements(payload["elements"], lat, lon),
                fallback_used=False,
                endpoint=endpoint,
            )
        else:
            logger.warning(
                "Overpass API unavailable, using demo data",
                extra={"lat": lat, "lon": lon, "radius_km": radius_km}
            )
            result = SearchResult(
                facilities=generate_demo_facilities(lat, lon, radius_km, self._rng),
                fallback_used=True,
                endpoint=None,
            )

        log_performance(
            logger, "healthcare_search", time.time() - start,
            lat=lat, lon=lon, radius_km=radius_km,
            facility_type=normalize_facility_type(facility_type) or "any",
            result_count=len(result.facilities),
        )
        return result

    async def check_api_availability(self) -> bool:
        """True if any Overpass mirror answers a minimal query."""
        return await self.client.probe()

    async def search_location_by_address(self, address: str) -> Optional[GeocodeResult]:
        return await async_geocoding.search_location_by_address(address, session=self._geocoding_session)

    async def reverse_geocode(self, lat: float, lon: float) -> Optional[ReverseGeocodeResult]:
        return await async_geocoding.reverse_geocode(lat, lon, session=self._geocoding_session)

    async def get_facility_details(self, facility_id: str) -> Optional[Dict[str, Any]]:
        """
        Raw OSM element behind a facility id such as "osm_way_123".

        Synthetic ids and malformed ids return None without any request.
        """
        match = _FACILITY_ID.match(facility_id or "")
        if not match:
            return None
        element_type, element_id = match.group(1), int(match.group(2))
        return await self.client.get_element(element_type, element_id)


def was_fallback_used(result: SearchResult) -> bool:
    """Whether a search result came from the synthetic fallback."""
    return result.fallback_used


async def search_nearby_healthcare(lat: float, lon: float,
                                   radius_km: float = DEFAULT_RADIUS_KM,
                                   facility_type: Optional[str] = None,
                                   service: Optional[HealthcareSearchService] = None) -> SearchResult:
    """Module-level convenience wrapper; builds a fresh service when none is given."""
    service = service or HealthcareSearchService()
    return await service.search_nearby_healthcare(lat, lon, radius_km, facility_type)
