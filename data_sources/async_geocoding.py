"""
Async Geocoding API Client
Forward and reverse geocoding using Nominatim (OpenStreetMap).
Single attempt per lookup; any failure yields None.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from .error_handling import APIError, safe_api_call
from .mirror_config import DEFAULT_USER_AGENT, get_nominatim_url
from .models import GeocodeResult, ReverseGeocodeResult
from .utils import validate_coordinates
from logging_config import get_logger, log_api_call

logger = get_logger(__name__)

GEOCODE_TIMEOUT = aiohttp.ClientTimeout(total=15, connect=5, sock_read=10)


@asynccontextmanager
async def _session_scope(session: Optional[aiohttp.ClientSession]) -> AsyncIterator[aiohttp.ClientSession]:
    if session is not None:
        yield session
        return
    async with aiohttp.ClientSession(
        timeout=GEOCODE_TIMEOUT,
        headers={"User-Agent": DEFAULT_USER_AGENT},
    ) as owned:
        yield owned


async def _get_json(session, url: str, params: Dict[str, Any], operation: str) -> Any:
    log_api_call(logger, "nominatim", url, operation=operation)
    async with session.get(url, params=params, headers={"User-Agent": DEFAULT_USER_AGENT},
                           timeout=GEOCODE_TIMEOUT) as response:
        if response.status != 200:
            raise APIError(f"Nominatim {operation} returned HTTP {response.status}",
                           "nominatim", response.status)
        return await response.json(content_type=None)


@safe_api_call("nominatim")
async def search_location_by_address(address: str,
                                     session: Optional[aiohttp.ClientSession] = None,
                                     base_url: Optional[str] = None) -> Optional[GeocodeResult]:
    """
    Geocode a free-text address to coordinates.

    Args:
        address: Address, city, or postcode
        session: Optional shared aiohttp session (left open)
        base_url: Optional Nominatim base URL override

    Returns:
        GeocodeResult for the first match, or None
    """
    if not address or not address.strip():
        return None

    params = {
        "format": "json",
        "q": address.strip(),
        "limit": 1,
        "addressdetails": 1,
    }
    async with _session_scope(session) as active:
        data = await _get_json(active, f"{get_nominatim_url(base_url)}/search", params, "search")

    if not isinstance(data, list) or not data:
        logger.info("No geocoding match", extra={"api_name": "nominatim", "operation": "search"})
        return None

    result = data[0]
    lat = float(result["lat"])
    lon = float(result["lon"])
    if not validate_coordinates(lat, lon):
        return None

    return GeocodeResult(
        latitude=lat,
        longitude=lon,
        display_name=result.get("display_name") or address.strip(),
    )


@safe_api_call("nominatim")
async def reverse_geocode(lat: float, lon: float,
                          session: Optional[aiohttp.ClientSession] = None,
                          base_url: Optional[str] = None) -> Optional[ReverseGeocodeResult]:
    """
    Reverse geocode coordinates to a city/state/country description.

    Returns:
        ReverseGeocodeResult, or None if the lookup fails
    """
    if not validate_coordinates(lat, lon):
        return None

    params = {
        "format": "json",
        "lat": lat,
        "lon": lon,
        "zoom": 10,
        "addressdetails": 1,
    }
    async with _session_scope(session) as active:
        data = await _get_json(active, f"{get_nominatim_url(base_url)}/reverse", params, "reverse")

    if not isinstance(data, dict) or "error" in data:
        return None

    address_details = data.get("address") or {}
    return ReverseGeocodeResult(
        latitude=lat,
        longitude=lon,
        display_name=data.get("display_name", ""),
        city=(address_details.get("city") or address_details.get("town")
              or address_details.get("village") or "Unknown"),
        state=address_details.get("state") or address_details.get("region") or "Unknown",
        country=address_details.get("country") or "Unknown",
    )
