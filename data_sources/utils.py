"""
Shared geo utilities for the facility finder data sources
"""

import math
from typing import Any, Dict, Optional, Tuple

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in kilometers (Haversine).

    Args:
        lat1, lon1: First point coordinates
        lat2, lon2: Second point coordinates

    Returns:
        Distance in kilometers
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = math.sin(delta_phi/2)**2 + math.cos(phi1) * \
        math.cos(phi2) * math.sin(delta_lambda/2)**2
    # Clamp float noise so antipodal points don't produce a domain error
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1-a))

    return EARTH_RADIUS_KM * c


def distance_km_rounded(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance rounded to two decimals, as reported to users."""
    return round(haversine_km(lat1, lon1, lat2, lon2), 2)


def element_coordinates(elem: Dict[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    """
    Resolve coordinates for an Overpass element.

    Nodes carry lat/lon directly; ways and relations returned with
    "out center" carry them under "center". Non-finite or out-of-range
    values are treated as missing.
    """
    if elem.get("type") == "node":
        candidates = (elem, elem.get("center") or {})
    else:
        candidates = (elem.get("center") or {}, elem)

    for source in candidates:
        lat, lon = source.get("lat"), source.get("lon")
        if lat is None or lon is None:
            continue
        try:
            lat, lon = float(lat), float(lon)
        except (TypeError, ValueError):
            continue
        if math.isfinite(lat) and math.isfinite(lon) and validate_coordinates(lat, lon):
            return lat, lon
    return None, None


def validate_coordinates(lat: float, lon: float) -> bool:
    """
    Validate that coordinates are within valid ranges.

    Args:
        lat, lon: Coordinates to validate

    Returns:
        True if coordinates are valid
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180
