"""
Overpass QL builders for healthcare facility searches
Pure string construction, no network I/O.
"""

from typing import Dict, Optional, Tuple

AVAILABILITY_PROBE_QUERY = "[out:json];out;"

# facility type -> ((amenity value, healthcare value), ...)
_TYPE_CLAUSES: Dict[str, Tuple[Tuple[str, str], ...]] = {
    "hospital": (("amenity", "hospital"), ("healthcare", "hospital")),
    "clinic": (("amenity", "clinic"), ("healthcare", "clinic")),
    "pharmacy": (("amenity", "pharmacy"), ("healthcare", "pharmacy")),
    "doctors": (("amenity", "doctors"), ("healthcare", "doctor")),
}

_TYPE_ALIASES = {
    "doctor": "doctors",
    "general_practice": "doctors",
    "general-practice": "doctors",
    "gp": "doctors",
}

_ANY_TYPE_CLAUSES = (
    ("amenity", "~", "^(hospital|clinic|pharmacy|doctors)$"),
    ("healthcare", "~", "^(hospital|clinic|doctor|pharmacy)$"),
)


def normalize_facility_type(facility_type: Optional[str]) -> Optional[str]:
    """
    Map a user supplied filter onto a facility type key.

    Returns None for "any"/"all", blanks, and anything unrecognised.
    """
    if not facility_type:
        return None
    key = facility_type.strip().lower()
    key = _TYPE_ALIASES.get(key, key)
    return key if key in _TYPE_CLAUSES else None


def _format_radius(radius_km: float) -> str:
    radius_m = radius_km * 1000
    if float(radius_m).is_integer():
        return str(int(radius_m))
    return f"{radius_m:g}"


def build_healthcare_query(lat: float, lon: float, radius_km: float,
                           facility_type: Optional[str] = None) -> str:
    """
    Build an Overpass QL query for healthcare facilities around a point.

    Both node and way records are requested under the amenity=* and
    healthcare=* tagging schemes. "out center" makes ways carry a centroid
    so they can be treated like nodes downstream.

    Args:
        lat, lon: Search origin
        radius_km: Search radius in kilometers
        facility_type: hospital, clinic, pharmacy, doctors, or None/"any"

    Returns:
        Overpass QL query text
    """
    around = f"(around:{_format_radius(radius_km)},{lat},{lon})"
    type_key = normalize_facility_type(facility_type)

    clauses = []
    if type_key is None:
        for key, op, pattern in _ANY_TYPE_CLAUSES:
            clauses.append(f'node["{key}"{op}"{pattern}"]{around};')
            clauses.append(f'way["{key}"{op}"{pattern}"]{around};')
    else:
        for key, value in _TYPE_CLAUSES[type_key]:
            clauses.append(f'node["{key}"="{value}"]{around};')
            clauses.append(f'way["{key}"="{value}"]{around};')

    body = "\n  ".join(clauses)
    return (
        "[out:json][timeout:25];\n"
        "(\n"
        f"  {body}\n"
        ");\n"
        "out center meta;"
    )


def build_details_query(element_type: str, element_id: int) -> str:
    """Query a single OSM element by type and id."""
    if element_type not in ("node", "way", "relation"):
        raise ValueError(f"unsupported element type: {element_type}")
    return (
        "[out:json][timeout:25];\n"
        f"{element_type}({int(element_id)});\n"
        "out center meta;"
    )
