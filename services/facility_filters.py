"""
Client-side helpers for presenting search results
"""

from typing import Iterable, List, Optional
from urllib.parse import quote

from data_sources.models import Facility

OSM_BASE_URL = "https://www.openstreetmap.org"

# Risk assessment type -> specialty to look for first
_ASSESSMENT_SPECIALTIES = {
    "diabetes": "Endocrinology",
    "hypertension": "Cardiology",
    "stroke": "Neurology",
}
DEFAULT_SPECIALTY = "General Medicine"


def filter_facilities(facilities: Iterable[Facility], query: Optional[str]) -> List[Facility]:
    """Keep facilities whose name or any specialty contains the query (case-insensitive)."""
    facilities = list(facilities)
    if not query or not query.strip():
        return facilities
    needle = query.strip().lower()
    return [
        f for f in facilities
        if needle in f.name.lower() or any(needle in s.lower() for s in f.specialties)
    ]


def recommended_specialty(assessment_type: Optional[str]) -> str:
    if not assessment_type:
        return DEFAULT_SPECIALTY
    return _ASSESSMENT_SPECIALTIES.get(assessment_type.strip().lower(), DEFAULT_SPECIALTY)


def directions_url(origin_lat: float, origin_lon: float, facility: Facility) -> str:
    return (f"{OSM_BASE_URL}/directions?from={origin_lat},{origin_lon}"
            f"&to={facility.latitude},{facility.longitude}")


def map_url(facility: Facility) -> str:
    return (f"{OSM_BASE_URL}/search?query={quote(facility.name, safe='')}"
            f"#map=16/{facility.latitude}/{facility.longitude}")
