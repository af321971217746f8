"""
Overpass element normalization
Maps loosely tagged OSM healthcare records onto Facility value objects.
"""

import re
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import Facility, FacilityType
from .utils import distance_km_rounded, element_coordinates
from logging_config import get_logger

logger = get_logger(__name__)

ADDRESS_NOT_AVAILABLE = "Address not available"
DEFAULT_HOSPITAL_SPECIALTIES = ("General Medicine", "Emergency Care")

# Boolean specialty flags: tag key -> display label
SPECIALTY_LABELS: Mapping[str, str] = MappingProxyType({
    "cardiology": "Cardiology",
    "neurology": "Neurology",
    "endocrinology": "Endocrinology",
    "internal_medicine": "Internal Medicine",
    "family_medicine": "Family Medicine",
    "emergency": "Emergency Medicine",
    "surgery": "Surgery",
    "orthopedics": "Orthopedics",
    "pediatrics": "Pediatrics",
    "psychiatry": "Psychiatry",
    "dermatology": "Dermatology",
    "ophthalmology": "Ophthalmology",
    "dentistry": "Dentistry",
})

# Boolean amenity flags: tag key -> display label
AMENITY_LABELS: Mapping[str, str] = MappingProxyType({
    "parking": "Parking Available",
    "wheelchair": "Wheelchair Accessible",
    "wifi": "WiFi Available",
    "cafe": "Cafeteria",
    "atm": "ATM",
    "pharmacy": "Pharmacy",
    "laboratory": "Laboratory",
    "imaging": "Medical Imaging",
    "emergency": "24/7 Emergency",
})

ADDRESS_PARTS = ("addr:housenumber", "addr:street", "addr:city", "addr:postcode")

# Free-text speciality item (lowercased, "_" as space) -> canonical label
_SPECIALTY_ALIASES: Mapping[str, str] = MappingProxyType({
    **{key.replace("_", " "): label for key, label in SPECIALTY_LABELS.items()},
    **{label.lower(): label for label in SPECIALTY_LABELS.values()},
})

_LEADING_INT = re.compile(r"^\s*(\d+)")

ELEMENT_TYPES = ("node", "way", "relation")


def _is_yes(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == "yes"


def _text(tags: Dict[str, Any], key: str) -> Optional[str]:
    value = tags.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def get_facility_type(tags: Dict[str, Any]) -> FacilityType:
    """
    Classify a record by its amenity/healthcare tags.

    The precedence is fixed: hospital, clinic, pharmacy (amenity only),
    doctors, then clinic as the default for anything named but ambiguous.
    """
    amenity = tags.get("amenity")
    healthcare = tags.get("healthcare")
    if amenity == "hospital" or healthcare == "hospital":
        return FacilityType.HOSPITAL
    if amenity == "clinic" or healthcare == "clinic":
        return FacilityType.CLINIC
    if amenity == "pharmacy":
        return FacilityType.PHARMACY
    if amenity == "doctors" or healthcare == "doctor":
        return FacilityType.DOCTORS
    return FacilityType.CLINIC


def _canonical_specialty(item: str) -> str:
    return _SPECIALTY_ALIASES.get(item.lower().replace("_", " "), item)


def extract_specialties(tags: Dict[str, Any]) -> List[str]:
    """
    Collect specialty labels from healthcare:speciality and boolean flags.

    Hospitals with nothing tagged get General Medicine and Emergency Care.
    """
    specialties: List[str] = []

    explicit = _text(tags, "healthcare:speciality")
    if explicit:
        for item in explicit.split(";"):
            item = item.strip()
            if item:
                specialties.append(_canonical_specialty(item))

    for key, label in SPECIALTY_LABELS.items():
        if _is_yes(tags.get(key)) or _is_yes(tags.get(f"healthcare:speciality:{key}")):
            specialties.append(label)

    if not specialties and (tags.get("amenity") == "hospital" or tags.get("healthcare") == "hospital"):
        specialties.extend(DEFAULT_HOSPITAL_SPECIALTIES)

    return _dedupe(specialties)


def build_address(tags: Dict[str, Any]) -> str:
    """Join house number, street, city and postcode, skipping absent parts."""
    parts = [value for value in (_text(tags, key) for key in ADDRESS_PARTS) if value]
    return ", ".join(parts) or ADDRESS_NOT_AVAILABLE


def extract_amenities(tags: Dict[str, Any]) -> List[str]:
    return _dedupe(label for key, label in AMENITY_LABELS.items() if _is_yes(tags.get(key)))


def parse_capacity(value: Any) -> Optional[int]:
    """Leading integer of a bed:count tag, None when absent or unparsable."""
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def normalize_element(elem: Any, origin_lat: float, origin_lon: float) -> Optional[Facility]:
    """
    Build a Facility from one Overpass element.

    Returns None for unnamed elements, elements without a usable OSM
    type/id pair and elements without coordinates.
    """
    if not isinstance(elem, dict):
        return None
    tags = elem.get("tags")
    if not isinstance(tags, dict):
        return None

    name = _text(tags, "name")
    if not name:
        return None

    element_type, element_id = elem.get("type"), elem.get("id")
    if element_type not in ELEMENT_TYPES or not isinstance(element_id, int) or isinstance(element_id, bool):
        return None

    lat, lon = element_coordinates(elem)
    if lat is None or lon is None:
        logger.debug(
            "Skipping healthcare element without coordinates",
            extra={"api_name": "overpass", "operation": f"{element_type}/{element_id}"}
        )
        return None

    return Facility(
        id=f"osm_{element_type}_{element_id}",
        name=name,
        type=get_facility_type(tags),
        latitude=lat,
        longitude=lon,
        distance_km=distance_km_rounded(origin_lat, origin_lon, lat, lon),
        address=build_address(tags),
        specialties=extract_specialties(tags),
        amenities=extract_amenities(tags),
        phone=_text(tags, "phone"),
        website=_text(tags, "website"),
        email=_text(tags, "email"),
        opening_hours=_text(tags, "opening_hours"),
        emergency=_is_yes(tags.get("emergency")) or _is_yes(tags.get("emergency:healthcare")),
        capacity=parse_capacity(tags.get("bed:count")),
        wheelchair=_is_yes(tags.get("wheelchair")),
    )


def normalize_elements(elements: Iterable[Any], origin_lat: float, origin_lon: float) -> List[Facility]:
    """
    Normalize a batch of Overpass elements into a distance-sorted list.

    Args:
        elements: Raw Overpass "elements" entries
        origin_lat, origin_lon: Search origin used for distances

    Returns:
        Facilities sorted ascending by distance (stable for ties)
    """
    facilities = []
    skipped = 0
    for elem in elements:
        facility = normalize_element(elem, origin_lat, origin_lon)
        if facility is None:
            skipped += 1
            continue
        facilities.append(facility)

    if skipped:
        logger.debug(f"Dropped {skipped} unnamed or unlocatable healthcare elements")

    facilities.sort(key=lambda f: f.distance_km)
    return facilities
