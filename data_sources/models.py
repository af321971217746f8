"""
Value objects shared by the facility finder data sources
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class FacilityType(str, Enum):
    """Closed set of facility kinds."""
    HOSPITAL = "hospital"
    CLINIC = "clinic"
    PHARMACY = "pharmacy"
    DOCTORS = "doctors"  # general practice


@dataclass(frozen=True)
class Facility:
    """A named healthcare facility with its distance from the search origin."""
    id: str
    name: str
    type: FacilityType
    latitude: float
    longitude: float
    distance_km: float
    address: str
    specialties: List[str] = field(default_factory=list)
    amenities: List[str] = field(default_factory=list)
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    opening_hours: Optional[str] = None
    emergency: bool = False
    capacity: Optional[int] = None
    wheelchair: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass(frozen=True)
class SearchResult:
    """Facilities for one search plus where they came from."""
    facilities: List[Facility]
    fallback_used: bool = False
    endpoint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "facilities": [f.to_dict() for f in self.facilities],
            "fallback_used": self.fallback_used,
            "endpoint": self.endpoint,
            "count": len(self.facilities),
        }


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float
    display_name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ReverseGeocodeResult:
    latitude: float
    longitude: float
    display_name: str
    city: str = "Unknown"
    state: str = "Unknown"
    country: str = "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
