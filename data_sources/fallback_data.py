"""
Synthetic facilities used when every Overpass mirror is down
"""

import random
from typing import List, Optional

from .models import Facility, FacilityType

MIN_BASE_RADIUS_KM = 5.0
MAX_BASE_RADIUS_KM = 50.0
COORDINATE_JITTER_DEG = 0.025
DEMO_OPENING_HOURS = "Mo-Fr 08:00-18:00"

# (id, name, type, distance factor of the clamped radius, address)
DEMO_FACILITIES = (
    ("demo_1", "City General Hospital", FacilityType.HOSPITAL, 0.3, "123 Main St, Downtown"),
    ("demo_2", "Downtown Clinic", FacilityType.CLINIC, 0.45, "45 Elm Ave, Central"),
    ("demo_3", "Community Pharmacy", FacilityType.PHARMACY, 0.2, "78 Oak Rd, Midtown"),
    ("demo_4", "Family Doctors Center", FacilityType.DOCTORS, 0.6, "22 Pine St, Westside"),
)


def clamp_radius(radius_km: float) -> float:
    return min(max(radius_km, MIN_BASE_RADIUS_KM), MAX_BASE_RADIUS_KM)


def generate_demo_facilities(lat: float, lon: float, radius_km: float,
                             rng: Optional[random.Random] = None) -> List[Facility]:
    """
    Produce one placeholder facility of each kind around the origin.

    Names, kinds and distances depend only on the radius; coordinates are
    jittered within COORDINATE_JITTER_DEG of the origin.
    """
    rng = rng or random.Random()
    base = clamp_radius(radius_km)

    facilities = []
    for facility_id, name, facility_type, factor, address in DEMO_FACILITIES:
        is_hospital = facility_type == FacilityType.HOSPITAL
        facilities.append(Facility(
            id=facility_id,
            name=name,
            type=facility_type,
            latitude=lat + rng.uniform(-COORDINATE_JITTER_DEG, COORDINATE_JITTER_DEG),
            longitude=lon + rng.uniform(-COORDINATE_JITTER_DEG, COORDINATE_JITTER_DEG),
            distance_km=round(base * factor, 2),
            address=address,
            specialties=["General Medicine", "Emergency Care"] if is_hospital else ["Family Medicine"],
            amenities=["Parking Available", "Wheelchair Accessible"],
            phone="+1 555-0101" if is_hospital else None,
            website="https://example-hospital.test" if is_hospital else None,
            opening_hours=DEMO_OPENING_HOURS,
            emergency=is_hospital,
            capacity=120 if is_hospital else None,
            wheelchair=True,
        ))

    facilities.sort(key=lambda f: f.distance_km)
    return facilities
