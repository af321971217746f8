from data_sources.facility_normalization import (
    ADDRESS_NOT_AVAILABLE,
    AMENITY_LABELS,
    SPECIALTY_LABELS,
    build_address,
    extract_amenities,
    extract_specialties,
    get_facility_type,
    normalize_element,
    normalize_elements,
    parse_capacity,
)
from data_sources.models import FacilityType
from data_sources.utils import haversine_km
from tests.conftest import ORIGIN, node, way

LAT, LON = ORIGIN


# =========================================================================
# Facility type precedence
# =========================================================================

def test_hospital_under_either_scheme():
    assert get_facility_type({"amenity": "hospital"}) == FacilityType.HOSPITAL
    assert get_facility_type({"healthcare": "hospital"}) == FacilityType.HOSPITAL


def test_hospital_wins_over_clinic():
    assert get_facility_type({"amenity": "clinic", "healthcare": "hospital"}) == FacilityType.HOSPITAL


def test_clinic_wins_over_pharmacy_and_doctors():
    assert get_facility_type({"amenity": "pharmacy", "healthcare": "clinic"}) == FacilityType.CLINIC
    assert get_facility_type({"amenity": "doctors", "healthcare": "clinic"}) == FacilityType.CLINIC


def test_pharmacy_wins_over_doctors():
    assert get_facility_type({"amenity": "pharmacy", "healthcare": "doctor"}) == FacilityType.PHARMACY


def test_doctors_under_either_scheme():
    assert get_facility_type({"amenity": "doctors"}) == FacilityType.DOCTORS
    assert get_facility_type({"healthcare": "doctor"}) == FacilityType.DOCTORS


def test_ambiguous_defaults_to_clinic():
    assert get_facility_type({}) == FacilityType.CLINIC
    # healthcare=pharmacy alone is not part of the pharmacy rule
    assert get_facility_type({"healthcare": "pharmacy"}) == FacilityType.CLINIC


# =========================================================================
# Specialties
# =========================================================================

def test_specialty_deduplication_across_tag_and_flag():
    tags = {"healthcare:speciality": "cardiology;cardiology", "cardiology": "yes"}
    assert extract_specialties(tags) == ["Cardiology"]


def test_explicit_specialties_are_trimmed():
    tags = {"healthcare:speciality": " oncology ; radiology;;"}
    assert extract_specialties(tags) == ["oncology", "radiology"]


def test_explicit_specialty_canonicalised():
    tags = {"healthcare:speciality": "internal_medicine;Family Medicine"}
    assert extract_specialties(tags) == ["Internal Medicine", "Family Medicine"]


def test_namespaced_specialty_flag():
    assert extract_specialties({"healthcare:speciality:neurology": "yes"}) == ["Neurology"]


def test_flag_must_be_yes():
    assert extract_specialties({"surgery": "no", "pediatrics": "yes"}) == ["Pediatrics"]


def test_hospital_without_specialties_gets_defaults():
    assert extract_specialties({"amenity": "hospital"}) == ["General Medicine", "Emergency Care"]


def test_clinic_without_specialties_gets_none():
    assert extract_specialties({"amenity": "clinic"}) == []


def test_lookup_table_sizes():
    assert len(SPECIALTY_LABELS) == 13
    assert len(AMENITY_LABELS) == 9


# =========================================================================
# Address and amenities
# =========================================================================

def test_address_only_city():
    assert build_address({"addr:city": "Springfield"}) == "Springfield"


def test_address_placeholder():
    assert build_address({}) == ADDRESS_NOT_AVAILABLE == "Address not available"


def test_address_fixed_order():
    tags = {
        "addr:postcode": "62701",
        "addr:city": "Springfield",
        "addr:street": "Main St",
        "addr:housenumber": "742",
    }
    assert build_address(tags) == "742, Main St, Springfield, 62701"


def test_address_skips_blank_parts():
    assert build_address({"addr:street": "Main St", "addr:city": "  "}) == "Main St"


def test_amenities():
    tags = {"parking": "yes", "wifi": "yes", "atm": "no", "emergency": "yes"}
    assert extract_amenities(tags) == ["Parking Available", "WiFi Available", "24/7 Emergency"]


def test_parse_capacity():
    assert parse_capacity("250") == 250
    assert parse_capacity("120 beds") == 120
    assert parse_capacity("unknown") is None
    assert parse_capacity(None) is None


# =========================================================================
# Element and batch normalization
# =========================================================================

def test_unnamed_record_yields_nothing():
    assert normalize_elements([node(1, LAT, LON, amenity="hospital")], LAT, LON) == []
    assert normalize_element(node(1, LAT, LON, amenity="hospital", name="  "), LAT, LON) is None


def test_malformed_elements_are_skipped():
    elements = [None, "junk", {"type": "node", "id": 5}, {"type": "way", "id": 6, "tags": {"name": "No Coords"}}]
    assert normalize_elements(elements, LAT, LON) == []


def test_invalid_coordinates_are_dropped_not_ranked():
    elements = [
        node(1, float("nan"), LON, amenity="clinic", name="Broken"),
        node(2, LAT + 0.001, LON, amenity="clinic", name="Near"),
        node(3, 400.0, LON, amenity="clinic", name="Out Of Range"),
        way(4, LAT, float("inf"), amenity="clinic", name="Infinite"),
    ]

    facilities = normalize_elements(elements, LAT, LON)

    assert [f.name for f in facilities] == ["Near"]
    assert all(-90 <= f.latitude <= 90 and -180 <= f.longitude <= 180 for f in facilities)


def test_elements_without_identity_are_dropped():
    no_id = {"type": "node", "lat": LAT, "lon": LON, "tags": {"name": "No Id", "amenity": "clinic"}}
    bad_type = {"type": "area", "id": 3, "lat": LAT, "lon": LON, "tags": {"name": "Area", "amenity": "clinic"}}
    text_id = node("12", LAT, LON, amenity="clinic", name="Text Id")

    assert normalize_elements([no_id, dict(no_id), bad_type, text_id], LAT, LON) == []


def test_full_record_mapping():
    elem = node(
        42, LAT + 0.01, LON, amenity="hospital", name="St. Mary",
        phone="+1 555 0100", website="https://stmary.test", email="info@stmary.test",
        opening_hours="24/7", wheelchair="yes", **{"bed:count": "300", "emergency:healthcare": "yes"}
    )
    facility = normalize_element(elem, LAT, LON)
    assert facility.id == "osm_node_42"
    assert facility.name == "St. Mary"
    assert facility.type == FacilityType.HOSPITAL
    assert facility.phone == "+1 555 0100"
    assert facility.website == "https://stmary.test"
    assert facility.email == "info@stmary.test"
    assert facility.opening_hours == "24/7"
    assert facility.emergency is True
    assert facility.capacity == 300
    assert facility.wheelchair is True
    assert facility.amenities == ["Wheelchair Accessible"]
    assert facility.address == "Address not available"
    assert facility.distance_km == round(haversine_km(LAT, LON, LAT + 0.01, LON), 2)


def test_way_uses_center_coordinates():
    facility = normalize_element(way(7, 40.0, -73.0, amenity="clinic", name="Way Clinic"), LAT, LON)
    assert facility.id == "osm_way_7"
    assert (facility.latitude, facility.longitude) == (40.0, -73.0)


def test_defaults_for_optional_fields():
    facility = normalize_element(node(8, LAT, LON, amenity="pharmacy", name="Corner"), LAT, LON)
    assert facility.phone is None
    assert facility.capacity is None
    assert facility.emergency is False
    assert facility.wheelchair is False
    assert facility.distance_km == 0.0


def test_batch_sorted_ascending_by_distance(sample_payload):
    facilities = normalize_elements(sample_payload["elements"], LAT, LON)
    assert [f.name for f in facilities] == ["Near Hospital", "Middle Clinic", "Far Pharmacy"]
    distances = [f.distance_km for f in facilities]
    assert distances == sorted(distances)
    assert all(d >= 0 for d in distances)


def test_ties_keep_input_order():
    elements = [
        node(1, LAT + 0.01, LON, amenity="clinic", name="First"),
        node(2, LAT - 0.01, LON, amenity="clinic", name="Second"),
    ]
    assert [f.name for f in normalize_elements(elements, LAT, LON)] == ["First", "Second"]


def test_to_dict_serializes_type_value():
    facility = normalize_element(node(9, LAT, LON, amenity="doctors", name="GP"), LAT, LON)
    data = facility.to_dict()
    assert data["type"] == "doctors"
    assert data["id"] == "osm_node_9"
