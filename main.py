from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import time
from typing import Optional

# Load environment variables before anything reads configuration
load_dotenv()

from logging_config import setup_logging, get_logger, log_performance  # noqa: E402
from data_sources.mirror_config import load_mirror_config  # noqa: E402
from data_sources.async_osm_api import OverpassMirrorClient  # noqa: E402
from services.facility_filters import (  # noqa: E402
    directions_url,
    filter_facilities,
    map_url,
    recommended_specialty,
)
from services.healthcare_search import DEFAULT_RADIUS_KM, HealthcareSearchService  # noqa: E402

setup_logging()
logger = get_logger(__name__)

SERVICE_NAME = "HealthPredict Facility Finder"
VERSION = "1.0.0"

app = FastAPI(
    title=f"{SERVICE_NAME} API",
    description="Nearby hospitals, clinics, pharmacies and doctors from OpenStreetMap",
    version=VERSION
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_search_service: Optional[HealthcareSearchService] = None


def get_search_service() -> HealthcareSearchService:
    """Default service for request handlers; tests override this dependency."""
    global _search_service
    if _search_service is None:
        _search_service = HealthcareSearchService(OverpassMirrorClient(load_mirror_config()))
    return _search_service


@app.get("/")
def root():
    """Service banner."""
    return {
        "service": SERVICE_NAME,
        "status": "running",
        "version": VERSION,
        "endpoints": {
            "nearby": "/facilities/nearby?lat=LAT&lon=LON&radius_km=10&type=hospital",
            "details": "/facilities/{facility_id}",
            "geocode": "/geocode?address=ADDRESS",
            "reverse_geocode": "/geocode/reverse?lat=LAT&lon=LON",
            "status": "/status",
            "docs": "/docs"
        }
    }


@app.get("/health")
def health_check(service: HealthcareSearchService = Depends(get_search_service)):
    """Configuration summary; does not contact upstream services."""
    return {
        "status": "healthy",
        "version": VERSION,
        "overpass_mirrors": service.client.endpoints,
        "attempt_timeout_s": service.client.config.attempt_timeout,
    }


@app.get("/facilities/nearby")
async def nearby_facilities(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(DEFAULT_RADIUS_KM, gt=0, le=100),
    facility_type: Optional[str] = Query(None, alias="type", description="hospital, clinic, pharmacy, doctors or any"),
    q: Optional[str] = Query(None, description="Filter by name or specialty"),
    assessment: Optional[str] = Query(None, description="Risk assessment type, e.g. diabetes"),
    service: HealthcareSearchService = Depends(get_search_service),
):
    """
    Healthcare facilities around a point, nearest first.

    Always answers 200 for upstream outages; check fallback_used to see
    whether the list is placeholder data.
    """
    start = time.time()
    result = await service.search_nearby_healthcare(lat, lon, radius_km, facility_type)
    facilities = filter_facilities(result.facilities, q)

    items = []
    for facility in facilities:
        item = facility.to_dict()
        item["links"] = {
            "directions": directions_url(lat, lon, facility),
            "map": map_url(facility),
        }
        items.append(item)

    elapsed = time.time() - start
    log_performance(logger, "nearby_facilities", elapsed, lat=lat, lon=lon, radius_km=radius_km)

    response = {
        "facilities": items,
        "count": len(items),
        "fallback_used": result.fallback_used,
        "endpoint": result.endpoint,
        "search_time": round(elapsed, 3),
    }
    if assessment:
        response["recommended_specialty"] = recommended_specialty(assessment)
    return response


@app.get("/facilities/{facility_id}")
async def facility_details(facility_id: str,
                           service: HealthcareSearchService = Depends(get_search_service)):
    """Raw OpenStreetMap element behind a facility id."""
    element = await service.get_facility_details(facility_id)
    if element is None:
        raise HTTPException(status_code=404, detail=f"Facility {facility_id} not found")
    return element


@app.get("/geocode")
async def geocode_address(address: str = Query(..., min_length=1),
                          service: HealthcareSearchService = Depends(get_search_service)):
    """Coordinates for a free-text address."""
    result = await service.search_location_by_address(address)
    if result is None:
        raise HTTPException(status_code=404, detail="No location found for address")
    return result.to_dict()


@app.get("/geocode/reverse")
async def reverse_geocode(lat: float = Query(..., ge=-90, le=90),
                          lon: float = Query(..., ge=-180, le=180),
                          service: HealthcareSearchService = Depends(get_search_service)):
    """City, state and country for a coordinate."""
    result = await service.reverse_geocode(lat, lon)
    if result is None:
        raise HTTPException(status_code=404, detail="No location found for coordinates")
    return result.to_dict()


@app.get("/status")
async def api_status(service: HealthcareSearchService = Depends(get_search_service)):
    """Probe the Overpass mirrors."""
    return {"overpass_available": await service.check_api_availability()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
