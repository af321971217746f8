"""
Data Sources Package
API clients and record normalization for healthcare facility discovery
"""

from . import async_geocoding
from . import async_osm_api
from . import facility_normalization
from . import fallback_data
from . import overpass_query

__all__ = ['async_geocoding', 'async_osm_api', 'facility_normalization', 'fallback_data', 'overpass_query']
