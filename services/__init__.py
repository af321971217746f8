"""
Services Package
Healthcare facility discovery built on the data source clients
"""

from . import facility_filters
from . import healthcare_search

__all__ = ['facility_filters', 'healthcare_search']
