"""Service layer.

- collection_builder: fetch, filter and simplify one region's features
- single_flight: TTL cache that coalesces concurrent builds
- region_service: ``RegionBoundaryService``, the public entry point
"""

from region_boundaries.services.collection_builder import build_region_collection
from region_boundaries.services.region_service import RegionBoundaryService
from region_boundaries.services.single_flight import TTLSingleFlightCache

__all__ = [
    "RegionBoundaryService",
    "TTLSingleFlightCache",
    "build_region_collection",
]
