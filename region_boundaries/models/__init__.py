"""Data models.

- FeatureCollection: ordered GeoJSON features produced by a build
- CacheEntry: a built value plus its completion timestamp
- CacheState / CacheStatus: cache lifecycle state and diagnostics snapshot
"""

from region_boundaries.models.cache_status import CacheState, CacheStatus
from region_boundaries.models.collection import CacheEntry, FeatureCollection

__all__ = [
    "CacheEntry",
    "CacheState",
    "CacheStatus",
    "FeatureCollection",
]
