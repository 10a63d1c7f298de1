"""Geometry validation and simplification.

- validation: shape predicates for untyped GeoJSON values
- simplify: Ramer-Douglas-Peucker over lines, rings, polygons and features
"""

from region_boundaries.geometry.simplify import (
    simplify_feature,
    simplify_line,
    simplify_multipolygon,
    simplify_polygon,
    simplify_ring,
)
from region_boundaries.geometry.validation import (
    is_feature,
    is_multipolygon_coords,
    is_number,
    is_polygon_coords,
    is_position,
    is_record,
    is_ring,
)

__all__ = [
    "is_feature",
    "is_multipolygon_coords",
    "is_number",
    "is_polygon_coords",
    "is_position",
    "is_record",
    "is_ring",
    "simplify_feature",
    "simplify_line",
    "simplify_multipolygon",
    "simplify_polygon",
    "simplify_ring",
]
