"""Structural shape predicates for untyped GeoJSON values.

Upstream documents are parsed JSON and nothing about their shape is
trusted.  Each predicate answers "is this value of kind X?" and never
raises: a value that fails a check is simply not of that kind.

Kinds:
- Position: ``[lon, lat, ...]`` with the first two members finite numbers
- Ring: four or more Positions
- Polygon coordinates: a list of Rings (possibly empty)
- MultiPolygon coordinates: a list of lists of Rings
- Feature: a mapping whose ``type`` is ``"Feature"``

Only ``list`` and ``tuple`` count as sequences; ``bool`` is not a number.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from region_boundaries.core.constants import FEATURE_TYPE, MIN_RING_POSITIONS

_SEQUENCE_TYPES = (list, tuple)


def is_record(value: Any) -> bool:
    """Return whether *value* is a JSON object (any mapping)."""
    return isinstance(value, Mapping)


def is_number(value: Any) -> bool:
    """Return whether *value* is a finite int or float (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # JSON integers wider than a double
        return False


def is_position(value: Any) -> bool:
    """Return whether *value* is a position with finite lon/lat.

    Members after the second (elevation, measure) are not inspected.
    """
    return (
        isinstance(value, _SEQUENCE_TYPES)
        and len(value) >= 2
        and is_number(value[0])
        and is_number(value[1])
    )


def is_ring(value: Any) -> bool:
    """Return whether *value* is a ring of at least four positions."""
    return (
        isinstance(value, _SEQUENCE_TYPES)
        and len(value) >= MIN_RING_POSITIONS
        and all(is_position(p) for p in value)
    )


def is_polygon_coords(value: Any) -> bool:
    """Return whether *value* is Polygon coordinates (a list of rings)."""
    return isinstance(value, _SEQUENCE_TYPES) and all(is_ring(r) for r in value)


def is_multipolygon_coords(value: Any) -> bool:
    """Return whether *value* is MultiPolygon coordinates."""
    return isinstance(value, _SEQUENCE_TYPES) and all(
        isinstance(polygon, _SEQUENCE_TYPES) and all(is_ring(r) for r in polygon)
        for polygon in value
    )


def is_feature(value: Any) -> bool:
    """Return whether *value* is a GeoJSON Feature object."""
    return is_record(value) and value.get("type") == FEATURE_TYPE
