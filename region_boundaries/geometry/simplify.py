"""Ramer-Douglas-Peucker simplification for GeoJSON polygon geometry.

Coordinates are treated as planar Cartesian values: distances are taken
in raw coordinate units, which is adequate for the coarse, display-level
simplification this service performs on WGS 84 boundaries.

Layers:
- ``simplify_line``: RDP on an open sequence of positions
- ``simplify_ring``: closure-aware wrapper that never collapses a ring
- ``simplify_polygon`` / ``simplify_multipolygon``: compose over rings and
  drop degenerate rings and empty polygons
- ``simplify_feature``: dispatch on ``geometry.type``; anything it does
  not recognise is returned untouched

Inputs are never mutated; new lists and dicts are returned.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from region_boundaries.core.constants import (
    MIN_OPEN_RING_POSITIONS,
    MIN_RING_POSITIONS,
    MULTIPOLYGON_TYPE,
    POLYGON_TYPE,
)
from region_boundaries.geometry.validation import (
    is_multipolygon_coords,
    is_polygon_coords,
    is_record,
)

Position = Sequence[float]
Ring = list[Position]
PolygonCoords = list[Ring]
MultiPolygonCoords = list[PolygonCoords]


# ---------------------------------------------------------------------------
# Line simplification
# ---------------------------------------------------------------------------


def squared_segment_distance(p: Position, a: Position, b: Position) -> float:
    """Squared distance from *p* to the segment *a*-*b*.

    The projection of *p* is clamped to the segment, so points beyond
    either end measure to the nearest endpoint.  A segment whose squared
    length is zero (or underflows to zero) degrades to point distance.
    """
    x, y = a[0], a[1]
    dx = b[0] - x
    dy = b[1] - y

    sq_length = dx * dx + dy * dy
    if sq_length > 0:
        t = ((p[0] - x) * dx + (p[1] - y) * dy) / sq_length
        if t > 1:
            x, y = b[0], b[1]
        elif t > 0:
            x += dx * t
            y += dy * t

    dx = p[0] - x
    dy = p[1] - y
    return dx * dx + dy * dy


def simplify_line(points: Sequence[Position], tolerance: float) -> list[Position]:
    """Simplify an open polyline with Ramer-Douglas-Peucker.

    Uses an explicit stack of ``(first, last)`` index pairs rather than
    recursion, so very long rings cannot exhaust the call stack.

    Args:
        points: Ordered positions.  Only the first two members of each
            position are used for distance; positions are returned as-is.
        tolerance: Maximum allowed deviation in coordinate units.

    Returns:
        A new list holding a subsequence of *points* that always keeps
        the first and last point.  Interior points lying exactly on the
        chord are dropped even when *tolerance* is 0.

    Raises:
        ValueError: If *tolerance* is negative.
    """
    if tolerance < 0:
        msg = f"tolerance must be >= 0, got {tolerance}"
        raise ValueError(msg)

    if len(points) <= 2:
        return list(points)

    sq_tolerance = tolerance * tolerance
    keep = [False] * len(points)
    keep[0] = keep[-1] = True
    stack = [(0, len(points) - 1)]

    while stack:
        first, last = stack.pop()
        max_sq_dist = 0.0
        index = 0
        for i in range(first + 1, last):
            sq_dist = squared_segment_distance(points[i], points[first], points[last])
            if sq_dist > max_sq_dist:
                index = i
                max_sq_dist = sq_dist

        if max_sq_dist > sq_tolerance:
            keep[index] = True
            stack.append((first, index))
            stack.append((index, last))

    return [p for p, kept in zip(points, keep) if kept]


# ---------------------------------------------------------------------------
# Rings, polygons, multipolygons
# ---------------------------------------------------------------------------


def is_closed(ring: Sequence[Position]) -> bool:
    """Whether the first and last positions share the same lon/lat."""
    if not ring:
        return False
    first, last = ring[0], ring[-1]
    return first[0] == last[0] and first[1] == last[1]


def simplify_ring(ring: Sequence[Position], tolerance: float) -> Ring:
    """Simplify a ring and return it closed.

    The closing position is stripped before simplifying and re-appended
    afterwards.  If simplification would leave fewer than three open
    positions, the open ring from before simplification is used instead,
    so a ring is never silently collapsed.  Unclosed input comes back
    closed.
    """
    open_ring = list(ring[:-1]) if is_closed(ring) else list(ring)
    simplified = simplify_line(open_ring, tolerance)
    safe = simplified if len(simplified) >= MIN_OPEN_RING_POSITIONS else open_ring
    if not safe:
        return []
    return [*safe, safe[0]]


def simplify_polygon(coords: Sequence[Sequence[Position]], tolerance: float) -> PolygonCoords:
    """Simplify every ring and drop rings left with fewer than four positions."""
    rings = (simplify_ring(ring, tolerance) for ring in coords)
    return [ring for ring in rings if len(ring) >= MIN_RING_POSITIONS]


def simplify_multipolygon(
    coords: Sequence[Sequence[Sequence[Position]]], tolerance: float
) -> MultiPolygonCoords:
    """Simplify every polygon and drop polygons left with no rings."""
    polygons = (simplify_polygon(polygon, tolerance) for polygon in coords)
    return [polygon for polygon in polygons if polygon]


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------


def simplify_feature(feature: Mapping[str, Any], tolerance: float) -> Mapping[str, Any]:
    """Return *feature* with simplified Polygon/MultiPolygon coordinates.

    Every other field of the feature and of its geometry is carried over
    unchanged.  Features whose geometry is missing, of another kind, or
    whose coordinates do not validate are returned as the same object.
    """
    geometry = feature.get("geometry")
    if not is_record(geometry) or not isinstance(geometry.get("type"), str):
        return feature

    geometry_type = geometry["type"]
    coordinates = geometry.get("coordinates")

    if geometry_type == POLYGON_TYPE and is_polygon_coords(coordinates):
        simplified: list[Any] = simplify_polygon(coordinates, tolerance)
    elif geometry_type == MULTIPOLYGON_TYPE and is_multipolygon_coords(coordinates):
        simplified = simplify_multipolygon(coordinates, tolerance)
    else:
        return feature

    return {**feature, "geometry": {**geometry, "coordinates": simplified}}


def count_vertices(feature: Mapping[str, Any]) -> int:
    """Number of positions in a Polygon/MultiPolygon feature, else 0."""
    geometry = feature.get("geometry")
    if not is_record(geometry):
        return 0
    coordinates = geometry.get("coordinates")
    if geometry.get("type") == POLYGON_TYPE and is_polygon_coords(coordinates):
        return sum(len(ring) for ring in coordinates)
    if geometry.get("type") == MULTIPOLYGON_TYPE and is_multipolygon_coords(coordinates):
        return sum(len(ring) for polygon in coordinates for ring in polygon)
    return 0
