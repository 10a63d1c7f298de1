"""Shared pytest fixtures for the region boundary test suite."""

from __future__ import annotations

from typing import Any

import pytest

from region_boundaries.core.config import ServiceConfig

# ---------------------------------------------------------------------------
# Upstream layout used throughout the suite
# ---------------------------------------------------------------------------

BASE_URL = "https://boundaries.test/countries/110m/"
INDEX_URL = f"{BASE_URL}index.json"


def square_ring(x: float, y: float, size: float) -> list[list[float]]:
    """Closed axis-aligned square with its lower-left corner at (x, y)."""
    return [
        [x, y],
        [x + size, y],
        [x + size, y + size],
        [x, y + size],
        [x, y],
    ]


def polygon_feature(name: str, rings: list[list[list[float]]]) -> dict[str, Any]:
    return {
        "type": "Feature",
        "properties": {"name": name},
        "geometry": {"type": "Polygon", "coordinates": rings},
    }


def multipolygon_feature(name: str, polygons: list[list[list[list[float]]]]) -> dict[str, Any]:
    return {
        "type": "Feature",
        "properties": {"name": name},
        "geometry": {"type": "MultiPolygon", "coordinates": polygons},
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> ServiceConfig:
    """Service configuration pointing at the test upstream."""
    return ServiceConfig(
        index_url=INDEX_URL,
        base_url=BASE_URL,
        region_key="Asia",
        cache_ttl_s=3600.0,
        simplify_tolerance=0.3,
    )


@pytest.fixture()
def asia_documents() -> dict[str, Any]:
    """Index plus three Asia files: a Polygon, a MultiPolygon and a non-Feature."""
    return {
        INDEX_URL: {
            "Asia": {
                "Japan": "jpn.geojson",
                "Mongolia": "mng.geojson",
                "Broken": "broken.geojson",
            },
            "Europe": {"France": "fra.geojson"},
        },
        f"{BASE_URL}jpn.geojson": multipolygon_feature(
            "Japan",
            [[square_ring(130.0, 31.0, 2.0)], [square_ring(139.0, 35.0, 3.0)]],
        ),
        f"{BASE_URL}mng.geojson": polygon_feature(
            "Mongolia",
            [[[88.0, 49.0], [100.0, 52.0], [100.05, 51.98], [120.0, 47.0], [105.0, 42.0], [88.0, 49.0]]],
        ),
        f"{BASE_URL}broken.geojson": {"type": "FeatureCollection", "features": []},
        f"{BASE_URL}fra.geojson": polygon_feature("France", [square_ring(0.0, 43.0, 5.0)]),
    }
