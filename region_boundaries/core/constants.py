"""Shared service constants, single source of truth.

Centralises the upstream URLs and tunable defaults so that the config
layer, the collection builder and the tests agree on them.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Upstream documents
# ---------------------------------------------------------------------------

DEFAULT_INDEX_URL: str = "https://geojson-maps.kyd.au/countries/110m/index.json"
"""Index document mapping continent -> {country name: filename}."""

DEFAULT_BASE_URL: str = "https://geojson-maps.kyd.au/countries/110m/"
"""Base URL that per-country filenames from the index are resolved against."""

DEFAULT_REGION_KEY: str = "Asia"
"""Index key of the region whose boundaries are served."""

# ---------------------------------------------------------------------------
# Tunables
# ---------------------------------------------------------------------------

SECONDS_PER_DAY: int = 24 * 60 * 60

DEFAULT_CACHE_TTL_S: float = float(SECONDS_PER_DAY)
"""Cache entries are fresh for 24 hours after the build completes."""

DEFAULT_SIMPLIFY_TOLERANCE: float = 0.3
"""RDP tolerance in coordinate units (degrees for WGS 84 input)."""

DEFAULT_FETCH_TIMEOUT_S: float = 30.0

# ---------------------------------------------------------------------------
# GeoJSON literals
# ---------------------------------------------------------------------------

FEATURE_TYPE = "Feature"
FEATURE_COLLECTION_TYPE = "FeatureCollection"
POLYGON_TYPE = "Polygon"
MULTIPOLYGON_TYPE = "MultiPolygon"

# Minimum positions in a closed ring (3 distinct + closure).
MIN_RING_POSITIONS = 4

# Minimum positions an open ring may shrink to before simplification is undone.
MIN_OPEN_RING_POSITIONS = 3
