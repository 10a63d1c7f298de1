"""Region Boundary Service.

Fetches remote GeoJSON boundary documents for one region, simplifies
their Polygon/MultiPolygon geometry with Ramer-Douglas-Peucker, and
serves the aggregated FeatureCollection from a TTL cache that coalesces
concurrent requests into a single upstream build.
"""

__version__ = "0.1.0"
