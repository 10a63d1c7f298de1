"""Upstream document sources.

- BoundarySource: abstract async JSON document source
- HttpBoundarySource: ``httpx``-backed implementation
- UpstreamFetchError: the single failure type sources raise
"""

from region_boundaries.sources.base import BoundarySource, UpstreamFetchError
from region_boundaries.sources.http import HttpBoundarySource

__all__ = [
    "BoundarySource",
    "HttpBoundarySource",
    "UpstreamFetchError",
]
