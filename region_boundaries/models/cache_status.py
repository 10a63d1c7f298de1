"""Pydantic snapshot of a cache's state for operator diagnostics.

Returned by ``TTLSingleFlightCache.status()`` and
``RegionBoundaryService.status()``.  ``model_dump(mode="json")`` yields a JSON-safe
dict an HTTP health endpoint can return as-is.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class CacheState(enum.Enum):
    """Lifecycle state of a TTL single-flight cache."""

    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"
    BUILDING = "building"


class CacheStatus(BaseModel):
    """Point-in-time view of a cache.

    Attributes:
        name: Cache name used in log lines.
        state: Current lifecycle state.  ``BUILDING`` wins over
            ``STALE``/``EMPTY`` while a build is in flight.
        built_at: ISO 8601 completion time of the held entry, if any.
        age_s: Age of the held entry in seconds, if any.
        ttl_s: Configured time-to-live in seconds.
        feature_count: Number of features in the held entry, if it has any.
        builds_started: Builds started since construction.
        builds_failed: Builds that raised since construction.
    """

    name: str = ""
    state: CacheState = CacheState.EMPTY
    built_at: str | None = None
    age_s: float | None = None
    ttl_s: float = 0.0
    feature_count: int | None = None
    builds_started: int = Field(default=0, ge=0)
    builds_failed: int = Field(default=0, ge=0)
