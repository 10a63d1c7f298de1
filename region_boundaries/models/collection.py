"""Data models for the aggregated boundary collection and its cache entry.

``FeatureCollection`` is the output of the collection builder and the
value held by the cache.  ``CacheEntry`` pairs it with the wall-clock
time the build completed.  Both are frozen: a cache entry is replaced
wholesale, never edited.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from region_boundaries.core.constants import FEATURE_COLLECTION_TYPE


@dataclass(frozen=True, slots=True)
class FeatureCollection:
    """An ordered collection of GeoJSON Feature objects.

    Attributes:
        features: Feature mappings in build order.
    """

    features: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> FeatureCollection:
        """A collection with no features (e.g. region absent from the index)."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a GeoJSON ``FeatureCollection`` dict.

        Every call returns a deep copy, so callers may edit the result
        without touching the cached features.
        """
        return {
            "type": FEATURE_COLLECTION_TYPE,
            "features": copy.deepcopy(list(self.features)),
        }

    def __len__(self) -> int:
        return len(self.features)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A successfully built value and when its build completed.

    Attributes:
        value: The cached value (a ``FeatureCollection`` in this service).
        built_at: Epoch seconds at build completion.
    """

    value: Any
    built_at: float

    def age(self, now: float) -> float:
        """Seconds elapsed between ``built_at`` and *now*."""
        return now - self.built_at
