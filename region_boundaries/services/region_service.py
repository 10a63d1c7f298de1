"""Region boundary service: the public entry point.

Wires a ``BoundarySource`` and the collection builder behind a
``TTLSingleFlightCache``.  The HTTP layer holds one instance per
process and calls ``get_simplified_region()`` per request::

    service = RegionBoundaryService(ServiceConfig.from_env())
    ...
    body = await service.get_simplified_region()
    headers = {"Cache-Control": service.cache_control_header()}
    ...
    await service.aclose()

Failures from the builder (``UpstreamFetchError``) are relayed
unchanged; turning them into an error response is the caller's job.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from region_boundaries.core.config import ServiceConfig
from region_boundaries.services.collection_builder import build_region_collection
from region_boundaries.services.single_flight import TTLSingleFlightCache
from region_boundaries.sources.http import HttpBoundarySource

if TYPE_CHECKING:
    from collections.abc import Callable

    from region_boundaries.models.cache_status import CacheStatus
    from region_boundaries.models.collection import FeatureCollection
    from region_boundaries.sources.base import BoundarySource

logger = logging.getLogger("region_boundaries.services.region_service")


class RegionBoundaryService:
    """Serves the simplified boundary collection of one region.

    Args:
        config: Service configuration.  Defaults to ``ServiceConfig()``;
            it is validated on construction.
        source: Upstream document source.  When omitted an
            ``HttpBoundarySource`` is created and closed by ``aclose()``.
        clock: Wall-clock source for the cache TTL.

    Raises:
        ConfigValidationError: If *config* is out of range.
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        *,
        source: BoundarySource | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or ServiceConfig()
        self._config.validate()
        self._owns_source = source is None
        self._source = source or HttpBoundarySource(timeout_s=self._config.fetch_timeout_s)
        self._cache: TTLSingleFlightCache[FeatureCollection] = TTLSingleFlightCache(
            self._build,
            ttl_s=self._config.cache_ttl_s,
            clock=clock,
            name=f"region:{self._config.region_key}",
        )
        logger.info(
            "Region boundary service created | region=%s | ttl=%.0fs | tolerance=%s | source=%s",
            self._config.region_key,
            self._config.cache_ttl_s,
            self._config.simplify_tolerance,
            self._source.name,
        )

    @property
    def config(self) -> ServiceConfig:
        """Return the service configuration (read-only)."""
        return self._config

    async def get_simplified_region(self) -> dict[str, Any]:
        """Return the region's simplified GeoJSON ``FeatureCollection``.

        Served from cache while fresh; otherwise built (or joined, if a
        build is already running).

        Raises:
            UpstreamFetchError: If the build this call waited on failed.
        """
        collection = await self._cache.get()
        return collection.to_dict()

    def cache_control_header(self) -> str:
        """``Cache-Control`` value mirroring the cache TTL."""
        return f"public, max-age={int(self._config.cache_ttl_s)}"

    def status(self) -> CacheStatus:
        """Return a diagnostics snapshot of the underlying cache."""
        return self._cache.status()

    def invalidate(self) -> None:
        """Force the next call to rebuild."""
        self._cache.invalidate()

    async def aclose(self) -> None:
        """Close the source if this service created it."""
        if self._owns_source:
            await self._source.aclose()

    async def __aenter__(self) -> RegionBoundaryService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _build(self) -> FeatureCollection:
        return await build_region_collection(self._source, self._config)
