"""TTL cache with single-flight build deduplication.

One cache instance holds at most one built value and at most one
in-flight build.  States:

    EMPTY     no value yet                 -> next get() starts a build
    FRESH     value age < ttl              -> get() returns it, no I/O
    STALE     value age >= ttl             -> next get() starts a build
    BUILDING  a build task is outstanding  -> get() attaches to it

Every caller that arrives while a build is outstanding awaits that same
task, so N concurrent misses cost one upstream build.  All of them get
the same value or the same exception.

On success the entry is replaced with the new value, stamped with the
clock reading at completion.  On failure the previous entry, if any, is
kept as it was; the callers attached to the failed build see the
exception and the next call starts a new build.

Callers await the build through ``asyncio.shield``: a caller that is
cancelled stops waiting, but the build carries on and still fills the
cache for later callers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sized
from datetime import UTC, datetime
from typing import Generic, TypeVar

from region_boundaries.models.cache_status import CacheState, CacheStatus
from region_boundaries.models.collection import CacheEntry

logger = logging.getLogger("region_boundaries.services.single_flight")

T = TypeVar("T")


class TTLSingleFlightCache(Generic[T]):
    """Time-bounded cache around an async loader with in-flight coalescing.

    Construct once per logical service instance and share the object
    with whatever serves requests.  Must be used from a single event
    loop.

    Args:
        loader: Zero-argument coroutine function producing a new value.
        ttl_s: Seconds a built value stays fresh, measured from build
            completion.
        clock: Wall-clock source returning epoch seconds.
        name: Label for log lines and ``status()``.

    Raises:
        ValueError: If *ttl_s* is not positive.
    """

    def __init__(
        self,
        loader: Callable[[], Awaitable[T]],
        *,
        ttl_s: float,
        clock: Callable[[], float] = time.time,
        name: str = "cache",
    ) -> None:
        if not ttl_s > 0:
            msg = f"ttl_s must be > 0, got {ttl_s}"
            raise ValueError(msg)
        self._loader = loader
        self._ttl_s = ttl_s
        self._clock = clock
        self._name = name
        self._entry: CacheEntry | None = None
        self._inflight: asyncio.Task[T] | None = None
        self._builds_started = 0
        self._builds_failed = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def ttl_s(self) -> float:
        return self._ttl_s

    @property
    def entry(self) -> CacheEntry | None:
        """The last successfully built entry, fresh or stale."""
        return self._entry

    @property
    def state(self) -> CacheState:
        if self._inflight is not None:
            return CacheState.BUILDING
        if self._entry is None:
            return CacheState.EMPTY
        return CacheState.FRESH if self._is_fresh(self._entry) else CacheState.STALE

    @property
    def builds_started(self) -> int:
        return self._builds_started

    @property
    def builds_failed(self) -> int:
        return self._builds_failed

    def status(self) -> CacheStatus:
        """Return a diagnostics snapshot of the cache."""
        entry = self._entry
        if entry is None:
            built_at = age_s = feature_count = None
        else:
            built_at = datetime.fromtimestamp(entry.built_at, UTC).isoformat()
            age_s = max(entry.age(self._clock()), 0.0)
            feature_count = len(entry.value) if isinstance(entry.value, Sized) else None
        return CacheStatus(
            name=self._name,
            state=self.state,
            built_at=built_at,
            age_s=age_s,
            ttl_s=self._ttl_s,
            feature_count=feature_count,
            builds_started=self._builds_started,
            builds_failed=self._builds_failed,
        )

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    async def get(self) -> T:
        """Return the cached value, building it if empty or stale.

        Raises:
            Exception: Whatever the loader raised for the build this call
                attached to.
        """
        entry = self._entry
        if entry is not None and self._is_fresh(entry):
            logger.debug("Cache hit | name=%s | age=%.1fs", self._name, entry.age(self._clock()))
            return entry.value  # type: ignore[no-any-return]

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._build())
            self._inflight.add_done_callback(_consume_exception)
        else:
            logger.debug("Attaching to in-flight build | name=%s", self._name)

        return await asyncio.shield(self._inflight)

    def invalidate(self) -> None:
        """Drop the cached entry.  An in-flight build is left running."""
        self._entry = None
        logger.info("Cache invalidated | name=%s", self._name)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return entry.age(self._clock()) < self._ttl_s

    async def _build(self) -> T:
        self._builds_started += 1
        previous = "stale" if self._entry is not None else "empty"
        logger.info("Cache build started | name=%s | previous=%s", self._name, previous)
        try:
            value = await self._loader()
        except Exception:
            self._builds_failed += 1
            logger.warning(
                "Cache build failed | name=%s | kept_previous=%s | failures=%d",
                self._name,
                self._entry is not None,
                self._builds_failed,
                exc_info=True,
            )
            raise
        else:
            self._entry = CacheEntry(value=value, built_at=self._clock())
            logger.info("Cache build completed | name=%s | ttl=%.0fs", self._name, self._ttl_s)
            return value
        finally:
            self._inflight = None


def _consume_exception(task: asyncio.Task[object]) -> None:
    """Mark a build's exception as retrieved even if no caller awaited it."""
    if not task.cancelled():
        task.exception()
