"""Feature collection builder.

Builds the simplified FeatureCollection for one region:

1. Fetch the index document (region -> {name: filename}).
2. Select the configured region; if it is absent the build succeeds
   with an empty collection.
3. Fetch every per-file document concurrently.  One failed fetch fails
   the whole build and cancels the fetches still outstanding.
4. Keep the documents that are GeoJSON Features, simplify their
   geometry, and assemble them in index order.

Only step 1 and step 3 suspend; validation and simplification run
synchronously once all documents are in.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from region_boundaries.geometry.simplify import count_vertices, simplify_feature
from region_boundaries.geometry.validation import is_feature, is_record
from region_boundaries.models.collection import FeatureCollection

if TYPE_CHECKING:
    from region_boundaries.core.config import ServiceConfig
    from region_boundaries.sources.base import BoundarySource

logger = logging.getLogger("region_boundaries.services.collection_builder")


async def build_region_collection(
    source: BoundarySource,
    config: ServiceConfig,
) -> FeatureCollection:
    """Fetch, filter and simplify the boundary features of one region.

    Args:
        source: Where upstream JSON documents come from.
        config: Supplies ``index_url``, ``base_url``, ``region_key`` and
            ``simplify_tolerance``.

    Returns:
        The assembled ``FeatureCollection``.  Empty when the region key
        is missing from the index.

    Raises:
        UpstreamFetchError: If the index or any per-file fetch fails.
    """
    index = await source.fetch_json(config.index_url)
    filenames = region_filenames(index, config.region_key)
    if filenames is None:
        logger.warning(
            "Region not present in index | region=%s | index_url=%s",
            config.region_key,
            config.index_url,
        )
        return FeatureCollection.empty()

    urls = [config.file_url(filename) for filename in filenames]
    logger.info(
        "Building region collection | region=%s | files=%d | source=%s",
        config.region_key,
        len(urls),
        source.name,
    )

    documents = await fetch_all(source, urls)

    features = [doc for doc in documents if is_feature(doc)]
    skipped = len(documents) - len(features)
    if skipped:
        logger.debug(
            "Skipped non-Feature documents | region=%s | skipped=%d",
            config.region_key,
            skipped,
        )

    simplified = [simplify_feature(f, config.simplify_tolerance) for f in features]

    logger.info(
        "Region collection built | region=%s | files=%d | features=%d | skipped=%d | "
        "vertices=%d->%d | tolerance=%s",
        config.region_key,
        len(urls),
        len(simplified),
        skipped,
        sum(count_vertices(f) for f in features),
        sum(count_vertices(f) for f in simplified),
        config.simplify_tolerance,
    )
    return FeatureCollection(features=tuple(simplified))


def region_filenames(index: Any, region_key: str) -> list[str] | None:
    """Return the filenames listed under *region_key*, in index order.

    Returns ``None`` if the index is not an object or the region entry
    is missing or not an object.  Non-string values inside the region
    entry are skipped.
    """
    if not is_record(index):
        return None
    region = index.get(region_key)
    if not is_record(region):
        return None
    return [value for value in region.values() if isinstance(value, str)]


async def fetch_all(source: BoundarySource, urls: list[str]) -> list[Any]:
    """Fetch every URL concurrently and return the documents in URL order.

    If any fetch raises, or the caller is cancelled, the fetches still
    pending are cancelled before the exception propagates.
    """
    tasks = [asyncio.ensure_future(source.fetch_json(url)) for url in urls]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        # Let the cancelled fetches unwind before the caller sees the error.
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
