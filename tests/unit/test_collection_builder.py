"""Tests for the feature collection builder.

Covers:
- Index lookup, region selection and filename resolution
- Region absent from the index -> empty collection, not an error
- Non-Feature documents skipped; Features simplified in index order
- Concurrent per-file fetch; one failure fails the build and cancels
  the fetches still outstanding
- Build logging
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any

import pytest

from region_boundaries.core.config import ServiceConfig
from region_boundaries.models.collection import FeatureCollection
from region_boundaries.services.collection_builder import (
    build_region_collection,
    fetch_all,
    region_filenames,
)
from region_boundaries.sources.base import UpstreamFetchError
from tests.conftest import BASE_URL, INDEX_URL, polygon_feature, square_ring
from tests.unit.test_source_contract import FakeBoundarySource


def _build(source: FakeBoundarySource, config: ServiceConfig) -> FeatureCollection:
    return asyncio.run(build_region_collection(source, config))


# ===========================================================================
# Region selection
# ===========================================================================


class TestRegionFilenames:
    def test_values_in_index_order(self) -> None:
        index = {"Asia": {"b": "f2.geojson", "a": "f1.geojson"}}
        assert region_filenames(index, "Asia") == ["f2.geojson", "f1.geojson"]

    def test_non_string_values_skipped(self) -> None:
        index = {"Asia": {"a": "f1.geojson", "b": 3, "c": None, "d": ["x"], "e": "f5.geojson"}}
        assert region_filenames(index, "Asia") == ["f1.geojson", "f5.geojson"]

    @pytest.mark.parametrize(
        "index",
        [{"Europe": {"a": "f.geojson"}}, {"Asia": ["f.geojson"]}, {"Asia": "f.geojson"}, [], None, "Asia"],
    )
    def test_missing_region(self, index: Any) -> None:
        assert region_filenames(index, "Asia") is None

    def test_empty_region(self) -> None:
        assert region_filenames({"Asia": {}}, "Asia") == []


# ===========================================================================
# Builds
# ===========================================================================


class TestBuildRegionCollection:
    def test_builds_simplified_collection(
        self, config: ServiceConfig, asia_documents: dict[str, Any]
    ) -> None:
        source = FakeBoundarySource(asia_documents)
        fc = _build(source, config)

        names = [f["properties"]["name"] for f in fc.features]
        assert names == ["Japan", "Mongolia"]

        mongolia = fc.features[1]["geometry"]["coordinates"]
        assert mongolia == [[[88.0, 49.0], [100.0, 52.0], [120.0, 47.0], [105.0, 42.0], [88.0, 49.0]]]

        japan = fc.features[0]["geometry"]["coordinates"]
        assert japan == [[square_ring(130.0, 31.0, 2.0)], [square_ring(139.0, 35.0, 3.0)]]

    def test_fetches_index_then_region_files_only(
        self, config: ServiceConfig, asia_documents: dict[str, Any]
    ) -> None:
        source = FakeBoundarySource(asia_documents)
        _build(source, config)
        assert source.calls[0] == INDEX_URL
        assert sorted(source.calls[1:]) == sorted(
            [f"{BASE_URL}jpn.geojson", f"{BASE_URL}mng.geojson", f"{BASE_URL}broken.geojson"]
        )
        assert f"{BASE_URL}fra.geojson" not in source.calls

    def test_other_region_key(self, config: ServiceConfig, asia_documents: dict[str, Any]) -> None:
        source = FakeBoundarySource(asia_documents)
        fc = _build(source, replace(config, region_key="Europe"))
        assert [f["properties"]["name"] for f in fc.features] == ["France"]

    def test_region_absent_returns_empty(self, config: ServiceConfig) -> None:
        source = FakeBoundarySource({INDEX_URL: {"Europe": {"France": "fra.geojson"}}})
        fc = _build(source, config)
        assert fc == FeatureCollection.empty()
        assert source.calls == [INDEX_URL]

    def test_index_not_an_object_returns_empty(self, config: ServiceConfig) -> None:
        source = FakeBoundarySource({INDEX_URL: ["Asia"]})
        assert len(_build(source, config)) == 0

    def test_region_absent_logged(self, config: ServiceConfig, caplog: pytest.LogCaptureFixture) -> None:
        source = FakeBoundarySource({INDEX_URL: {}})
        with caplog.at_level(logging.WARNING, logger="region_boundaries.services.collection_builder"):
            _build(source, config)
        assert "region not present" in caplog.text.lower()
        assert "Asia" in caplog.text

    def test_non_feature_documents_skipped(self, config: ServiceConfig) -> None:
        documents = {
            INDEX_URL: {"Asia": {"a": "a.json", "b": "b.json", "c": "c.json", "d": "d.json"}},
            f"{BASE_URL}a.json": {"type": "Topology"},
            f"{BASE_URL}b.json": ["not", "an", "object"],
            f"{BASE_URL}c.json": polygon_feature("C", [square_ring(0, 0, 1)]),
            f"{BASE_URL}d.json": None,
        }
        fc = _build(FakeBoundarySource(documents), config)
        assert [f["properties"]["name"] for f in fc.features] == ["C"]

    def test_unrecognised_geometry_passed_through(self, config: ServiceConfig) -> None:
        point = {"type": "Feature", "properties": {"name": "P"}, "geometry": {"type": "Point", "coordinates": [1, 2]}}
        documents = {INDEX_URL: {"Asia": {"p": "p.json"}}, f"{BASE_URL}p.json": point}
        fc = _build(FakeBoundarySource(documents), config)
        assert fc.features == (point,)

    def test_uses_configured_tolerance(self, config: ServiceConfig) -> None:
        ring = [[0, 0], [5, 0.5], [10, 0], [10, 10], [0, 10], [0, 0]]
        documents = {INDEX_URL: {"Asia": {"a": "a.json"}}, f"{BASE_URL}a.json": polygon_feature("A", [ring])}

        coarse = _build(FakeBoundarySource(documents), replace(config, simplify_tolerance=1.0))
        fine = _build(FakeBoundarySource(documents), replace(config, simplify_tolerance=0.1))

        assert len(coarse.features[0]["geometry"]["coordinates"][0]) == 5
        assert fine.features[0]["geometry"]["coordinates"][0] == ring

    def test_empty_region_builds_empty_collection(self, config: ServiceConfig) -> None:
        source = FakeBoundarySource({INDEX_URL: {"Asia": {}}})
        assert len(_build(source, config)) == 0

    def test_build_logged(
        self,
        config: ServiceConfig,
        asia_documents: dict[str, Any],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="region_boundaries.services.collection_builder"):
            _build(FakeBoundarySource(asia_documents), config)
        assert "region collection built" in caplog.text.lower()
        assert "features=2" in caplog.text
        assert "skipped=1" in caplog.text
        assert "vertices=16->15" in caplog.text


# ===========================================================================
# Failures
# ===========================================================================


class TestBuildFailures:
    def test_index_failure_propagates(self, config: ServiceConfig) -> None:
        err = UpstreamFetchError(INDEX_URL, "HTTP 503 from upstream", retryable=True)
        source = FakeBoundarySource(failures={INDEX_URL: err})
        with pytest.raises(UpstreamFetchError) as exc_info:
            _build(source, config)
        assert exc_info.value is err

    def test_one_file_failure_fails_build(self, config: ServiceConfig) -> None:
        """Index lists f1 and f2; f1 is a valid 6-point Polygon, f2 fails."""
        f1 = polygon_feature("a", [[[0, 0], [0, 10], [5, 0.01], [10, 10], [10, 0], [0, 0]]])
        documents = {
            INDEX_URL: {"Asia": {"a": "f1.geojson", "b": "f2.geojson"}},
            f"{BASE_URL}f1.geojson": f1,
        }
        source = FakeBoundarySource(documents)
        with pytest.raises(UpstreamFetchError) as exc_info:
            _build(source, config)
        assert exc_info.value.url == f"{BASE_URL}f2.geojson"

    def test_failure_cancels_outstanding_fetches(self, config: ServiceConfig) -> None:
        documents = {
            INDEX_URL: {"Asia": {"slow": "slow.json", "bad": "bad.json"}},
            f"{BASE_URL}slow.json": polygon_feature("slow", [square_ring(0, 0, 1)]),
        }
        source = FakeBoundarySource(documents)

        async def run() -> None:
            source.hold(f"{BASE_URL}slow.json")
            await build_region_collection(source, config)

        with pytest.raises(UpstreamFetchError):
            asyncio.run(run())
        assert source.cancelled == [f"{BASE_URL}slow.json"]

    def test_cancelling_build_cancels_fetches(self, config: ServiceConfig, asia_documents: dict[str, Any]) -> None:
        source = FakeBoundarySource(asia_documents)

        async def run() -> None:
            for name in ("jpn", "mng", "broken"):
                source.hold(f"{BASE_URL}{name}.geojson")
            task = asyncio.ensure_future(build_region_collection(source, config))
            for _ in range(5):
                await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())
        assert sorted(source.cancelled) == sorted(
            [f"{BASE_URL}jpn.geojson", f"{BASE_URL}mng.geojson", f"{BASE_URL}broken.geojson"]
        )


class TestFetchAll:
    def test_results_in_url_order(self) -> None:
        docs = {"u1": 1, "u2": 2, "u3": 3}
        source = FakeBoundarySource(docs)

        async def run() -> list[Any]:
            gate = source.hold("u1")
            task = asyncio.ensure_future(fetch_all(source, ["u1", "u2", "u3"]))
            await asyncio.sleep(0)
            gate.set()
            return await task

        assert asyncio.run(run()) == [1, 2, 3]

    def test_fetches_start_together(self) -> None:
        source = FakeBoundarySource({"u1": 1, "u2": 2})

        async def run() -> list[str]:
            source.hold("u1")
            source.hold("u2")
            task = asyncio.ensure_future(fetch_all(source, ["u1", "u2"]))
            for _ in range(3):
                await asyncio.sleep(0)
            started = list(source.calls)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return started

        assert asyncio.run(run()) == ["u1", "u2"]

    def test_no_urls(self) -> None:
        assert asyncio.run(fetch_all(FakeBoundarySource(), [])) == []
