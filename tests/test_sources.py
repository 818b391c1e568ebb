"""
Tests for the PHIVOLCS scraper and the USGS client.

HTTP is served by ``httpx.MockTransport``; no test reaches the network.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest

from backend.app.core.config import Settings
from backend.app.core.errors import SourceUnavailable, TableNotFound
from backend.app.relief.models import SourceId
from backend.app.relief.sources import PhivolcsSource, RegionFilter, UsgsSource
from backend.app.relief.sources.phivolcs import find_earthquake_table, parse_phivolcs_html
from backend.app.relief.sources.usgs import parse_usgs_feature
from backend.app.spatial.radius_utils import BoundingBox

from conftest import (
    ABBREVIATED_HEADER_PAGE,
    PAGE_WITHOUT_TABLE,
    PHIVOLCS_PAGE,
    T0,
    usgs_feature,
)

REGION = RegionFilter(keyword="cebu", bbox=BoundingBox(9.4, 11.5, 123.0, 124.5))


def _fetch(source):
    async def run():
        try:
            return await source.fetch()
        finally:
            await source.close()
    return asyncio.run(run())


def _phivolcs(handler) -> PhivolcsSource:
    return PhivolcsSource(
        "https://earthquake.phivolcs.dost.gov.ph/",
        region=REGION,
        transport=httpx.MockTransport(handler),
    )


def _usgs(handler) -> UsgsSource:
    return UsgsSource(
        "https://earthquake.usgs.gov/fdsnws/event/1/query",
        latitude=10.5,
        longitude=123.9,
        transport=httpx.MockTransport(handler),
        clock=lambda: T0,
    )


# ═══════════════════════════════════════════════════════════════════════════
# PHIVOLCS — HTML parsing
# ═══════════════════════════════════════════════════════════════════════════

class TestParsePhivolcsHtml:
    def test_keeps_regional_rows(self):
        events = parse_phivolcs_html(PHIVOLCS_PAGE, REGION, now=T0)
        assert len(events) == 2

    def test_row_fields(self):
        event = parse_phivolcs_html(PHIVOLCS_PAGE, REGION, now=T0)[0]
        assert event.magnitude == 6.9
        assert event.latitude == 11.08
        assert event.longitude == 124.08
        assert event.depth == "010"
        assert event.source_id is SourceId.PRIMARY
        assert event.occurred_at_raw == "30 September 2025 - 09:59 PM"
        assert event.occurred_at == datetime(2025, 9, 30, 13, 59, tzinfo=timezone.utc)
        assert not event.timestamp_is_fallback

    def test_location_whitespace_collapsed(self):
        event = parse_phivolcs_html(PHIVOLCS_PAGE, REGION, now=T0)[0]
        assert event.location_label == "017 km N 51° E of Bogo City (Cebu)"

    def test_bounding_box_match_without_keyword(self):
        labels = [e.location_label for e in parse_phivolcs_html(PHIVOLCS_PAGE, REGION, now=T0)]
        assert "Offshore, Tañon Strait" in labels

    def test_out_of_region_dropped(self):
        labels = [e.location_label for e in parse_phivolcs_html(PHIVOLCS_PAGE, REGION, now=T0)]
        assert not any("Quezon City" in label for label in labels)

    def test_unreadable_rows_skipped(self):
        labels = [e.location_label for e in parse_phivolcs_html(PHIVOLCS_PAGE, REGION, now=T0)]
        assert "Somewhere (Cebu)" not in labels

    def test_bad_date_falls_back(self):
        page = PHIVOLCS_PAGE.replace("30 September 2025 - 09:59 PM", "pending")
        event = parse_phivolcs_html(page, REGION, now=T0)[0]
        assert event.timestamp_is_fallback
        assert event.occurred_at == T0
        assert event.occurred_at_raw == "pending"

    def test_no_table(self):
        with pytest.raises(TableNotFound) as exc_info:
            parse_phivolcs_html(PAGE_WITHOUT_TABLE, REGION)
        assert exc_info.value.details["tables_seen"] == 1
        assert exc_info.value.source == "PHIVOLCS"

    def test_abbreviated_header_not_recognised(self):
        with pytest.raises(TableNotFound):
            parse_phivolcs_html(ABBREVIATED_HEADER_PAGE, REGION)

    def test_table_not_found_is_source_unavailable(self):
        assert issubclass(TableNotFound, SourceUnavailable)

    def test_empty_page(self):
        assert find_earthquake_table([]) is None


class TestRegionFilter:
    def test_keyword_case_insensitive(self):
        assert REGION.matches("Near CEBU coast", 0.0, 0.0)

    def test_bbox(self):
        assert REGION.matches("Tañon Strait", 10.3, 123.6)

    def test_neither(self):
        assert not REGION.matches("Davao Oriental", 7.0, 126.5)

    def test_from_settings(self):
        region = RegionFilter.from_settings(Settings())
        assert region.keyword == "cebu"
        assert region.bbox.contains(10.3, 123.9)


# ═══════════════════════════════════════════════════════════════════════════
# PHIVOLCS — HTTP
# ═══════════════════════════════════════════════════════════════════════════

class TestPhivolcsSource:
    def test_fetch(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers.get("user-agent")
            return httpx.Response(200, text=PHIVOLCS_PAGE)

        events = _fetch(_phivolcs(handler))
        assert len(events) == 2
        assert seen["ua"] == "Mozilla/5.0"

    def test_http_error_status(self):
        source = _phivolcs(lambda request: httpx.Response(503, text="busy"))
        with pytest.raises(SourceUnavailable) as exc_info:
            _fetch(source)
        assert exc_info.value.reason == "HTTP 503"
        assert exc_info.value.details["status_code"] == 503

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(SourceUnavailable) as exc_info:
            _fetch(_phivolcs(handler))
        assert "timed out" in exc_info.value.reason

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(SourceUnavailable) as exc_info:
            _fetch(_phivolcs(handler))
        assert "ConnectError" in exc_info.value.reason

    def test_missing_table(self):
        source = _phivolcs(lambda request: httpx.Response(200, text=PAGE_WITHOUT_TABLE))
        with pytest.raises(TableNotFound):
            _fetch(source)

    def test_from_settings(self):
        source = PhivolcsSource.from_settings(Settings())
        assert source.name == "PHIVOLCS"
        assert source.timeout == 15.0
        assert source.verify is False


# ═══════════════════════════════════════════════════════════════════════════
# USGS
# ═══════════════════════════════════════════════════════════════════════════

class TestParseUsgsFeature:
    def test_mapping(self):
        event = parse_usgs_feature(usgs_feature())
        assert event.source_id is SourceId.SECONDARY
        assert event.latitude == 11.10
        assert event.longitude == 124.05
        assert event.depth == "10 km"
        assert event.magnitude == 5.2
        assert event.location_label == "12 km NE of Bogo, Philippines"
        assert event.occurred_at == datetime(2025, 9, 30, 13, 59, tzinfo=timezone.utc)
        assert event.occurred_at_raw == "30 September 2025 - 09:59 PM"

    def test_fractional_depth(self):
        assert parse_usgs_feature(usgs_feature(coords=(124.0, 10.0, 12.345))).depth == "12.345 km"

    def test_missing_magnitude_and_place(self):
        event = parse_usgs_feature(usgs_feature(mag=None, place=None), fallback_place="Near Cebu")
        assert event.magnitude == 0.0
        assert event.location_label == "Near Cebu"

    def test_unreadable_feature(self):
        assert parse_usgs_feature({"properties": {}}) is None
        assert parse_usgs_feature(usgs_feature(coords=(124.0,))) is None


class TestUsgsSource:
    def test_query_params(self):
        source = _usgs(lambda request: httpx.Response(200, json={"features": []}))
        params = source.query_params()
        assert params["format"] == "geojson"
        assert params["starttime"] == "2025-09-23"
        assert params["maxradiuskm"] == 200.0
        assert params["minmagnitude"] == 3.0

    def test_fetch(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"features": [
                usgs_feature(),
                usgs_feature(mag=None, place=None),
                {"type": "Feature"},
            ]})

        events = _fetch(_usgs(handler))
        assert len(events) == 2
        assert events[1].location_label == "Near Cebu"
        assert seen["params"]["format"] == "geojson"
        assert seen["params"]["latitude"] == "10.5"
        assert seen["params"]["starttime"] == "2025-09-23"

    def test_invalid_json(self):
        source = _usgs(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
        with pytest.raises(SourceUnavailable):
            _fetch(source)

    def test_missing_features(self):
        source = _usgs(lambda request: httpx.Response(200, json={"type": "FeatureCollection"}))
        with pytest.raises(SourceUnavailable):
            _fetch(source)

    def test_features_not_a_list(self):
        body = json.dumps({"features": {"oops": True}})
        source = _usgs(lambda request: httpx.Response(200, text=body))
        with pytest.raises(SourceUnavailable) as exc_info:
            _fetch(source)
        assert "not a list" in exc_info.value.reason

    def test_http_error(self):
        source = _usgs(lambda request: httpx.Response(500))
        with pytest.raises(SourceUnavailable) as exc_info:
            _fetch(source)
        assert exc_info.value.source == "USGS"
