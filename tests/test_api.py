"""
HTTP-level tests for the relief router and application probes.

The process-wide report service is replaced through
``app.dependency_overrides`` with one wired to in-memory sources.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app
from backend.app.relief.cache import ReportCache
from backend.app.relief.fetcher import FetchOrchestrator
from backend.app.relief.locations import CEBU_LOCATIONS
from backend.app.relief.models import SourceId
from backend.app.relief.service import ReliefReportService, get_report_service

from conftest import FakeSource, ManualClock, make_event

BASE = "/api/v1/relief"


@pytest.fixture
def sources():
    return (
        FakeSource(SourceId.PRIMARY, [make_event(6.8)]),
        FakeSource(SourceId.SECONDARY, [make_event(5.0, source_id=SourceId.SECONDARY)]),
    )


@pytest.fixture
def service(sources):
    primary, secondary = sources
    return ReliefReportService(
        FetchOrchestrator(primary, secondary),
        ReportCache(ttl_seconds=120, clock=ManualClock()),
        CEBU_LOCATIONS,
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_report_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestReliefDistribution:
    def test_report(self, client):
        resp = client.get(f"{BASE}/relief-distribution")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["status"] == "🚨 EMERGENCY"
        assert body["cached"] is False
        assert body["affectedAreas"][0]["impactLevel"] == "CRITICAL"
        assert isinstance(body["affectedAreas"][0]["distance"], str)

    def test_second_call_cached(self, client, sources):
        client.get(f"{BASE}/relief-distribution")
        body = client.get(f"{BASE}/relief-distribution").json()
        assert body["cached"] is True
        assert body["cacheAge"] == "0s ago"
        assert sources[0].calls == 1

    def test_both_sources_down(self, client, sources):
        for source in sources:
            source.fail = "HTTP 503"
        resp = client.get(f"{BASE}/relief-distribution")
        assert resp.status_code == 500
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "Failed to fetch real-time earthquake data"
        assert "All seismic data sources failed" in body["details"]
        assert "timestamp" in body

    def test_request_id_header(self, client):
        resp = client.get(f"{BASE}/relief-distribution", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"
        assert "X-Process-Time" in resp.headers


class TestCacheClear:
    def test_clear_then_refetch(self, client, sources):
        client.get(f"{BASE}/relief-distribution")
        resp = client.post(f"{BASE}/cache/clear")
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert resp.json()["message"] == "Cache cleared successfully"

        body = client.get(f"{BASE}/relief-distribution").json()
        assert body["cached"] is False
        assert sources[0].calls == 2

    def test_clear_on_empty_cache(self, client):
        assert client.post(f"{BASE}/cache/clear").status_code == 200


class TestReliefHealth:
    def test_health(self, client):
        body = client.get(f"{BASE}/health").json()
        assert body["status"] == "operational"
        assert body["dataSources"] == {"primary": "PHIVOLCS", "backup": "USGS"}
        assert body["cacheStatus"]["active"] is False
        assert body["monitoredLocations"] == 30

    def test_health_reflects_cache(self, client):
        client.get(f"{BASE}/relief-distribution")
        body = client.get(f"{BASE}/health").json()
        assert body["cacheStatus"] == {"active": True, "ageSeconds": 0, "expiresIn": 120}


class TestReferenceEndpoints:
    def test_locations(self, client):
        body = client.get(f"{BASE}/locations").json()
        assert body["count"] == 30
        assert body["totalPopulation"] == sum(loc.population for loc in CEBU_LOCATIONS)
        assert body["locations"][0]["name"] == "Bogo City"

    def test_policy(self, client):
        body = client.get(f"{BASE}/policy").json()
        assert len(body["rules"]) == 10
        assert body["rules"][0]["level"] == "CRITICAL"
        assert body["minimal"]["priority"] == 10
        assert body["recommendationCounts"]["CRITICAL"] == 5
        assert body["recommendationCounts"]["MINIMAL"] == 0


class TestAppProbes:
    def test_root(self, client):
        body = client.get("/").json()
        assert f"{BASE}/relief-distribution" in body["endpoints"]

    def test_liveness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_deep_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        names = {c["name"] for c in body["components"]}
        assert names == {"report_cache", "seismic_sources", "location_registry"}

    def test_readiness(self, client):
        assert client.get("/health/ready").status_code == 200

    def test_unknown_route_uses_envelope(self, client):
        resp = client.get(f"{BASE}/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["success"] is False
