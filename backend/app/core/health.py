"""
Health check aggregation — deep health probe for the relief service.

Checks:
    • Report cache (populated, fresh or stale)
    • Seismic sources (configuration of primary and backup feeds)
    • Location registry (non-empty)

Upstream feeds are not called here; a probe must stay cheap and must not
count against PHIVOLCS rate limits. Source reachability shows up in the
report endpoint instead.

Returns a structured health report suitable for:
    - Kubernetes liveness/readiness probes
    - Load balancer health checks
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from backend.app.core.config import settings
from backend.app.relief.service import ReliefReportService

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"  # partial functionality
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    name: str
    status: HealthStatus = HealthStatus.HEALTHY
    latency_ms: float = 0.0
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            d["message"] = self.message
        if self.details:
            d["details"] = self.details
        return d


@dataclass
class HealthReport:
    status: HealthStatus = HealthStatus.HEALTHY
    version: str = settings.APP_VERSION
    environment: str = settings.ENVIRONMENT
    timestamp: str = ""
    uptime_seconds: float = 0.0
    components: List[ComponentHealth] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "version": self.version,
            "environment": self.environment,
            "timestamp": self.timestamp or datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": round(self.uptime_seconds, 1),
            "components": [c.to_dict() for c in self.components],
        }


_start_time = time.monotonic()


def check_report_cache(service: ReliefReportService) -> ComponentHealth:
    comp = ComponentHealth(name="report_cache")
    start = time.monotonic()
    cache = service.cache
    comp.details = {
        "active": cache.active,
        "age_seconds": int(cache.age_seconds()),
        "expires_in_seconds": int(cache.expires_in_seconds()),
        "ttl_seconds": int(cache.ttl_seconds),
    }
    if not cache.active:
        comp.message = "Empty; next report request will fetch"
    elif cache.is_fresh():
        comp.message = "Fresh report cached"
    else:
        comp.message = "Cached report is stale"
    comp.latency_ms = (time.monotonic() - start) * 1000
    return comp


def check_sources(service: ReliefReportService) -> ComponentHealth:
    comp = ComponentHealth(name="seismic_sources")
    start = time.monotonic()
    comp.details = {
        source.name: {"url": source.url, "timeout_s": source.timeout}
        for source in service.orchestrator.sources
    }
    missing = [s.name for s in service.orchestrator.sources if not s.url]
    if len(missing) == len(service.orchestrator.sources):
        comp.status = HealthStatus.UNHEALTHY
        comp.message = "No seismic source configured"
    elif missing:
        comp.status = HealthStatus.DEGRADED
        comp.message = f"Unconfigured: {', '.join(missing)}"
    else:
        comp.message = "Primary and backup configured"
    comp.latency_ms = (time.monotonic() - start) * 1000
    return comp


def check_locations(service: ReliefReportService) -> ComponentHealth:
    comp = ComponentHealth(name="location_registry")
    count = len(service.locations)
    comp.details = {"count": count}
    if count == 0:
        comp.status = HealthStatus.UNHEALTHY
        comp.message = "No monitored locations"
    else:
        comp.message = f"{count} locations monitored"
    return comp


async def run_health_check(service: ReliefReportService) -> HealthReport:
    """Run all health checks and aggregate into a report."""
    report = HealthReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=time.monotonic() - _start_time,
    )

    report.components = [
        check_report_cache(service),
        check_sources(service),
        check_locations(service),
    ]

    statuses = [c.status for c in report.components]
    if HealthStatus.UNHEALTHY in statuses:
        report.status = HealthStatus.UNHEALTHY
    elif HealthStatus.DEGRADED in statuses:
        report.status = HealthStatus.DEGRADED
    else:
        report.status = HealthStatus.HEALTHY

    return report
