"""
service.py — Relief report assembly behind a time-boxed cache.

Request flow:

    get_report()
      ├─ cache FRESH  → cached payload + {cached: true, cacheAge}
      └─ STALE/EMPTY  → fetch (PHIVOLCS, else USGS)
                        → sort events newest first, then strongest first
                        → aggregate per location
                        → summary counts + deployment buckets
                        → overwrite cache
                        → payload + {cached: false}

A fetch that succeeds with zero events still produces (and caches) a
normal "NO RECENT EARTHQUAKES" report so the feed stays available. Any
failure, including both sources being down, raises
``ReportGenerationError`` and leaves the previous cache entry untouched.

Concurrency
-----------
There is no background refresh; the first request after expiry pays for
the recompute. With ``single_flight`` enabled, concurrent requests that
find the cache stale queue on the cache lock and re-check freshness, so
one upstream fetch serves them all. With it disabled each of them
recomputes independently.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from backend.app.core.config import settings
from backend.app.core.errors import ReportGenerationError
from backend.app.relief.aggregator import aggregate, areas_in_tier, summarize
from backend.app.relief.cache import ReportCache
from backend.app.relief.fetcher import FetchOrchestrator
from backend.app.relief.locations import CEBU_LOCATIONS, MonitoredLocation
from backend.app.relief.models import SeismicEvent, SeverityTier

logger = logging.getLogger(__name__)


class ReportStatus(str, Enum):
    """Headline status shown on the responder dashboard."""
    EMERGENCY   = "🚨 EMERGENCY"   # at least one CRITICAL area
    URGENT      = "⚠️ URGENT"      # at least one SEVERE area
    MONITOR     = "ℹ️ MONITOR"     # impact below SEVERE
    NO_ACTIVITY = "NO RECENT EARTHQUAKES"


DATA_FRESHNESS = "Live from PHIVOLCS/USGS"


def sort_events(events: Sequence[SeismicEvent]) -> List[SeismicEvent]:
    """Newest first; equal timestamps strongest first; otherwise stable."""
    return sorted(events, key=lambda e: (e.occurred_at, e.magnitude), reverse=True)


def _zero_summary() -> Dict[str, int]:
    return summarize([], [])


class ReliefReportService:
    """
    Builds and caches the relief deployment report.

    Usage:
        service = ReliefReportService(FetchOrchestrator.from_settings(), ReportCache())
        report = await service.get_report()
    """

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        cache: ReportCache,
        locations: Sequence[MonitoredLocation] = CEBU_LOCATIONS,
        *,
        max_areas: int = 30,
        max_recent: int = 10,
        single_flight: bool = True,
        region_name: str = "Cebu",
    ):
        self.orchestrator = orchestrator
        self.cache = cache
        self.locations = tuple(locations)
        self.max_areas = max_areas
        self.max_recent = max_recent
        self.single_flight = single_flight
        self.region_name = region_name

    # ── Report ──

    async def get_report(self) -> Dict[str, Any]:
        cached = self._serve_cached()
        if cached is not None:
            return cached

        if not self.single_flight:
            return await self._recompute()

        async with self.cache.lock:
            # Another request may have refreshed the cache while we waited
            cached = self._serve_cached()
            if cached is not None:
                return cached
            return await self._recompute()

    def _serve_cached(self) -> Optional[Dict[str, Any]]:
        payload = self.cache.get()
        if payload is None:
            return None
        age = int(self.cache.age_seconds())
        logger.debug("Relief report cache HIT (%ds old)", age, extra={"cache_age_s": age, "cached": True})
        payload["cached"] = True
        payload["cacheAge"] = f"{age}s ago"
        payload["cacheAgeSeconds"] = age
        return payload

    async def _recompute(self) -> Dict[str, Any]:
        started = self.cache.now()
        try:
            events = await self.orchestrator.fetch_events()
            payload = self.build_report(events, started)
        except Exception as exc:
            logger.error("Relief report generation failed: %s", exc)
            raise ReportGenerationError(exc) from exc

        self.cache.set(payload, computed_at=started)
        logger.info(
            "Relief report recomputed: %s, %d event(s), %d affected area(s)",
            payload["status"],
            payload["summary"]["totalEarthquakes"],
            payload["summary"]["affectedLocations"],
            extra={"event_count": payload["summary"]["totalEarthquakes"], "cached": False},
        )

        result = dict(payload)
        result["cached"] = False
        return result

    def build_report(self, events: Sequence[SeismicEvent], now: datetime) -> Dict[str, Any]:
        """Pure envelope construction for one cycle's events."""
        next_update = (now + self.cache.ttl).isoformat()

        if not events:
            return {
                "success": True,
                "status": ReportStatus.NO_ACTIVITY.value,
                "message": f"No significant seismic activity detected in {self.region_name} region",
                "summary": _zero_summary(),
                "deploymentPriority": {"critical": [], "severe": [], "high": []},
                "affectedAreas": [],
                "recentEarthquakes": [],
                "timestamp": now.isoformat(),
                "nextUpdate": next_update,
                "dataFreshness": DATA_FRESHNESS,
            }

        ordered = sort_events(events)
        areas = aggregate(ordered, self.locations)
        critical = areas_in_tier(areas, SeverityTier.CRITICAL)
        severe = areas_in_tier(areas, SeverityTier.SEVERE)
        high = areas_in_tier(areas, SeverityTier.HIGH)

        if critical:
            status = ReportStatus.EMERGENCY
        elif severe:
            status = ReportStatus.URGENT
        else:
            status = ReportStatus.MONITOR

        fallbacks = sum(1 for e in ordered if e.timestamp_is_fallback)
        if fallbacks:
            logger.warning("%d event(s) carry fetch-time timestamps", fallbacks)

        return {
            "success": True,
            "status": status.value,
            "summary": summarize(ordered, areas),
            "deploymentPriority": {
                "critical": [a.to_dict() for a in critical],
                "severe": [a.to_dict() for a in severe],
                "high": [a.to_dict() for a in high],
            },
            "affectedAreas": [a.to_dict() for a in areas[: self.max_areas]],
            "recentEarthquakes": [e.summary() for e in ordered[: self.max_recent]],
            "dataSource": ordered[0].source_label,
            "timestamp": now.isoformat(),
            "nextUpdate": next_update,
            "dataFreshness": DATA_FRESHNESS,
        }

    # ── Administration ──

    def clear_cache(self) -> Dict[str, Any]:
        self.cache.clear()
        return {
            "success": True,
            "message": "Cache cleared successfully",
            "timestamp": self.cache.now().isoformat(),
        }

    def health(self) -> Dict[str, Any]:
        return {
            "status": "operational",
            "mode": "REAL-TIME DYNAMIC",
            "dataSources": {
                "primary": self.orchestrator.primary.name,
                "backup": self.orchestrator.secondary.name,
            },
            "cacheStatus": {
                "active": self.cache.active,
                "ageSeconds": int(self.cache.age_seconds()),
                "expiresIn": int(self.cache.expires_in_seconds()),
            },
            "coverage": f"{len(self.locations)} locations in {self.region_name}",
            "monitoredLocations": len(self.locations),
            "timestamp": self.cache.now().isoformat(),
        }

    async def close(self) -> None:
        await self.orchestrator.close()


@lru_cache()
def get_report_service() -> ReliefReportService:
    """Process-wide report service (FastAPI dependency)."""
    return ReliefReportService(
        FetchOrchestrator.from_settings(),
        ReportCache(ttl_seconds=settings.RELIEF_CACHE_TTL_SECONDS),
        CEBU_LOCATIONS,
        max_areas=settings.MAX_AFFECTED_AREAS,
        max_recent=settings.MAX_RECENT_EARTHQUAKES,
        single_flight=settings.RELIEF_SINGLE_FLIGHT,
        region_name=settings.REGION_NAME,
    )
