"""
FastAPI relief distribution endpoints.

Endpoints:
    GET  /api/v1/relief/relief-distribution — Ranked affected-area report
    GET  /api/v1/relief/health              — Feed status and cache state
    POST /api/v1/relief/cache/clear         — Force the next report to refetch
    GET  /api/v1/relief/locations           — Monitored location registry
    GET  /api/v1/relief/policy              — Impact classification table
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from backend.app.api.schemas import (
    CacheClearResponse,
    LocationsResponse,
    PolicyResponse,
    ReliefHealthResponse,
)
from backend.app.relief.impact import MINIMAL_IMPACT, describe_policy
from backend.app.relief.locations import total_population
from backend.app.relief.recommendations import ACTIONS_BY_TIER
from backend.app.relief.service import ReliefReportService, get_report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/relief", tags=["relief-distribution"])


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/relief-distribution")
async def relief_distribution(
    service: ReliefReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    """
    Ranked relief deployment report for the monitored region.

    Served from cache while fresh (``cached: true`` with its age);
    otherwise recomputed from PHIVOLCS, or USGS when PHIVOLCS is down.
    Failures return 500 with ``success: false``.
    """
    return await service.get_report()


@router.get("/health", response_model=ReliefHealthResponse)
async def relief_health(
    service: ReliefReportService = Depends(get_report_service),
):
    """Feed status: configured sources, cache age/expiry, coverage."""
    return service.health()


@router.post("/cache/clear", response_model=CacheClearResponse)
async def clear_cache(
    service: ReliefReportService = Depends(get_report_service),
):
    """Invalidate the cached report; the next request refetches."""
    logger.info("Relief cache clear requested")
    return service.clear_cache()


@router.get("/locations", response_model=LocationsResponse)
async def list_locations(
    service: ReliefReportService = Depends(get_report_service),
):
    """Locations every earthquake is evaluated against."""
    return {
        "count": len(service.locations),
        "totalPopulation": total_population(service.locations),
        "locations": [loc.to_dict() for loc in service.locations],
    }


@router.get("/policy", response_model=PolicyResponse)
async def impact_policy():
    """Magnitude × distance → severity rules, first match wins."""
    return {
        "rules": describe_policy(),
        "minimal": MINIMAL_IMPACT.to_dict(),
        "recommendationCounts": {
            tier.name: len(actions) for tier, actions in ACTIONS_BY_TIER.items()
        },
    }
