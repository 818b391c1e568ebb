"""
aggregator.py — Affected-area deduplication and summary statistics.

Every event is evaluated against every monitored location. For each
location only the most severe assessment survives (lowest priority rank);
on equal rank the first one seen is kept, so the result depends on the
order of ``events``. The report service sorts events newest-first (then
strongest-first) before calling in, which makes the most recent quake win
ties.

Complexity is O(events × locations): tens of locations, a handful to a few
dozen events per cycle.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Sequence

from backend.app.relief.impact import classify
from backend.app.relief.locations import CEBU_LOCATIONS, MonitoredLocation
from backend.app.relief.models import AffectedAreaRecord, SeismicEvent, SeverityTier
from backend.app.relief.recommendations import recommendations_for
from backend.app.spatial.radius_utils import haversine_km

logger = logging.getLogger(__name__)


def aggregate(
    events: Iterable[SeismicEvent],
    locations: Sequence[MonitoredLocation] = CEBU_LOCATIONS,
) -> List[AffectedAreaRecord]:
    """
    Keep the most severe impact per location across all events.

    Parameters
    ----------
    events : iterable of SeismicEvent
        Events in tie-break order (earlier wins on equal priority).
    locations : sequence of MonitoredLocation
        Registry to evaluate against.

    Returns
    -------
    list[AffectedAreaRecord]
        At most one record per location name, sorted ascending by priority
        rank (stable, so equal ranks keep first-affected order).
    """
    best: Dict[str, AffectedAreaRecord] = {}

    for event in events:
        for loc in locations:
            distance = haversine_km(
                event.latitude, event.longitude,
                loc.latitude, loc.longitude,
            )
            impact = classify(event.magnitude, distance)
            if not impact.is_impactful:
                continue

            existing = best.get(loc.name)
            if existing is not None and impact.priority_rank >= existing.priority_rank:
                continue

            best[loc.name] = AffectedAreaRecord(
                name=loc.name,
                latitude=loc.latitude,
                longitude=loc.longitude,
                population=loc.population,
                distance_km=round(distance, 1),
                impact=impact,
                triggering_event=event,
                recommended_actions=recommendations_for(impact.severity_tier),
            )

    areas = sorted(best.values(), key=lambda a: a.priority_rank)
    logger.debug("Aggregated %d affected area(s)", len(areas), extra={"area_count": len(areas)})
    return areas


def summarize(
    events: Sequence[SeismicEvent],
    areas: Sequence[AffectedAreaRecord],
) -> Dict[str, Any]:
    """Summary counts for the report envelope."""
    relief_areas = [a for a in areas if a.impact.needs_relief]
    return {
        "totalEarthquakes": len(events),
        "affectedLocations": len(areas),
        "criticalAreas": _count_tier(areas, SeverityTier.CRITICAL),
        "severeAreas": _count_tier(areas, SeverityTier.SEVERE),
        "highPriorityAreas": _count_tier(areas, SeverityTier.HIGH),
        "locationsNeedingRescue": sum(1 for a in areas if a.impact.needs_rescue),
        "locationsNeedingRelief": len(relief_areas),
        "estimatedAffectedPopulation": sum(a.population for a in relief_areas),
    }


def _count_tier(areas: Sequence[AffectedAreaRecord], tier: SeverityTier) -> int:
    return sum(1 for a in areas if a.severity_tier is tier)


def areas_in_tier(
    areas: Sequence[AffectedAreaRecord],
    tier: SeverityTier,
) -> List[AffectedAreaRecord]:
    return [a for a in areas if a.severity_tier is tier]
