"""
models.py — Shared data structures for the relief analysis pipeline.

Defines:
    • SourceId          — which fetcher produced an event
    • SeverityTier      — ordered impact classification
    • SeismicEvent      — one normalised earthquake reading
    • ImpactAssessment  — classification of one (magnitude, distance) pair
    • AffectedAreaRecord — the retained assessment for one location

Wire format
-----------
Records render to camelCase dicts because the responder dashboard consumes
them verbatim. Internal attributes stay snake_case.

Lifecycle
---------
SeismicEvent and AffectedAreaRecord instances are built fresh for every
report cycle and never persisted; they live on only inside the cached
report payload until the cache window expires.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, List

from backend.app.spatial.radius_utils import format_distance


# ═══════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════

class SourceId(str, Enum):
    """Seismic data sources, in failover order."""
    PRIMARY   = "primary"    # PHIVOLCS latest-earthquake page (scraped)
    SECONDARY = "secondary"  # USGS FDSN event query API

    @property
    def label(self) -> str:
        return _SOURCE_LABELS[self]


_SOURCE_LABELS = {
    SourceId.PRIMARY: "PHIVOLCS",
    SourceId.SECONDARY: "USGS",
}


class SeverityTier(IntEnum):
    """
    Impact severity — integer ordering enables comparison.

    Higher value = more severe. Note the inverse relation to priority rank,
    where 1 is the most urgent.
    """
    MINIMAL  = 0
    LOW      = 1
    MODERATE = 2
    HIGH     = 3
    SEVERE   = 4
    CRITICAL = 5


# ═══════════════════════════════════════════════════════════════════════════
# Seismic Event
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class SeismicEvent:
    """Normalised earthquake reading from either source."""

    occurred_at_raw: str          # source-formatted text, shown to responders
    occurred_at: datetime         # aware UTC instant derived from the raw text
    latitude: float
    longitude: float
    depth: str                    # display text, units vary by source
    magnitude: float
    location_label: str
    source_id: SourceId
    timestamp_is_fallback: bool = False  # occurred_at is fetch time, not real

    @property
    def source_label(self) -> str:
        return self.source_id.label

    def summary(self) -> Dict[str, Any]:
        """
        Reduced fields for the ``recentEarthquakes`` list.

        ``timestampIsFallback`` marks a dateTime that could not be read and
        was replaced by the fetch time.
        """
        return {
            "magnitude": self.magnitude,
            "location": self.location_label,
            "dateTime": self.occurred_at_raw,
            "depth": self.depth,
            "source": self.source_label,
            "timestampIsFallback": self.timestamp_is_fallback,
        }

    def trigger_summary(self) -> Dict[str, Any]:
        """Fields embedded in an affected area as ``causingEarthquake``."""
        return {
            "magnitude": self.magnitude,
            "location": self.location_label,
            "dateTime": self.occurred_at_raw,
            "depth": self.depth,
        }


# ═══════════════════════════════════════════════════════════════════════════
# Impact Assessment
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ImpactAssessment:
    """Classification of one (magnitude, distance) pair."""
    severity_tier: SeverityTier
    priority_rank: int            # 1 = most urgent
    needs_rescue: bool
    needs_relief: bool
    estimated_intensity: str      # qualitative MMI range, e.g. "VI-VII"

    @property
    def is_impactful(self) -> bool:
        return self.severity_tier is not SeverityTier.MINIMAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.severity_tier.name,
            "priority": self.priority_rank,
            "needsRescue": self.needs_rescue,
            "needsRelief": self.needs_relief,
            "estimatedIntensity": self.estimated_intensity,
        }


# ═══════════════════════════════════════════════════════════════════════════
# Affected Area
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class AffectedAreaRecord:
    """Most severe assessment found for one monitored location."""
    name: str
    latitude: float
    longitude: float
    population: int
    distance_km: float            # rounded to one decimal place
    impact: ImpactAssessment
    triggering_event: SeismicEvent
    recommended_actions: List[str] = field(default_factory=list)

    @property
    def priority_rank(self) -> int:
        return self.impact.priority_rank

    @property
    def severity_tier(self) -> SeverityTier:
        return self.impact.severity_tier

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.name,
            "population": self.population,
            "coordinates": {"lat": self.latitude, "lon": self.longitude},
            "distance": format_distance(self.distance_km),
            "impactLevel": self.impact.severity_tier.name,
            "estimatedIntensity": self.impact.estimated_intensity,
            "needsRescue": self.impact.needs_rescue,
            "needsRelief": self.impact.needs_relief,
            "priority": self.impact.priority_rank,
            "recommendations": list(self.recommended_actions),
            "causingEarthquake": self.triggering_event.trigger_summary(),
        }
