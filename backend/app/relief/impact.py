"""
impact.py — Severity classification for a (magnitude, distance) pair.

═══════════════════════════════════════════════════════════════════════════
CLASSIFICATION POLICY
═══════════════════════════════════════════════════════════════════════════

Magnitude bands are checked from the strongest down; only the first band
whose floor the magnitude reaches is consulted. Inside that band distance
thresholds are checked nearest first, strict ``<``, first match wins.

    Magnitude ≥   Distance <    Tier        Rescue  Relief  Priority
    ───────────   ──────────    ────────    ──────  ──────  ────────
    6.5           30 km         CRITICAL    yes     yes     1
    6.5           60 km         SEVERE      yes     yes     2
    6.5           100 km        HIGH        no      yes     3
    6.5           150 km        MODERATE    no      yes     4
    5.5           20 km         SEVERE      yes     yes     2
    5.5           50 km         HIGH        no      yes     3
    5.5           100 km        MODERATE    no      yes     4
    4.5           15 km         MODERATE    no      yes     4
    4.5           40 km         LOW         no      no      5
    3.5           10 km         LOW         no      no      5

Anything else is MINIMAL (priority 10, intensity "I-II") and never reaches
the relief feed.

Intensity descriptors are Modified Mercalli ranges. The M6.5+ band carries
the long-form labels responders see on the dashboard legend.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from backend.app.relief.models import ImpactAssessment, SeverityTier


MINIMAL_IMPACT = ImpactAssessment(
    severity_tier=SeverityTier.MINIMAL,
    priority_rank=10,
    needs_rescue=False,
    needs_relief=False,
    estimated_intensity="I-II",
)


def _impact(
    tier: SeverityTier,
    rank: int,
    rescue: bool,
    relief: bool,
    intensity: str,
) -> ImpactAssessment:
    return ImpactAssessment(
        severity_tier=tier,
        priority_rank=rank,
        needs_rescue=rescue,
        needs_relief=relief,
        estimated_intensity=intensity,
    )


@dataclass(frozen=True)
class MagnitudeBand:
    """Distance thresholds that apply from ``min_magnitude`` upward."""
    min_magnitude: float
    thresholds: Tuple[Tuple[float, ImpactAssessment], ...]


# Strongest band first; thresholds nearest first.
IMPACT_POLICY: Tuple[MagnitudeBand, ...] = (
    MagnitudeBand(6.5, (
        (30.0, _impact(SeverityTier.CRITICAL, 1, True, True, "VII-VIII (Destructive to Severe)")),
        (60.0, _impact(SeverityTier.SEVERE, 2, True, True, "VI-VII (Strong to Very Strong)")),
        (100.0, _impact(SeverityTier.HIGH, 3, False, True, "V-VI (Moderate to Strong)")),
        (150.0, _impact(SeverityTier.MODERATE, 4, False, True, "IV-V (Light to Moderate)")),
    )),
    MagnitudeBand(5.5, (
        (20.0, _impact(SeverityTier.SEVERE, 2, True, True, "VI-VII")),
        (50.0, _impact(SeverityTier.HIGH, 3, False, True, "V-VI")),
        (100.0, _impact(SeverityTier.MODERATE, 4, False, True, "IV-V")),
    )),
    MagnitudeBand(4.5, (
        (15.0, _impact(SeverityTier.MODERATE, 4, False, True, "V-VI")),
        (40.0, _impact(SeverityTier.LOW, 5, False, False, "III-IV")),
    )),
    MagnitudeBand(3.5, (
        (10.0, _impact(SeverityTier.LOW, 5, False, False, "III-IV")),
    )),
)


def classify(magnitude: float, distance_km: float) -> ImpactAssessment:
    """
    Classify the impact of an earthquake on a location.

    Parameters
    ----------
    magnitude : float
        Reported magnitude.
    distance_km : float
        Epicentral distance to the location.

    Returns
    -------
    ImpactAssessment
        Deterministic; the returned instances are shared constants.

    Examples
    --------
    >>> classify(7.0, 25.0).severity_tier.name
    'CRITICAL'
    >>> classify(5.0, 80.0).severity_tier.name
    'MINIMAL'
    """
    for band in IMPACT_POLICY:
        if magnitude >= band.min_magnitude:
            for max_distance, impact in band.thresholds:
                if distance_km < max_distance:
                    return impact
            return MINIMAL_IMPACT
    return MINIMAL_IMPACT


def describe_policy() -> List[Dict[str, Any]]:
    """Flatten the policy into rows for the ``/policy`` endpoint."""
    rows: List[Dict[str, Any]] = []
    for band in IMPACT_POLICY:
        for max_distance, impact in band.thresholds:
            rows.append({
                "minMagnitude": band.min_magnitude,
                "maxDistanceKm": max_distance,
                **impact.to_dict(),
            })
    return rows
