"""
recommendations.py — Field action checklists per severity tier.

Emphasis shifts with severity: rescue first for CRITICAL/SEVERE, relief
distribution for HIGH, monitoring and preparation for MODERATE/LOW.
MINIMAL areas get nothing because the aggregator never surfaces them.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from backend.app.relief.models import SeverityTier


ACTIONS_BY_TIER: Dict[SeverityTier, Tuple[str, ...]] = {
    SeverityTier.CRITICAL: (
        "🚨 IMMEDIATE: Deploy search & rescue teams",
        "🏥 URGENT: Send medical teams and trauma supplies",
        "🏗️ Conduct structural damage assessment",
        "📦 Distribute emergency relief (food, water, shelter)",
        "🏕️ Establish evacuation centers",
    ),
    SeverityTier.SEVERE: (
        "🚨 Deploy search & rescue teams if needed",
        "🏥 Send medical assistance",
        "📦 Distribute relief goods (food, water, medicines)",
        "🏕️ Set up temporary shelters",
        "🔦 Provide emergency supplies",
    ),
    SeverityTier.HIGH: (
        "📦 Distribute relief goods",
        "🏕️ Prepare evacuation centers",
        "👥 Check on vulnerable populations",
        "🔦 Provide flashlights and batteries",
    ),
    SeverityTier.MODERATE: (
        "👥 Monitor and check on residents",
        "📱 Establish communication with local officials",
        "📦 Prepare relief goods for distribution",
    ),
    SeverityTier.LOW: (
        "👥 Monitor situation",
        "📱 Stay in contact with local authorities",
    ),
    SeverityTier.MINIMAL: (),
}


def recommendations_for(tier: SeverityTier) -> List[str]:
    """Return a fresh, ordered copy of the checklist for ``tier``."""
    return list(ACTIONS_BY_TIER.get(tier, ()))
