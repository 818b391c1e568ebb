"""
radius_utils.py — Great-circle distance and region tests.

Provides:
    - Haversine distance between two (lat, lon) points
    - Bounding-box membership for the primary source's region filter
    - Display formatting for distances in the relief feed

All distances are in **kilometers**. Coordinates are in **decimal degrees**.

Mathematical Foundation — Haversine Formula
============================================
Given two points P₁(φ₁, λ₁) and P₂(φ₂, λ₂):

    a = sin²(Δφ / 2) + cos(φ₁) · cos(φ₂) · sin²(Δλ / 2)
    c = 2 · atan2(√a, √(1 − a))
    d = R · c

Where:
    φ  = latitude in radians
    λ  = longitude in radians
    R  = Earth's mean radius, 6,371 km

The relief feed feeds these distances straight into the impact thresholds
(30 km, 60 km, ...), so the function is kept total: no range validation and
no rounding. NaN coordinates yield NaN, which fails every ``<`` threshold and
therefore classifies as MINIMAL downstream.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EARTH_RADIUS_KM: float = 6_371.0


# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BoundingBox:
    """Rectangular lat/lon region, edges inclusive."""
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, lat: float, lon: float) -> bool:
        """Quick rectangular check."""
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lon <= lon <= self.max_lon
        )


# ---------------------------------------------------------------------------
# Haversine implementation
# ---------------------------------------------------------------------------

def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Compute the great-circle distance between two points.

    Parameters
    ----------
    lat1, lon1 : float
        First point in decimal degrees.
    lat2, lon2 : float
        Second point in decimal degrees.

    Returns
    -------
    float
        Distance in kilometers (unrounded, ≥ 0 for finite input).

    Examples
    --------
    >>> round(haversine_km(10.3157, 123.8854, 10.3237, 123.9223), 2)
    4.13
    >>> haversine_km(11.0, 124.0, 11.0, 124.0)
    0.0
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2.0) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2.0) ** 2
    )

    # Rounding can push a past 1.0 for near-antipodal points
    if a > 1.0:
        a = 1.0

    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_KM * c


# ---------------------------------------------------------------------------
# Utility: Human-readable distance
# ---------------------------------------------------------------------------

def format_distance(km: float) -> str:
    """
    Format a distance for the relief feed (one decimal place).

    >>> format_distance(25.3456)
    '25.3'
    >>> format_distance(0.04)
    '0.0'
    """
    return f"{km:.1f}"
