"""
locations.py — Monitored locations for relief prioritisation.

Northern, metro and southern Cebu municipalities with centroid coordinates
and census population. The registry is fixed at import time; every report
cycle evaluates every seismic event against every entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple


@dataclass(frozen=True)
class MonitoredLocation:
    """A populated place that can receive relief."""
    name: str
    latitude: float
    longitude: float
    population: int

    def __post_init__(self) -> None:
        if not isinstance(self.population, int) or self.population <= 0:
            raise ValueError(
                f"Population must be a positive integer, got {self.population!r}"
            )

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "coordinates": {"lat": self.latitude, "lon": self.longitude},
            "population": self.population,
        }


CEBU_LOCATIONS: Tuple[MonitoredLocation, ...] = (
    # ── Northern Cebu ──
    MonitoredLocation("Bogo City", 11.0489, 124.0058, 88867),
    MonitoredLocation("San Remigio", 11.0667, 123.9333, 61907),
    MonitoredLocation("Daanbantayan", 11.25, 124.0097, 90353),
    MonitoredLocation("Medellin", 11.1289, 123.9594, 61610),
    MonitoredLocation("Tabuelan", 10.8333, 123.8667, 29466),
    MonitoredLocation("Tabogon", 10.9333, 124.0333, 36930),
    MonitoredLocation("Sogod", 10.75, 124.0, 34008),
    MonitoredLocation("Borbon", 10.8386, 124.0261, 42153),
    MonitoredLocation("Catmon", 10.7169, 123.9511, 33087),
    MonitoredLocation("Carmen", 10.5892, 124.0308, 57897),
    # ── Bantayan Island ──
    MonitoredLocation("Bantayan", 11.1667, 123.7167, 145436),
    MonitoredLocation("Santa Fe", 11.15, 123.8, 33654),
    MonitoredLocation("Madridejos", 11.2667, 123.7333, 39857),
    # ── Metro Cebu ──
    MonitoredLocation("Cebu City", 10.3157, 123.8854, 964169),
    MonitoredLocation("Mandaue City", 10.3237, 123.9223, 362654),
    MonitoredLocation("Lapu-Lapu City", 10.3103, 123.9494, 497604),
    MonitoredLocation("Danao City", 10.5195, 124.0294, 156321),
    MonitoredLocation("Toledo City", 10.3778, 123.6394, 207314),
    MonitoredLocation("Talisay City", 10.2449, 123.8492, 263048),
    MonitoredLocation("Consolacion", 10.3781, 123.9567, 148012),
    MonitoredLocation("Liloan", 10.3931, 123.9994, 134150),
    MonitoredLocation("Compostela", 10.4522, 124.0172, 58301),
    MonitoredLocation("Minglanilla", 10.2456, 123.7972, 151002),
    MonitoredLocation("Naga City", 10.2086, 123.7586, 133184),
    # ── Southern Cebu ──
    MonitoredLocation("Carcar City", 10.1078, 123.6378, 136453),
    MonitoredLocation("San Fernando", 10.1631, 123.7094, 72224),
    MonitoredLocation("Sibonga", 10.0, 123.5667, 57056),
    MonitoredLocation("Argao", 9.8814, 123.6064, 78187),
    MonitoredLocation("Dalaguete", 9.7617, 123.5353, 72294),
    MonitoredLocation("Alcoy", 9.6833, 123.5, 20316),
)


def total_population(locations: Iterable[MonitoredLocation] = CEBU_LOCATIONS) -> int:
    return sum(loc.population for loc in locations)
