"""
Pydantic schemas for the relief API.

Separated from the route handlers so they are reusable across the
codebase (tests, health probes). The main report envelope is returned as
a plain dict because its nested area/earthquake records are already
rendered by the domain models.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class DataSources(BaseModel):
    primary: str = Field(..., examples=["PHIVOLCS"])
    backup: str = Field(..., examples=["USGS"])


class CacheStatus(BaseModel):
    active: bool = Field(..., description="A report is held in the cache")
    ageSeconds: int = Field(..., ge=0, description="Seconds since it was computed")
    expiresIn: int = Field(..., ge=0, description="Seconds until it goes stale")


class ReliefHealthResponse(BaseModel):
    status: str = Field(..., examples=["operational"])
    mode: str
    dataSources: DataSources
    cacheStatus: CacheStatus
    coverage: str = Field(..., examples=["30 locations in Cebu"])
    monitoredLocations: int = Field(..., ge=0)
    timestamp: str


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------

class CacheClearResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class LocationOut(BaseModel):
    name: str
    coordinates: Coordinates
    population: int = Field(..., gt=0)


class LocationsResponse(BaseModel):
    count: int
    totalPopulation: int
    locations: List[LocationOut]


class PolicyRow(BaseModel):
    minMagnitude: float
    maxDistanceKm: float
    level: str
    priority: int
    needsRescue: bool
    needsRelief: bool
    estimatedIntensity: str


class PolicyResponse(BaseModel):
    rules: List[PolicyRow]
    minimal: Dict[str, Any] = Field(..., description="Assessment when no rule matches")
    recommendationCounts: Dict[str, int]
