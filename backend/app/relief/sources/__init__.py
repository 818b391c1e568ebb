"""
sources — Upstream seismic feeds, in failover order.

    phivolcs  — primary; scraped bulletin table, filtered to the region
    usgs      — secondary; FDSN query API, filtered by the query itself
"""

from backend.app.relief.sources.base import SeismicSource
from backend.app.relief.sources.phivolcs import PhivolcsSource, RegionFilter
from backend.app.relief.sources.usgs import UsgsSource

__all__ = ["SeismicSource", "PhivolcsSource", "RegionFilter", "UsgsSource"]
