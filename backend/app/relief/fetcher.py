"""
fetcher.py — Primary/secondary failover for seismic events.

PHIVOLCS is authoritative for the Philippines and is tried first. On any
failure USGS is queried instead: a typed ``SourceUnavailable`` (network,
timeout, HTTP status, missing table) or any unexpected exception raised
while scraping. Results are never merged: a cycle's events come
from exactly one source. When both fail the cycle fails with
``DataSourceExhausted``.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from backend.app.core.errors import DataSourceExhausted, SourceUnavailable
from backend.app.relief.models import SeismicEvent
from backend.app.relief.sources import PhivolcsSource, SeismicSource, UsgsSource

logger = logging.getLogger(__name__)


class FetchOrchestrator:
    """Try ``primary``; fall back to ``secondary``; never both."""

    def __init__(self, primary: SeismicSource, secondary: SeismicSource):
        self.primary = primary
        self.secondary = secondary

    @classmethod
    def from_settings(cls) -> "FetchOrchestrator":
        return cls(PhivolcsSource.from_settings(), UsgsSource.from_settings())

    @property
    def sources(self) -> Tuple[SeismicSource, SeismicSource]:
        return (self.primary, self.secondary)

    async def fetch_events(self) -> List[SeismicEvent]:
        failures: Dict[str, str] = {}

        for source in self.sources:
            try:
                return await source.fetch()
            except Exception as exc:
                if isinstance(exc, SourceUnavailable):
                    reason = exc.reason
                else:
                    reason = f"{type(exc).__name__}: {exc}"
                failures[source.name] = reason
                logger.warning(
                    "%s unavailable (%s)%s",
                    source.name, reason,
                    "" if source is self.secondary else f"; falling back to {self.secondary.name}",
                    extra={"source": source.name},
                    exc_info=not isinstance(exc, SourceUnavailable),
                )

        logger.error("All seismic sources failed: %s", failures)
        raise DataSourceExhausted(failures)

    async def close(self) -> None:
        for source in self.sources:
            await source.close()
