"""
phivolcs.py — Primary source: the PHIVOLCS latest-earthquake web page.

PHIVOLCS publishes its bulletin as an HTML table rather than an API, so
this source scrapes it:

    1. GET the page with a browser User-Agent (bare clients are rejected)
       and relaxed TLS verification (the site's certificate chain is
       incomplete).
    2. Find the table whose header cells mention both "date" and
       "magnitude". Position on the page is not stable, so tables are
       matched by header text only. No such table → ``TableNotFound``.
    3. Read each row with at least six cells as

           date-time | latitude | longitude | depth | magnitude | location

       Rows with unreadable numbers are skipped.
    4. Keep rows in the region of interest: the location text mentions the
       region keyword, or the epicentre lies in the region bounding box.

The page lists the whole archipelago; step 4 is the only spatial filter
applied to this source.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

import httpx
from bs4 import BeautifulSoup
from bs4.element import Tag

from backend.app.core.config import Settings, settings as default_settings
from backend.app.core.errors import TableNotFound
from backend.app.relief.date_parser import parse_source_date
from backend.app.relief.models import SeismicEvent, SourceId
from backend.app.relief.sources.base import SeismicSource
from backend.app.spatial.radius_utils import BoundingBox

logger = logging.getLogger(__name__)

MIN_COLUMNS = 6


class MalformedRow(ValueError):
    """A table row whose cells cannot be read as an earthquake."""


@dataclass(frozen=True)
class RegionFilter:
    """Keyword-or-bounding-box test for the region of interest."""
    keyword: str
    bbox: BoundingBox

    @classmethod
    def from_settings(cls, cfg: Settings) -> "RegionFilter":
        return cls(
            keyword=cfg.REGION_KEYWORD,
            bbox=BoundingBox(
                min_lat=cfg.REGION_MIN_LAT,
                max_lat=cfg.REGION_MAX_LAT,
                min_lon=cfg.REGION_MIN_LON,
                max_lon=cfg.REGION_MAX_LON,
            ),
        )

    def matches(self, location_text: str, latitude: float, longitude: float) -> bool:
        if self.keyword and self.keyword.lower() in location_text.lower():
            return True
        return self.bbox.contains(latitude, longitude)


# ═══════════════════════════════════════════════════════════════════════════
# HTML parsing
# ═══════════════════════════════════════════════════════════════════════════

def _header_texts(table: Tag) -> List[str]:
    return [th.get_text(" ", strip=True).lower() for th in table.find_all("th")]


def find_earthquake_table(tables: Sequence[Tag]) -> Optional[Tag]:
    """First table with both a date and a magnitude header, else None."""
    for table in tables:
        headers = _header_texts(table)
        if any("date" in h for h in headers) and any("magnitude" in h for h in headers):
            return table
    return None


def _number(text: str, column: str) -> float:
    try:
        value = float(text)
    except ValueError as exc:
        raise MalformedRow(f"{column} {text!r} is not a number") from exc
    if not math.isfinite(value):
        raise MalformedRow(f"{column} {text!r} is not finite")
    return value


def parse_row(cells: Sequence[Tag], now: Optional[datetime] = None) -> SeismicEvent:
    """Turn one table row into an event, or raise MalformedRow."""
    texts = [cell.get_text(" ", strip=True) for cell in cells[:MIN_COLUMNS]]
    date_text, lat_text, lon_text, depth_text, mag_text, place_text = texts

    latitude = _number(lat_text, "latitude")
    longitude = _number(lon_text, "longitude")
    magnitude = _number(mag_text, "magnitude")
    if magnitude < 0:
        raise MalformedRow(f"magnitude {mag_text!r} is negative")

    parsed = parse_source_date(date_text, now=now)

    return SeismicEvent(
        occurred_at_raw=date_text,
        occurred_at=parsed.instant,
        latitude=latitude,
        longitude=longitude,
        depth=depth_text,
        magnitude=magnitude,
        location_label=" ".join(place_text.split()),
        source_id=SourceId.PRIMARY,
        timestamp_is_fallback=parsed.is_fallback,
    )


def parse_phivolcs_html(
    html: str,
    region: RegionFilter,
    now: Optional[datetime] = None,
) -> List[SeismicEvent]:
    """
    Extract regional earthquakes from a PHIVOLCS bulletin page.

    Raises
    ------
    TableNotFound
        No table on the page carries date and magnitude headers.
    """
    soup = BeautifulSoup(html, "html.parser")
    tables = soup.find_all("table")
    table = find_earthquake_table(tables)
    if table is None:
        raise TableNotFound(SourceId.PRIMARY.label, tables_seen=len(tables))

    events: List[SeismicEvent] = []
    skipped = 0
    for row in table.find_all("tr"):
        cells = row.find_all("td")
        if len(cells) < MIN_COLUMNS:
            continue
        try:
            event = parse_row(cells, now=now)
        except MalformedRow as exc:
            skipped += 1
            logger.debug("Skipping PHIVOLCS row: %s", exc)
            continue
        if region.matches(event.location_label, event.latitude, event.longitude):
            events.append(event)

    if skipped:
        logger.warning("Skipped %d unreadable PHIVOLCS row(s)", skipped)
    return events


# ═══════════════════════════════════════════════════════════════════════════
# Source
# ═══════════════════════════════════════════════════════════════════════════

class PhivolcsSource(SeismicSource):
    """Scrapes the PHIVOLCS bulletin and keeps events in the region."""

    source_id = SourceId.PRIMARY

    def __init__(
        self,
        url: str,
        *,
        region: RegionFilter,
        timeout: float = 15.0,
        verify: bool = False,
        user_agent: str = "Mozilla/5.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            url,
            timeout=timeout,
            verify=verify,
            headers={"User-Agent": user_agent},
            transport=transport,
        )
        self.region = region

    @classmethod
    def from_settings(
        cls,
        cfg: Settings = default_settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "PhivolcsSource":
        return cls(
            cfg.PHIVOLCS_URL,
            region=RegionFilter.from_settings(cfg),
            timeout=cfg.PHIVOLCS_TIMEOUT,
            verify=cfg.PHIVOLCS_VERIFY_TLS,
            user_agent=cfg.PHIVOLCS_USER_AGENT,
            transport=transport,
        )

    async def fetch(self) -> List[SeismicEvent]:
        response = await self._get()
        events = parse_phivolcs_html(response.text, self.region)
        logger.info(
            "PHIVOLCS returned %d regional event(s)", len(events),
            extra={"source": self.name, "event_count": len(events)},
        )
        return events
