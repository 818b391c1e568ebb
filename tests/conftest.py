"""
Shared fixtures for the relief test-suite.

Nothing here touches the network: HTTP sources are driven through
``httpx.MockTransport`` and the orchestrator through in-memory fakes.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from backend.app.core.errors import SourceUnavailable
from backend.app.relief.models import SeismicEvent, SourceId
from backend.app.relief.sources.base import SeismicSource


T0 = datetime(2025, 9, 30, 14, 0, tzinfo=timezone.utc)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class FakeSource(SeismicSource):
    """Returns canned events, or raises SourceUnavailable when ``fail`` is set."""

    def __init__(
        self,
        source_id: SourceId,
        events: Optional[List[SeismicEvent]] = None,
        fail: Optional[str] = None,
    ):
        super().__init__(f"https://{source_id.value}.invalid/feed", timeout=1.0)
        self.source_id = source_id
        self.events = list(events or [])
        self.fail = fail
        self.calls = 0
        self.closed = False

    async def fetch(self) -> List[SeismicEvent]:
        self.calls += 1
        if self.fail is not None:
            raise SourceUnavailable(self.name, self.fail)
        return list(self.events)

    async def close(self) -> None:
        self.closed = True


def make_event(
    magnitude: float = 6.8,
    latitude: float = 10.3157,
    longitude: float = 123.8854,
    occurred_at: datetime = T0,
    location: str = "010 km N 45° E of Cebu City (Cebu)",
    source_id: SourceId = SourceId.PRIMARY,
    fallback: bool = False,
) -> SeismicEvent:
    return SeismicEvent(
        occurred_at_raw="30 September 2025 - 10:00 PM",
        occurred_at=occurred_at,
        latitude=latitude,
        longitude=longitude,
        depth="10",
        magnitude=magnitude,
        location_label=location,
        source_id=source_id,
        timestamp_is_fallback=fallback,
    )


PHIVOLCS_PAGE = """
<html><body>
<table class="nav"><tr><th>Menu</th></tr><tr><td>Home</td></tr></table>
<table class="MsoNormalTable">
  <tr>
    <th>Date - Time<br>(Philippine Time)</th><th>Latitude<br>(ºN)</th>
    <th>Longitude<br>(ºE)</th><th>Depth<br>(km)</th><th>Magnitude</th>
    <th>Location</th>
  </tr>
  <tr>
    <td><a href="#">30 September 2025 - 09:59 PM</a></td><td>11.08</td>
    <td>124.08</td><td>010</td><td>6.9</td>
    <td>017 km N 51° E of Bogo City   (Cebu)</td>
  </tr>
  <tr>
    <td>30 September 2025 - 10:15 PM</td><td>10.30</td><td>123.60</td>
    <td>005</td><td>3.1</td><td>Offshore, Tañon Strait</td>
  </tr>
  <tr>
    <td>30 September 2025 - 08:00 PM</td><td>14.60</td><td>121.00</td>
    <td>020</td><td>4.4</td><td>003 km S of Quezon City (Metro Manila)</td>
  </tr>
  <tr>
    <td>30 September 2025 - 07:00 PM</td><td>n/a</td><td>124.00</td>
    <td>010</td><td>4.0</td><td>Somewhere (Cebu)</td>
  </tr>
  <tr><td colspan="6">Page 1 of 3</td></tr>
</table>
</body></html>
"""

# Abbreviated header: no "magnitude" text, so the table is not recognised.
ABBREVIATED_HEADER_PAGE = PHIVOLCS_PAGE.replace("<th>Magnitude</th>", "<th>Mag</th>")

PAGE_WITHOUT_TABLE = """
<html><body>
<table><tr><th>Advisory</th><th>Issued</th></tr>
<tr><td>None</td><td>-</td></tr></table>
</body></html>
"""


def usgs_feature(
    mag=5.2,
    place="12 km NE of Bogo, Philippines",
    time_ms=1759240740000,
    coords=(124.05, 11.10, 10.0),
):
    return {
        "type": "Feature",
        "properties": {"mag": mag, "place": place, "time": time_ms},
        "geometry": {"type": "Point", "coordinates": list(coords)},
    }


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()
