"""
usgs.py — Secondary source: the USGS FDSN event query API.

Queried only when PHIVOLCS fails. The request itself does all filtering:

    GET https://earthquake.usgs.gov/fdsnws/event/1/query
        ?format=geojson
        &latitude=10.5&longitude=123.9&maxradiuskm=200
        &starttime=<today − 7 days>
        &minmagnitude=3.0

USGS GeoJSON feature:

    {
        "properties": {"mag": 5.2, "place": "...", "time": 1708617600000, ...},
        "geometry": {"coordinates": [lon, lat, depth_km]},
    }

Events are normalised to the PHIVOLCS presentation so the feed looks the
same whichever source served it: depth as "<value> km", date text in the
bulletin layout at UTC+8.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx

from backend.app.core.config import Settings, settings as default_settings
from backend.app.core.errors import SourceUnavailable
from backend.app.relief.date_parser import format_source_date
from backend.app.relief.models import SeismicEvent, SourceId
from backend.app.relief.sources.base import SeismicSource

logger = logging.getLogger(__name__)


def _format_depth(depth_km: Any) -> str:
    return f"{float(depth_km):g} km"


def parse_usgs_feature(
    feature: Dict[str, Any],
    fallback_place: str = "Near Cebu",
) -> Optional[SeismicEvent]:
    """
    Map one GeoJSON feature to a SeismicEvent; None if it cannot be read.

    Missing magnitude becomes 0 and a missing place the regional label.
    """
    try:
        props = feature["properties"]
        coords = feature["geometry"]["coordinates"]  # [lon, lat, depth]

        occurred_at = datetime.fromtimestamp(props["time"] / 1000.0, tz=timezone.utc)
        return SeismicEvent(
            occurred_at_raw=format_source_date(occurred_at),
            occurred_at=occurred_at,
            latitude=float(coords[1]),
            longitude=float(coords[0]),
            depth=_format_depth(coords[2]),
            magnitude=float(props.get("mag") or 0.0),
            location_label=props.get("place") or fallback_place,
            source_id=SourceId.SECONDARY,
        )
    except (KeyError, IndexError, TypeError, ValueError, OverflowError, OSError) as exc:
        logger.warning("Failed to parse USGS feature: %s", exc)
        return None


class UsgsSource(SeismicSource):
    """Radius/magnitude/time-window query against the USGS catalogue."""

    source_id = SourceId.SECONDARY

    def __init__(
        self,
        url: str,
        *,
        latitude: float,
        longitude: float,
        max_radius_km: float = 200.0,
        min_magnitude: float = 3.0,
        lookback_days: int = 7,
        fallback_place: str = "Near Cebu",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        super().__init__(
            url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self.latitude = latitude
        self.longitude = longitude
        self.max_radius_km = max_radius_km
        self.min_magnitude = min_magnitude
        self.lookback_days = lookback_days
        self.fallback_place = fallback_place
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        cfg: Settings = default_settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "UsgsSource":
        return cls(
            cfg.USGS_QUERY_URL,
            latitude=cfg.USGS_CENTER_LAT,
            longitude=cfg.USGS_CENTER_LON,
            max_radius_km=cfg.USGS_MAX_RADIUS_KM,
            min_magnitude=cfg.USGS_MIN_MAGNITUDE,
            lookback_days=cfg.USGS_LOOKBACK_DAYS,
            fallback_place=cfg.USGS_FALLBACK_PLACE,
            timeout=cfg.USGS_TIMEOUT,
            transport=transport,
        )

    def query_params(self) -> Dict[str, Any]:
        start = self._clock() - timedelta(days=self.lookback_days)
        return {
            "format": "geojson",
            "latitude": self.latitude,
            "longitude": self.longitude,
            "maxradiuskm": self.max_radius_km,
            "starttime": start.date().isoformat(),
            "minmagnitude": self.min_magnitude,
        }

    async def fetch(self) -> List[SeismicEvent]:
        response = await self._get(params=self.query_params())

        try:
            data = response.json()
            features = data["features"]
        except (ValueError, KeyError, TypeError) as exc:
            raise SourceUnavailable(self.name, f"unusable response body: {exc}") from exc
        if not isinstance(features, list):
            raise SourceUnavailable(self.name, "'features' is not a list")

        events: List[SeismicEvent] = []
        for feat in features:
            event = parse_usgs_feature(feat, self.fallback_place)
            if event is not None:
                events.append(event)

        logger.info(
            "USGS returned %d event(s)", len(events),
            extra={"source": self.name, "event_count": len(events)},
        )
        return events
