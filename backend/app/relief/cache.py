"""
cache.py — Single-slot, time-boxed cache for the relief report.

States:

    EMPTY   never computed, or cleared by an administrator
    FRESH   populated and younger than the TTL
    STALE   populated but older than the TTL

The slot is always overwritten wholesale and ``get()`` only hands out
fresh payloads. The cache also
owns the lock the report service uses to collapse concurrent recomputes
into one.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportCache:
    """
    Holds the last computed report and when it was computed.

    Usage:
        cache = ReportCache(ttl_seconds=120)
        if (payload := cache.get()) is None:
            cache.set(build_report())
    """

    def __init__(self, ttl_seconds: float = 120, clock: Clock = utc_now):
        if ttl_seconds <= 0:
            raise ValueError(f"Cache TTL must be positive, got {ttl_seconds}")
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._payload: Optional[Dict[str, Any]] = None
        self._computed_at: Optional[datetime] = None
        self._lock: Optional[asyncio.Lock] = None

    # ── State ──

    @property
    def active(self) -> bool:
        return self._payload is not None

    @property
    def computed_at(self) -> Optional[datetime]:
        return self._computed_at

    @property
    def ttl_seconds(self) -> float:
        return self.ttl.total_seconds()

    def now(self) -> datetime:
        return self._clock()

    def age_seconds(self) -> float:
        """Seconds since the payload was computed; 0 when empty."""
        if self._computed_at is None:
            return 0.0
        return max(0.0, (self._clock() - self._computed_at).total_seconds())

    def expires_in_seconds(self) -> float:
        """Seconds left in the freshness window; 0 when empty or stale."""
        if self._computed_at is None:
            return 0.0
        return max(0.0, self.ttl_seconds - self.age_seconds())

    def is_fresh(self) -> bool:
        return self.active and self.age_seconds() < self.ttl_seconds

    # ── Access ──

    def get(self) -> Optional[Dict[str, Any]]:
        """Deep copy of the payload while FRESH, else None."""
        if not self.is_fresh():
            return None
        return copy.deepcopy(self._payload)

    def set(self, payload: Dict[str, Any], computed_at: Optional[datetime] = None) -> None:
        self._payload = copy.deepcopy(payload)
        self._computed_at = computed_at or self._clock()

    def clear(self) -> None:
        self._payload = None
        self._computed_at = None
        logger.info("Relief report cache cleared")

    @property
    def lock(self) -> asyncio.Lock:
        """Recompute lock, created lazily inside the running event loop."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock
