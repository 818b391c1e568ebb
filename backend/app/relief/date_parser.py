"""
date_parser.py — PHIVOLCS timestamp parsing with an explicit fallback.

The PHIVOLCS page prints local Philippine time (UTC+8, no DST) as:

    "<day> <MonthName> <year> - <h>:<mm> <AM|PM>"
    e.g. "30 September 2025 - 09:59 PM"

Parsing is best-effort. A malformed string never aborts a fetch cycle;
instead the parser returns a ``FallbackDate`` whose instant is the current
time and whose ``reason`` says what was wrong. Callers can tell a real
timestamp from a guessed one through ``is_fallback``.

The fallback is lossy: a fallback event sorts as "most recent" in the
report. Whether such events should instead be dropped is an open question
(see DESIGN.md).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from backend.app.core.config import settings
from backend.app.core.errors import MalformedTimestamp

logger = logging.getLogger(__name__)

SOURCE_TZ = timezone(timedelta(hours=settings.SOURCE_UTC_OFFSET_HOURS))

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)
MONTHS = {name.lower(): index for index, name in enumerate(MONTH_NAMES, start=1)}

_PATTERN = re.compile(
    r"^\s*(?P<day>\d{1,2})\s+(?P<month>[A-Za-z]+)\s+(?P<year>\d{4})"
    r"\s*-\s*(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?P<period>AM|PM)\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ParsedDate:
    """A timestamp read from the source text."""
    instant: datetime
    raw: str

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class FallbackDate:
    """A stand-in timestamp (fetch time) used when the text is unreadable."""
    instant: datetime
    raw: str
    reason: str

    @property
    def is_fallback(self) -> bool:
        return True


DateParseResult = Union[ParsedDate, FallbackDate]


def _parse_strict(text: str, tz: timezone) -> datetime:
    """Parse the source layout or raise MalformedTimestamp."""
    if not isinstance(text, str):
        raise MalformedTimestamp(repr(text), "not a string")

    match = _PATTERN.match(text)
    if match is None:
        raise MalformedTimestamp(text, "does not match '<d> <Month> <yyyy> - <h>:<mm> <AM|PM>'")

    month = MONTHS.get(match["month"].lower())
    if month is None:
        raise MalformedTimestamp(text, f"unknown month {match['month']!r}")

    hour = int(match["hour"])
    minute = int(match["minute"])
    period = match["period"].upper()
    # Some bulletins write the hour after midnight as "00:MM AM"
    lowest = 0 if period == "AM" else 1
    if not lowest <= hour <= 12:
        raise MalformedTimestamp(text, f"hour {hour} outside {lowest}-12 for {period}")

    # 12-hour clock: 12 AM is midnight, 12 PM is noon
    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0

    try:
        local = datetime(
            int(match["year"]), month, int(match["day"]),
            hour, minute, tzinfo=tz,
        )
    except ValueError as exc:
        raise MalformedTimestamp(text, str(exc)) from exc

    return local.astimezone(timezone.utc)


def parse_source_date(
    text: str,
    now: Optional[datetime] = None,
    tz: timezone = SOURCE_TZ,
) -> DateParseResult:
    """
    Parse a PHIVOLCS date string into an aware UTC instant.

    Parameters
    ----------
    text : str
        Raw cell text, e.g. "30 September 2025 - 09:59 PM".
    now : datetime | None
        Instant to fall back to; defaults to the current UTC time.
    tz : timezone
        Offset the text is written in (UTC+8).

    Returns
    -------
    ParsedDate | FallbackDate

    Examples
    --------
    >>> parse_source_date("30 September 2025 - 09:59 PM").instant.isoformat()
    '2025-09-30T13:59:00+00:00'
    >>> parse_source_date("yesterday-ish").is_fallback
    True
    """
    try:
        return ParsedDate(instant=_parse_strict(text, tz), raw=text)
    except MalformedTimestamp as exc:
        fallback = now or datetime.now(timezone.utc)
        logger.warning("Using fetch time for unparseable timestamp: %s", exc.message)
        return FallbackDate(instant=fallback, raw=str(text), reason=exc.reason)


def format_source_date(instant: datetime, tz: timezone = SOURCE_TZ) -> str:
    """
    Render an instant in the PHIVOLCS display layout.

    >>> format_source_date(datetime(2025, 9, 30, 13, 59, tzinfo=timezone.utc))
    '30 September 2025 - 09:59 PM'
    """
    local = instant.astimezone(tz)
    month = MONTH_NAMES[local.month - 1]
    hour = local.hour % 12 or 12
    period = "PM" if local.hour >= 12 else "AM"
    return f"{local.day:02d} {month} {local.year} - {hour:02d}:{local.minute:02d} {period}"
