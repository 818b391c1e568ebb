"""
Structured logging configuration.

Provides:
    • JSON-formatted logs for production (machine-parseable)
    • Pretty console logs for development (human-readable)
    • Request-scoped context (request_id, client_ip, endpoint)
    • Relief pipeline fields (source, event_count, cache_age_s, ...) lifted
      from ``extra=`` into a nested ``relief`` object / inline tags

Usage:
    from backend.app.core.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Fetched events", extra={"source": "PHIVOLCS", "event_count": 12})
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

from backend.app.core.config import settings

# ── Context variable for request-scoped data ──
_request_context: ContextVar[Dict[str, Any]] = ContextVar(
    "request_context", default={}
)

# Pipeline attributes callers may pass through ``extra=``
RELIEF_FIELDS = ("source", "event_count", "area_count", "cache_age_s", "cached")
# Access-log attributes set by the request middleware
HTTP_FIELDS = ("duration_ms", "status_code", "endpoint")


def set_request_context(**kwargs: Any) -> None:
    """Set request-scoped log context (call from middleware)."""
    _request_context.set(kwargs)


def get_request_context() -> Dict[str, Any]:
    """Get current request context."""
    return _request_context.get()


def _collect(record: logging.LogRecord, names) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in names if hasattr(record, name)}


# ── JSON Formatter (Production) ──

class JSONFormatter(logging.Formatter):
    """One JSON object per line for the log shipper."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "service": settings.APP_NAME,
            "region": settings.REGION_NAME,
        }

        ctx = get_request_context()
        if ctx:
            entry["request"] = ctx

        relief = _collect(record, RELIEF_FIELDS)
        if relief:
            entry["relief"] = relief
        entry.update(_collect(record, HTTP_FIELDS))

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str, ensure_ascii=False)


# ── Pretty Formatter (Development) ──

class PrettyFormatter(logging.Formatter):
    """Coloured console lines; pipeline fields shown as trailing tags."""

    COLORS = {
        "DEBUG": "\033[36m",    # Cyan
        "INFO": "\033[32m",     # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",    # Red
        "CRITICAL": "\033[35m", # Magenta
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        line = f"{color}{self.formatTime(record, '%H:%M:%S')} {record.levelname:8s}{self.RESET}"

        request_id = get_request_context().get("request_id")
        if request_id:
            line += f" [{request_id[:8]}]"

        line += f" {record.name}: {record.getMessage()}"

        tags = " ".join(f"{k}={v}" for k, v in _collect(record, RELIEF_FIELDS).items())
        if tags:
            line += f" {self.DIM}({tags}){self.RESET}"

        if record.exc_info and record.exc_info[1]:
            line += f"\n  {type(record.exc_info[1]).__name__}: {record.exc_info[1]}"

        return line


# ── Setup ──

def setup_logging() -> None:
    """Install one stdout handler on the root logger, JSON in production."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if settings.is_production else PrettyFormatter())
    root.addHandler(handler)

    # Every fetch cycle would otherwise log each upstream request twice
    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    # BeautifulSoup warns about markup resembling URLs/filenames on odd pages
    logging.getLogger("bs4").setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger — call once per module."""
    return logging.getLogger(name)
