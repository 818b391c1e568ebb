"""
Centralised error handling — exception hierarchy + FastAPI handlers.

Provides:
    • Domain-specific exception classes for the relief pipeline
    • One JSON failure envelope for every error response
    • Automatic logging of unhandled errors
    • Request context in error responses (non-production)

Failure taxonomy:

    SourceUnavailable     one seismic source failed; the fetch orchestrator
                          recovers by falling back to the other source
    TableNotFound         primary page served, but no earthquake table in it
    DataSourceExhausted   both sources failed; the report cycle fails
    MalformedTimestamp    source date text unparseable; recovered locally by
                          the date parser, never reaches a client
    ReportGenerationError the report pipeline failed; surfaced as HTTP 500

"No significant activity" is not an error: it is a normal, cached report.

Usage:
    from backend.app.core.errors import (
        ReliefAPIError,
        SourceUnavailable,
        DataSourceExhausted,
        register_error_handlers,
    )

    raise SourceUnavailable("PHIVOLCS", "timed out after 15s")
"""

from __future__ import annotations

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.core.config import settings

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Exception Hierarchy
# ═══════════════════════════════════════════════════════════════════════════

class ReliefAPIError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details


class SourceUnavailable(ReliefAPIError):
    """A single seismic data source could not deliver events (502)."""

    def __init__(self, source: str, message: str = "", **details: Any):
        super().__init__(
            message=f"Source '{source}' unavailable: {message}",
            status_code=502,
            error_code="SOURCE_UNAVAILABLE",
            details={"source": source, **details},
        )
        self.source = source
        self.reason = message


class TableNotFound(SourceUnavailable):
    """The primary page carries no table with date + magnitude headers."""

    def __init__(self, source: str, tables_seen: int = 0):
        super().__init__(
            source,
            "earthquake table not found",
            tables_seen=tables_seen,
        )
        self.error_code = "TABLE_NOT_FOUND"


class DataSourceExhausted(ReliefAPIError):
    """Every configured seismic source failed in this cycle (502)."""

    def __init__(self, failures: Dict[str, str]):
        summary = "; ".join(f"{name}: {reason}" for name, reason in failures.items())
        super().__init__(
            message=f"All seismic data sources failed ({summary})",
            status_code=502,
            error_code="DATA_SOURCE_EXHAUSTED",
            details={"failures": failures},
        )
        self.failures = failures


class MalformedTimestamp(ReliefAPIError, ValueError):
    """Source timestamp text does not match the expected layout."""

    def __init__(self, raw: str, reason: str):
        super().__init__(
            message=f"Malformed source timestamp {raw!r}: {reason}",
            status_code=422,
            error_code="MALFORMED_TIMESTAMP",
            details={"raw": raw, "reason": reason},
        )
        self.raw = raw
        self.reason = reason


class ReportGenerationError(ReliefAPIError):
    """The relief report could not be produced (500)."""

    def __init__(self, cause: BaseException):
        super().__init__(
            message="Failed to fetch real-time earthquake data",
            status_code=500,
            error_code="REPORT_GENERATION_FAILED",
            details=getattr(cause, "message", None) or str(cause),
        )
        self.cause = cause


# ═══════════════════════════════════════════════════════════════════════════
# Error Response Builder
# ═══════════════════════════════════════════════════════════════════════════

def _build_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Any = None,
    request: Optional[Request] = None,
) -> JSONResponse:
    """Build the failure envelope shared by every endpoint."""
    body: Dict[str, Any] = {
        "success": False,
        "error": message,
        "code": error_code,
        "details": details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    # Include request path in non-production
    if request and not settings.is_production:
        body["path"] = str(request.url.path)
        body["method"] = request.method

    return JSONResponse(status_code=status_code, content=body)


# ═══════════════════════════════════════════════════════════════════════════
# FastAPI Exception Handlers
# ═══════════════════════════════════════════════════════════════════════════

def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(ReliefAPIError)
    async def handle_relief_error(request: Request, exc: ReliefAPIError):
        logger.error(
            "API Error [%s]: %s | details=%s",
            exc.error_code, exc.message, exc.details,
        )
        return _build_error_response(
            exc.status_code, exc.error_code, exc.message,
            exc.details, request,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return _build_error_response(
            exc.status_code, "HTTP_ERROR", str(exc.detail), request=request,
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.critical(
            "Unhandled exception: %s\n%s",
            exc, traceback.format_exc(),
        )
        details = str(exc) if settings.DEBUG else None
        return _build_error_response(
            500, "INTERNAL_ERROR", "Internal server error", details, request,
        )
