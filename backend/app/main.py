"""
FastAPI application entry point.

Run with:
    uvicorn backend.app.main:app --reload --port 8000

Or from the project root:
    python -m uvicorn backend.app.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ── Core infrastructure ──
from backend.app.core.config import settings
from backend.app.core.logging_config import setup_logging, get_logger
from backend.app.core.errors import register_error_handlers
from backend.app.core.middleware import RequestLoggingMiddleware
from backend.app.core.health import HealthStatus, run_health_check

# ── Domain ──
from backend.app.relief.service import ReliefReportService, get_report_service

# ── API routers ──
from backend.app.api.v1.relief import router as relief_router

# ── Initialise logging ──
setup_logging()
logger = get_logger(__name__)


# ── Application lifespan (startup / shutdown) ──

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown events."""
    logger.info(
        "Starting %s v%s [%s] monitoring %s",
        settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT,
        settings.REGION_NAME,
    )
    yield
    # Shutdown: release pooled upstream connections
    await get_report_service().close()
    logger.info("Shutting down %s", settings.APP_NAME)


# ── Create application ──

app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Real-time earthquake relief distribution analyzer. "
        "Fetches recent earthquakes from PHIVOLCS (USGS as backup), "
        "estimates impact on monitored population centres by magnitude "
        "and great-circle distance, and ranks affected areas for rescue "
        "and relief deployment."
    ),
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── Middleware stack (order matters — outermost first) ──

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS if not settings.CORS_ALLOW_ALL else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# ── Error handlers ──
register_error_handlers(app)

# ── Register routers ──
app.include_router(relief_router)


# ── Root & health endpoints ──

@app.get("/", tags=["root"])
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "region": settings.REGION_NAME,
        "endpoints": [
            "/api/v1/relief/relief-distribution",
            "/api/v1/relief/health",
            "/api/v1/relief/cache/clear",
            "/api/v1/relief/locations",
            "/api/v1/relief/policy",
        ],
        "docs": "/docs",
    }


@app.get("/health", tags=["health"])
async def health_check(service: ReliefReportService = Depends(get_report_service)):
    """Deep health probe — checks all subsystems."""
    report = await run_health_check(service)
    return report.to_dict()


@app.get("/health/live", tags=["health"])
async def liveness():
    """Kubernetes liveness probe — is the process alive?"""
    return {"status": "alive"}


@app.get("/health/ready", tags=["health"])
async def readiness(service: ReliefReportService = Depends(get_report_service)):
    """Kubernetes readiness probe — can we serve traffic?"""
    report = await run_health_check(service)
    if report.status == HealthStatus.UNHEALTHY:
        return JSONResponse(status_code=503, content=report.to_dict())
    return report.to_dict()
