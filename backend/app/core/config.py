"""
Environment configuration — single source of truth for all settings.

Uses pydantic-settings for type-safe config with .env file support.
All values have sensible defaults for local development.

Usage:
    from backend.app.core.config import settings
    print(settings.RELIEF_CACHE_TTL_SECONDS)
"""

from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings loaded from environment variables or .env file.

    Precedence: env var > .env file > default value
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ──
    APP_NAME: str = "Relief Distribution Analyzer"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | staging | production
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"  # DEBUG | INFO | WARNING | ERROR | CRITICAL

    # ── Server ──
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ── CORS ──
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    CORS_ALLOW_ALL: bool = True  # False in production

    # ── Report cache ──
    RELIEF_CACHE_TTL_SECONDS: int = 120  # 2-minute freshness window
    RELIEF_SINGLE_FLIGHT: bool = True  # one recompute per stale window
    MAX_AFFECTED_AREAS: int = 30
    MAX_RECENT_EARTHQUAKES: int = 10

    # ── Primary source: PHIVOLCS latest-earthquake page ──
    PHIVOLCS_URL: str = "https://earthquake.phivolcs.dost.gov.ph/"
    PHIVOLCS_TIMEOUT: float = 15.0  # seconds
    PHIVOLCS_VERIFY_TLS: bool = False  # site serves an incomplete chain
    PHIVOLCS_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )

    # ── Region of interest ──
    REGION_NAME: str = "Cebu"
    REGION_KEYWORD: str = "cebu"
    REGION_MIN_LAT: float = 9.4
    REGION_MAX_LAT: float = 11.5
    REGION_MIN_LON: float = 123.0
    REGION_MAX_LON: float = 124.5

    # ── Secondary source: USGS FDSN event query ──
    USGS_QUERY_URL: str = "https://earthquake.usgs.gov/fdsnws/event/1/query"
    USGS_TIMEOUT: float = 10.0  # seconds
    USGS_CENTER_LAT: float = 10.5
    USGS_CENTER_LON: float = 123.9
    USGS_MAX_RADIUS_KM: float = 200.0
    USGS_MIN_MAGNITUDE: float = 3.0
    USGS_LOOKBACK_DAYS: int = 7
    USGS_FALLBACK_PLACE: str = "Near Cebu"

    # ── Source timestamps (Philippine Standard Time, no DST) ──
    SOURCE_UTC_OFFSET_HOURS: int = 8

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
