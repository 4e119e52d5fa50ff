"""
Centralized configuration using Pydantic BaseSettings.
Every tunable is read from the environment or a .env file.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "tubefilter"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Catalog service (YouTube Data API v3 shaped)
    CATALOG_API_BASE_URL: str = "https://www.googleapis.com/youtube/v3"
    CATALOG_API_KEY: str = ""
    CATALOG_TIMEOUT_SEC: float = 10.0
    CATALOG_REGION_CODE: str = "US"
    TRENDING_MAX_RESULTS: int = 24
    SEARCH_MAX_RESULTS: int = 24

    # Short-form classification
    SHORT_MAX_DURATION_SEC: int = 60  # Videos at or under this are shorts

    # Recommendations
    RECOMMENDATION_HISTORY_LIMIT: int = 50
    WATCH_WEIGHT: int = 1
    LIKE_WEIGHT: int = 3
    TOP_CHANNELS: int = 3
    CHANNEL_VIDEOS_LIMIT: int = 10
    MIN_RECOMMENDATIONS: int = 20  # Backfill with trending below this
    TARGET_RECOMMENDATIONS: int = 30

    # Related videos
    RELATED_CHANNEL_LIMIT: int = 10
    RELATED_TARGET: int = 15

    # History listing
    DEFAULT_HISTORY_LIMIT: int = 50
    MAX_HISTORY_LIMIT: int = 500

    # Telemetry
    ENABLE_OTEL: bool = False  # Default to False to prevent gRPC errors in dev
    ENABLE_PROMETHEUS: bool = True
    OTLP_ENDPOINT: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
