"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Database: DATABASE_URL, then POSTGRES_URL, then SQLite at SQLITE_PATH
    DATABASE_URL: Optional[str] = None
    POSTGRES_URL: Optional[str] = None
    SQLITE_PATH: str = "solar_rank_dev.db"
    SQL_DEBUG: bool = False

    # SERP source selection: "1"/"true" switches to the live scraper
    LIVE_SCRAPER_ENABLED: bool = False

    # Polite delays between upstream SERP calls (seconds)
    SERP_REQUEST_DELAY: float = 1.0
    SERP_AREA_DELAY: float = 1.0
    SERP_TIMEOUT: float = 20.0

    # Read windows
    COMPETITOR_CACHE_HOURS: int = 6
    RANKING_WINDOW_DAYS: int = 60

    # Google OAuth (credential store)
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"

    # Application Settings
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
