"""
Application Configuration

Load settings from environment variables with validation.
"""

from functools import lru_cache
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Environment
    environment: str = "development"
    debug: bool = True

    # Firebase (authentication only)
    firebase_credentials_path: str = "./service-account.json"

    # Supabase (PostgREST)
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_timeout_seconds: float = 10.0
    supabase_page_size: int = 1000   # must not exceed the project's max-rows
    supabase_in_chunk_size: int = 200

    # Redis
    redis_url: str = "redis://localhost:6379"
    genre_cache_ttl_seconds: int = 3600

    # TMDB catalog
    tmdb_api_key: Optional[str] = None
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_language: str = "en-US"
    tmdb_max_pages: int = 500        # TMDB rejects page > 500
    tmdb_page_delay_seconds: float = 0.25
    tmdb_timeout_seconds: float = 10.0
    discover_start_date: str = "2000-01-01"

    # Ranking
    daily_top_k: int = 3
    default_result_limit: int = 20

    # Rate Limiting
    rate_limit_per_minute: int = 60

    # Scheduler (nightly catalog refresh, 00:30 UTC)
    ingestion_cron_hour: int = 0
    ingestion_cron_minute: int = 30
    disable_scheduler: bool = False

    # Admin access for manual triggers (empty disables API key access)
    admin_api_key: str = ""

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
