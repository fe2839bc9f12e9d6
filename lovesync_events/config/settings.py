"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Supabase
    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_service_role_key: str = Field(default="", alias="SUPABASE_SERVICE_ROLE_KEY")

    # Provider API keys (a missing key disables that provider only)
    ticketmaster_api_key: str | None = Field(default=None, alias="TICKETMASTER_API_KEY")
    google_places_api_key: str | None = Field(default=None, alias="GOOGLE_PLACES_API_KEY")

    # LLM (Groq)
    groq_api_key: str | None = Field(default=None, alias="GROQ_API_KEY")
    groq_model: str = Field(default="llama-3.3-70b-versatile", alias="GROQ_MODEL")
    ai_events_per_batch: int = Field(default=15, alias="AI_EVENTS_PER_BATCH")
    ai_cost_per_call: float = Field(default=0.01, alias="AI_COST_PER_CALL")

    # Firecrawl (HTML to markdown rendering)
    firecrawl_url: str = Field(default="https://api.firecrawl.dev", alias="FIRECRAWL_URL")
    firecrawl_api_key: str | None = Field(default=None, alias="FIRECRAWL_API_KEY")

    # HTTP
    scraper_user_agent: str = Field(
        default="LoveSyncEvents/0.1 (+https://lovesync.app)",
        alias="SCRAPER_USER_AGENT",
    )
    scraper_request_timeout: int = Field(default=30, alias="SCRAPER_REQUEST_TIMEOUT")
    scraper_max_retries: int = Field(default=3, alias="SCRAPER_MAX_RETRIES")

    # Region scheduling
    scrape_window_hours: float = Field(default=4.0, alias="SCRAPE_WINDOW_HOURS")
    thin_retry_minutes: float = Field(default=30.0, alias="THIN_RETRY_MINUTES")
    min_events_per_region: int = Field(default=5, alias="MIN_EVENTS_PER_REGION")
    job_lease_seconds: int = Field(default=600, alias="JOB_LEASE_SECONDS")

    # Event lifetimes per source class
    scrape_ttl_hours: float = Field(default=12.0, alias="SCRAPE_TTL_HOURS")
    api_ttl_days: float = Field(default=30.0, alias="API_TTL_DAYS")
    ai_ttl_days: float = Field(default=14.0, alias="AI_TTL_DAYS")

    # Orchestration pacing (seconds)
    adapter_delay_seconds: float = Field(default=2.0, alias="ADAPTER_DELAY_SECONDS")
    places_delay_seconds: float = Field(default=3.0, alias="PLACES_DELAY_SECONDS")
    adapter_timeout_seconds: float = Field(default=60.0, alias="ADAPTER_TIMEOUT_SECONDS")
    region_delay_seconds: float = Field(default=5.0, alias="REGION_DELAY_SECONDS")
    country_delay_seconds: float = Field(default=10.0, alias="COUNTRY_DELAY_SECONDS")
    cities_per_country: int = Field(default=3, alias="CITIES_PER_COUNTRY")

    # Duplicate detection
    dedup_tolerance_deg: float = Field(default=0.01, alias="DEDUP_TOLERANCE_DEG")
    dedup_failure_policy: Literal["insert", "skip"] = Field(
        default="insert", alias="DEDUP_FAILURE_POLICY"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(default="console", alias="LOG_FORMAT")
    log_file: str | None = Field(default=None, alias="LOG_FILE")

    # API
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    scheduler_enabled: bool = Field(default=False, alias="SCHEDULER_ENABLED")
    dry_run: bool = Field(default=False, alias="DRY_RUN")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
