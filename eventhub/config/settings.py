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
    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: str | None = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    events_table: str = Field(default="events", alias="EVENTS_TABLE")

    # Serving region (venue defaults)
    region_city: str = Field(default="Sydney", alias="REGION_CITY")
    region_state: str = Field(default="NSW", alias="REGION_STATE")
    region_country: str = Field(default="Australia", alias="REGION_COUNTRY")
    default_currency: str = Field(default="AUD", alias="DEFAULT_CURRENCY")

    # Browser
    browser_headless: bool = Field(default=True, alias="BROWSER_HEADLESS")
    navigation_timeout_ms: int = Field(default=30000, alias="NAVIGATION_TIMEOUT_MS")
    selector_timeout_ms: int = Field(default=5000, alias="SELECTOR_TIMEOUT_MS")

    # Retention: records dated before (run date - retention_days) are deactivated
    retention_days: int = Field(default=1, ge=0, alias="RETENTION_DAYS")

    # Scheduler
    schedule_cron: str = Field(default="0 6 * * *", alias="SCHEDULE_CRON")
    schedule_timezone: str = Field(default="Australia/Sydney", alias="SCHEDULE_TIMEZONE")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(default="console", alias="LOG_FORMAT")
    log_file: str | None = Field(default=None, alias="LOG_FILE")

    # Scraper modes
    dry_run: bool = Field(default=False, alias="DRY_RUN")

    @property
    def has_supabase(self) -> bool:
        """True when Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_service_role_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
