"""Service configuration loaded from environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.cache import DEFAULT_TTL_SECONDS


class Settings(BaseSettings):
    """Settings for the scraper API and CLI (env prefix SCRAPER_)."""

    model_config = SettingsConfigDict(
        env_prefix="SCRAPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="When set, requests must send it in the X-API-Key header",
    )
    cache_ttl_seconds: float = Field(default=DEFAULT_TTL_SECONDS, gt=0)
    default_site: str = "toolstation"
    headless: bool = True
    host: str = "0.0.0.0"
    port: int = 3000
    log_verbose: bool = False
    log_dir: str | None = Field(
        default="logs",
        description="Directory for the daily debug log; empty disables the file sink",
    )
    log_retention_days: int = Field(default=30, gt=0)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
