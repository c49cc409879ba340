"""Configuration management for AllianceOps."""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="ALLIANCEOPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "AllianceOps"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Admin authentication (optional - disabled by default)
    # Set ALLIANCEOPS_API_KEY to guard the cache admin endpoints
    api_key: str | None = None

    # Response cache
    cache_max_entries: int = Field(500, ge=1)

    # Upstream APIs
    tba_api_key: str | None = None
    tba_base_url: str = "https://www.thebluealliance.com/api/v3"
    statbotics_base_url: str = "https://api.statbotics.io/v3"
    upstream_timeout_seconds: float = 20.0

    # Rate limiting (requests per minute)
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"

    # Client gateway
    client_api_base: str = "http://localhost:8000/api"
    client_max_retries: int = 3
    client_backoff_base_seconds: float = 1.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Install a root handler for server and CLI entry points."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
