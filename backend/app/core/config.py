"""
Application configuration using Pydantic Settings.
Loads environment variables from .env file.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_env: str = Field(default="development", alias="APP_ENV")
    app_debug: bool = Field(default=True, alias="APP_DEBUG")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        alias="CORS_ORIGINS",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # -------------------------------------------------------------------------
    # PostgreSQL (member store)
    # -------------------------------------------------------------------------
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")
    postgres_db: str = Field(default="gym_members", alias="POSTGRES_DB")
    postgres_user: str = Field(default="postgres", alias="POSTGRES_USER")
    postgres_password: str = Field(default="postgres", alias="POSTGRES_PASSWORD")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")

    @property
    def async_database_url(self) -> str:
        """Build async database URL for SQLAlchemy."""
        if self.database_url:
            # Ensure we use the async driver
            url = self.database_url
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+psycopg://", 1)
            return url
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")
    database_pool_size: int = Field(default=5, alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=10, alias="DATABASE_MAX_OVERFLOW")

    # -------------------------------------------------------------------------
    # Gym Software Integrations
    # -------------------------------------------------------------------------
    integrations_offline_mode: bool = Field(
        default=True,
        alias="INTEGRATIONS_OFFLINE_MODE",
        description="Serve generated sample data instead of calling the platform APIs",
    )
    sample_data_seed: int | None = Field(
        default=None,
        alias="SAMPLE_DATA_SEED",
        description="Seed for the sample data generators (None = random each start)",
    )
    http_timeout_seconds: float = Field(default=30.0, alias="HTTP_TIMEOUT_SECONDS")

    # Mindbody Public API v6
    mindbody_api_key: str | None = Field(default=None, alias="MINDBODY_API_KEY")
    mindbody_site_id: str | None = Field(default=None, alias="MINDBODY_SITE_ID")
    mindbody_access_token: str | None = Field(default=None, alias="MINDBODY_ACCESS_TOKEN")
    mindbody_api_base_url: str = Field(
        default="https://api.mindbodyonline.com/public/v6",
        alias="MINDBODY_API_BASE_URL",
    )

    # Glofox API
    glofox_access_token: str | None = Field(default=None, alias="GLOFOX_ACCESS_TOKEN")
    glofox_business_id: str | None = Field(default=None, alias="GLOFOX_BUSINESS_ID")
    glofox_api_base_url: str = Field(
        default="https://api.glofox.com/v2",
        alias="GLOFOX_API_BASE_URL",
        description="Glofox API base URL (can be tenant-specific)",
    )

    # -------------------------------------------------------------------------
    # Risk Recompute
    # -------------------------------------------------------------------------
    risk_recent_window_days: int = Field(
        default=30,
        alias="RISK_RECENT_WINDOW_DAYS",
        description="Window used to count recent visits for churn risk",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Note: Settings are cached! If you change .env, restart the server.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Call this if you need to reload settings."""
    get_settings.cache_clear()
