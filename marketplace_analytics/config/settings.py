"""
Marketplace Analytics Configuration

Environment-driven settings, one section per concern. Every value can be
set through an environment variable or the ``.env`` file; the analytics
section holds the report's windows and limits.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("development", "staging", "production", "testing")
LOG_FORMATS = ("json", "text")


class DatabaseSettings(BaseSettings):
    """Record store connection"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_", populate_by_name=True)

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    db: str = Field(default="marketplace", alias="POSTGRES_DB", description="Database name")
    user: str = Field(default="marketplace", description="Database user")
    password: SecretStr = Field(default="marketplace", description="Database password")
    echo: bool = Field(default=False, description="Log every SQL statement")
    url: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full async SQLAlchemy URL, takes precedence over host/port/db",
    )

    @property
    def async_url(self) -> str:
        """``DATABASE_URL`` when set, else an asyncpg URL built from the parts"""
        if self.url:
            return self.url
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.db}"


class AnalyticsSettings(BaseSettings):
    """Report windows and limits"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    trend_window_months: int = Field(default=6, description="Trailing calendar months in the trend series")
    baseline_days: int = Field(default=30, description="Age of the growth baseline snapshot in days")
    top_entities_limit: int = Field(default=10, description="Number of ranked brands")
    activity_slice_size: int = Field(default=5, description="Most recent events read per event kind")
    activity_feed_cap: int = Field(default=8, description="Maximum length of the merged activity feed")
    uncategorized_label: str = Field(default="Uncategorized", description="Label for products without a category")
    read_timeout_seconds: float = Field(default=10.0, description="Deadline for the joint source reads")

    @field_validator("baseline_days", "activity_feed_cap", "activity_slice_size")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Value must be zero or positive")
        return v

    @field_validator("read_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Read timeout must be positive")
        return v


class ServerSettings(BaseSettings):
    """HTTP server"""

    model_config = SettingsConfigDict(env_prefix="API_", populate_by_name=True)

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    workers: int = Field(default=1, description="Uvicorn worker processes")
    proxy_headers: bool = Field(default=True, description="Trust X-Forwarded-* headers")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ORIGINS",
        description="Origins allowed to call the API from a browser",
    )

    @field_validator("workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError("At least one worker is required")
        return v


class LoggingSettings(BaseSettings):
    """structlog output"""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Root log level")
    format: str = Field(default="json", description="json for machines, text for a terminal")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in LOG_FORMATS:
            raise ValueError(f"Log format must be one of: {LOG_FORMATS}")
        return v.lower()


class Settings(BaseSettings):
    """
    Application settings.

    Sections are read independently from the environment, each with its
    own prefix (``POSTGRES_``, ``ANALYTICS_``, ``API_``, ``LOG_``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="marketplace-analytics", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    version: str = Field(default="1.0.0")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        if v.lower() not in ENVIRONMENTS:
            raise ValueError(f"Environment must be one of: {ENVIRONMENTS}")
        return v.lower()

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """Settings loaded once per process."""
    return Settings()
