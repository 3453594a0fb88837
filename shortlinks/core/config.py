"""Application configuration module.

This module contains settings for the short links application,
loaded from environment variables with appropriate defaults.
"""

from __future__ import annotations

import logging
import string
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import Field, ValidationInfo, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

DEFAULT_SECRET_KEY = "change_this_to_a_secure_random_string_in_production"


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with defaults.

    Settings are loaded from environment variables, with fallback to
    values in .env file if present, and finally to the default values
    specified here.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment setting
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # App Information
    APP_NAME: str = "Short Links"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Owner-scoped URL shortening service"

    # API Configuration
    BASE_URL: str = "http://localhost:8000"  # Used for building short URLs
    API_PREFIX: str = "/api"
    REDIRECT_PREFIX: str = "/l"
    DEBUG: bool = False

    # CORS settings
    CORS_ORIGINS: Union[List[str], str] = ["*"]

    # Short code configuration
    SHORT_CODE_LENGTH: int = Field(default=8, ge=1)
    SHORT_CODE_ALPHABET: str = string.ascii_letters + string.digits
    SHORT_CODE_MAX_ATTEMPTS: int = Field(default=5, ge=1)  # Insert attempts for generated codes
    CUSTOM_CODE_PATTERN: str = r"^[A-Za-z0-9_-]{3,20}$"
    ALLOWED_URL_SCHEMES: Union[List[str], str] = ["http", "https"]

    # PostgreSQL settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "short_links"

    # Full URL override, e.g. "sqlite+aiosqlite:///./links.db"
    DATABASE_URL: Optional[str] = None

    # PostgreSQL pool settings
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_POOL_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30
    POSTGRES_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False

    # Migrations
    RUN_MIGRATIONS_ON_STARTUP: bool = False

    # Security
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "app.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {message}"
    LOG_JSON: bool = True
    LOG_TO_FILE: bool = True
    REQUEST_LOGGING_ENABLED: bool = True

    # OpenTelemetry configuration
    OTEL_ENABLED: bool = False  # Enable/disable OpenTelemetry instrumentation
    OTEL_SERVICE_NAME: str = "short-links"  # Service name for traces
    OTEL_RESOURCE_ATTRIBUTES: str = ""  # e.g. "service.namespace=links,team=web"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "http://localhost:4317"  # OTLP exporter endpoint for traces
    OTEL_EXPORTER_OTLP_METRICS_ENDPOINT: str = "http://localhost:4317"  # OTLP metrics endpoint
    OTEL_EXPORTER_OTLP_PROTOCOL: str = "grpc"  # grpc or http/protobuf
    OTEL_TRACES_SAMPLER: str = "parentbased_traceidratio"  # Sampling strategy
    OTEL_TRACES_SAMPLER_ARG: float = 1.0  # Sample 100% of traces by default
    OTEL_METRICS_EXPORT_INTERVAL_MILLIS: int = 60000

    # Validators
    @field_validator("SECRET_KEY")
    def validate_secret_key(cls, v: str, info: ValidationInfo) -> str:
        env_value = info.data.get("ENVIRONMENT", EnvironmentType.DEVELOPMENT)
        if v == DEFAULT_SECRET_KEY and env_value == EnvironmentType.PRODUCTION:
            logger.warning("Using default SECRET_KEY in production environment! This is a security risk.")
        return v

    @field_validator("CORS_ORIGINS", "ALLOWED_URL_SCHEMES")
    def validate_list_or_string(cls, v: Union[List[str], str]) -> List[str]:
        """Convert comma-separated string to list if needed."""
        if isinstance(v, str):
            if not v.strip():
                return []
            if v == "*":
                return ["*"]
            return [item.strip() for item in v.split(",")]
        return v

    @field_validator("DATABASE_URL", mode="before")
    def empty_database_url(cls, v: Any) -> Optional[str]:
        """Treat an empty DATABASE_URL as unset."""
        if v == "":
            return None
        return v

    # Computed fields
    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the SQLAlchemy database URI from settings or use override."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @computed_field
    def SHORT_URL_BASE(self) -> str:
        """Prefix that a short code is appended to when building share links."""
        return f"{self.BASE_URL.rstrip('/')}{self.REDIRECT_PREFIX}"


# Create a singleton instance of the settings
settings = Settings()
