"""
Configuration management for DocStore.

This module provides environment-based configuration using Pydantic
BaseSettings, so the same code runs against SQLite during development and
PostgreSQL in production.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docstore.utils.logging import get_logger

logger = get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("DOCSTORE_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE

DEFAULT_DATABASE_URI = "sqlite+aiosqlite:///./docstore.db"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are loaded with the DOCSTORE_ prefix, for example
    DOCSTORE_DATABASE_URI overrides ``database_uri``. LOG_LEVEL is read
    without prefix so it is shared with the logging setup.
    """

    environment: Literal["dev", "staging", "prod"] = Field(
        default="dev", description="Deployment environment"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    database_uri: str = Field(
        default=DEFAULT_DATABASE_URI,
        description="SQLAlchemy database URI; postgres URIs use the psycopg driver",
    )
    database_schema: Optional[str] = Field(
        default=None,
        description="Schema holding collection tables (dialect default when unset)",
    )
    pool_size: int = Field(
        default=5, ge=1, description="Database connection pool size"
    )
    echo_sql: bool = Field(default=False, description="Log every SQL statement")

    indexes_config: Optional[str] = Field(
        default=None,
        description="Path to a YAML file of index definitions registered at startup",
    )

    @field_validator("database_uri")
    @classmethod
    def _strip_uri(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("database_uri must not be empty")
        return value

    def get_database_connection_string(self) -> str:
        """
        Get the async SQLAlchemy connection string.

        ``postgres://`` and ``postgresql://`` are rewritten to the
        ``postgresql+psycopg://`` async driver.
        """
        from docstore.infrastructure.db import normalize_database_uri

        return normalize_database_uri(self.database_uri)

    @model_validator(mode="after")
    def validate_production_database_url(self) -> "Settings":
        """Validate that production environment uses PostgreSQL.

        Raises:
            ValueError: If environment is 'prod' and the URI is not PostgreSQL
        """
        db_url = self.get_database_connection_string()
        if self.environment == "prod" and not db_url.startswith("postgresql"):
            logger.error(
                "configuration.invalid_database",
                environment=self.environment,
                scheme=db_url.split(":", 1)[0],
            )
            raise ValueError(
                "Production environment requires PostgreSQL database. "
                f"Got scheme: {db_url.split(':', 1)[0]}"
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="DOCSTORE_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and reused across the application lifecycle.
    Tests call ``get_settings.cache_clear()`` after changing the environment.
    """
    return Settings()
