"""Configuration management for tablewright."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import DEFAULT_MIGRATIONS_TABLE
from .types import Environment


class Settings(BaseModel):
    """Runtime settings."""

    version: str = Field(default="0.1.0", description="Package version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Runtime environment (development/production/testing)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=False, description="Whether to log to a file")

    # Storage
    database_path: str | None = Field(
        default=None,
        description="SQLite database path; derived from the environment when unset",
    )
    migrations_table: str = Field(
        default=DEFAULT_MIGRATIONS_TABLE,
        description="Table holding the applied migration versions",
    )
    sqlite_timeout: float = Field(
        default=60.0, description="Seconds to wait on a locked SQLite database"
    )
    sqlite_foreign_keys: bool = Field(
        default=True, description="Whether SQLite enforces foreign key constraints"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ["true", "1", "yes", "on"]


def load_settings() -> Settings:
    """Load settings from environment variables."""

    load_dotenv()

    return Settings(
        environment=Environment(os.getenv("TABLEWRIGHT_ENV", "development")),
        log_level=os.getenv("TABLEWRIGHT_LOG_LEVEL", "INFO").upper(),
        log_to_file=_env_flag("TABLEWRIGHT_LOG_TO_FILE", "false"),
        database_path=os.getenv("TABLEWRIGHT_DATABASE_PATH"),
        migrations_table=os.getenv(
            "TABLEWRIGHT_MIGRATIONS_TABLE", DEFAULT_MIGRATIONS_TABLE
        ),
        sqlite_timeout=float(os.getenv("TABLEWRIGHT_SQLITE_TIMEOUT", "60.0")),
        sqlite_foreign_keys=_env_flag("TABLEWRIGHT_SQLITE_FOREIGN_KEYS", "true"),
    )


# Global settings instance
settings = load_settings()
