"""WorkGrid application settings loaded from environment variables."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StatusTransitionMode(StrEnum):
    """How status writes are constrained."""

    STRICT = "strict"
    PERMISSIVE = "permissive"


class Settings(BaseSettings):
    """Application-wide settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Access control ---
    STATUS_TRANSITION_MODE: StatusTransitionMode = Field(
        default=StatusTransitionMode.STRICT,
        description=(
            "strict: only owners, reviewing leaders and workspace admins may move "
            "a row between statuses. permissive: any status write is accepted."
        ),
    )
    ENFORCE_ROW_VISIBILITY_ON_WRITE: bool = Field(
        default=True,
        description="Skip writes to rows the actor is not allowed to see.",
    )

    # --- Spreadsheet import ---
    IMPORT_MAX_ROWS: int = Field(
        default=10_000,
        ge=1,
        description="Largest number of data rows accepted from one workbook.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PROD


def get_settings() -> Settings:
    """Factory for the current settings."""
    return Settings()
