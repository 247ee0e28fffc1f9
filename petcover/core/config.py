"""
Adjudication Engine Configuration
Pydantic Settings for environment-based configuration
Source: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
Verified: 2026-10-19
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from petcover.core.enums import Currency, Environment


class EngineSettings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Every variable is prefixed with PETCOVER_ (e.g. PETCOVER_DATABASE_URL).
    The default percentages are consumed only by the coverage authoring
    path; evaluation never reads them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="PETCOVER_",
    )

    # ============================================================================
    # Application Settings
    # ============================================================================
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Environment: development, staging, production, testing",
    )
    DEBUG: bool = Field(default=False, description="Debug mode (echo SQL)")

    # ============================================================================
    # Logging
    # ============================================================================
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=False, description="Emit JSON log lines")
    LOG_FILE: str | None = Field(default=None, description="Optional log file path")

    # ============================================================================
    # Database Configuration
    # ============================================================================
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./petcover.db",
        description="SQLAlchemy async database URL",
    )
    DB_POOL_SIZE: int = Field(default=10, ge=1, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=5, ge=0, description="Max overflow connections")
    DB_POOL_TIMEOUT: int = Field(default=30, ge=1, description="Connection timeout (seconds)")

    # ============================================================================
    # Coverage Authoring Defaults
    # ============================================================================
    DEFAULT_PAY_VALUE_PERCENTAGE: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        le=100,
        description="Percentage of gross price remitted to the unit for new rules",
    )
    DEFAULT_COPARTICIPATION_PERCENTAGE: Decimal = Field(
        default=Decimal("10.00"),
        ge=0,
        le=100,
        description="Percentage of gross price charged to the client for new rules",
    )
    CURRENCY: Currency = Field(default=Currency.BRL, description="Display currency")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and check the log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    # ============================================================================
    # Helper Properties
    # ============================================================================
    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.ENVIRONMENT == Environment.TESTING

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.ENVIRONMENT == Environment.PRODUCTION

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite"""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> EngineSettings:
    """
    Get cached settings instance.

    Call ``get_settings.cache_clear()`` after changing the environment.
    """
    return EngineSettings()
