"""
Centralized Configuration for the OPC Diary data store.

All environment variables are managed here using Pydantic Settings.
This provides:
- Type validation
- Default values
- Single source of truth

Usage:
    from opc_diary.config import settings

    interval = settings.poll_interval_seconds
    backend = settings.storage_backend
"""

import logging
from typing import Literal
from pydantic import Field, field_validator, ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables are prefixed with OPC_ where applicable.
    See .env.example for all available options.
    """

    # =============================================================================
    # Application Environment
    # =============================================================================

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
        validation_alias="OPC_ENVIRONMENT"
    )

    testing: bool = Field(
        default=False,
        description="Enable testing mode",
        validation_alias="TESTING"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validation_alias="OPC_LOG_LEVEL"
    )

    # =============================================================================
    # Key-Value Storage
    # =============================================================================

    storage_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Key-value store implementation",
        validation_alias="OPC_STORAGE_BACKEND"
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (used when storage_backend=redis)",
        validation_alias="REDIS_URL"
    )

    key_prefix: str = Field(
        default="opc_",
        description="Namespace prepended to every store key",
        validation_alias="OPC_KEY_PREFIX"
    )

    storage_quota_bytes: int = Field(
        default=5 * 1024 * 1024,  # 5MB, the common browser local storage budget
        gt=0,
        description="Maximum bytes the store accepts before raising a quota error",
        validation_alias="OPC_STORAGE_QUOTA_BYTES"
    )

    # =============================================================================
    # Polling & Timing
    # =============================================================================

    poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Interval between notification poll ticks",
        validation_alias="OPC_POLL_INTERVAL_SECONDS"
    )

    publish_delay_seconds: float = Field(
        default=0.8,
        ge=0,
        description="Simulated latency before a diary entry counts as published",
        validation_alias="OPC_PUBLISH_DELAY_SECONDS"
    )

    # =============================================================================
    # Supervisor Access
    # =============================================================================

    supervisor_login: str = Field(
        default="daniel",
        description="Master login name granting the supervisor role",
        validation_alias="OPC_SUPERVISOR_LOGIN"
    )

    supervisor_password: str = Field(
        default="generasia",
        description="Master password granting the supervisor role",
        validation_alias="OPC_SUPERVISOR_PASSWORD"
    )

    # =============================================================================
    # Media
    # =============================================================================

    max_image_bytes: int = Field(
        default=2 * 1024 * 1024,
        gt=0,
        description="Largest raw image accepted for inline encoding",
        validation_alias="OPC_MAX_IMAGE_BYTES"
    )

    # =============================================================================
    # Computed Properties
    # =============================================================================

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.testing

    # =============================================================================
    # Pydantic Model Configuration
    # =============================================================================

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =============================================================================
    # Field Validators
    # =============================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is uppercase and valid."""
        v = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is lowercase."""
        return v.lower()


# =============================================================================
# Global Settings Instance
# =============================================================================

settings = Settings()


def get_settings() -> Settings:
    """Get settings instance (for dependency injection)."""
    return settings


def configure_logging(level: str = None) -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(level=getattr(logging, level or settings.log_level, logging.INFO))


__all__ = ["settings", "get_settings", "configure_logging", "Settings"]
