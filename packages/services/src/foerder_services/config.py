"""Configuration system for Foerder services.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for the engine and the duplicate
detector, plus the structlog setup shared by both.

Usage:
    from foerder_services.config import FoerderConfig, configure_logging

    # Load from environment variables and .env file
    config = FoerderConfig()
    configure_logging(config)

    # Access detector settings
    print(config.detector.quiet_period_ms)

    # Access engine settings
    if config.engine.strict_amounts:
        print("Malformed amounts are reported")
"""

import logging

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from foerder_core.config import EngineConfig


class DetectorConfig(BaseSettings):
    """Duplicate detector settings.

    Environment Variables:
        FOERDER_DETECTOR_QUIET_PERIOD_MS: Debounce delay before a roster lookup
        FOERDER_DETECTOR_ENABLED: Turn duplicate detection on or off
    """

    model_config = SettingsConfigDict(
        env_prefix="FOERDER_DETECTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    quiet_period_ms: int = Field(
        default=500,
        ge=0,
        le=10000,
        description="Quiet period after the last identity edit, in milliseconds",
    )
    enabled: bool = Field(
        default=True,
        description="Look up edited persons in the known-persons roster",
    )

    @property
    def quiet_period(self) -> float:
        """Quiet period in seconds."""
        return self.quiet_period_ms / 1000


class FoerderConfig(BaseSettings):
    """Root configuration for Foerder.

    Combines the engine and detector sections. It supports loading from
    environment variables and .env files.

    Environment Variables:
        FOERDER_ENV: Environment name (development, staging, production, test)
        FOERDER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        # Load all configuration from environment
        config = FoerderConfig()

        # Override specific settings
        config = FoerderConfig(
            engine=EngineConfig(strict_amounts=True),
            detector=DetectorConfig(quiet_period_ms=250),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="FOERDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment settings
    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested configuration
    engine: EngineConfig = Field(default_factory=EngineConfig)
    detector: DetectorConfig = Field(default_factory=DetectorConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.env == "development"


def configure_logging(config: FoerderConfig) -> None:
    """Set up structlog for the configured level and environment.

    Development gets a readable console renderer, everything else JSON lines.
    """
    renderer = (
        structlog.dev.ConsoleRenderer()
        if config.is_development
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, config.log_level)),
        cache_logger_on_first_use=False,
    )


__all__ = ["DetectorConfig", "FoerderConfig", "configure_logging"]
