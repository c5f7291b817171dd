"""Configuration system for the Cash Flow Foundation session layer.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults.

Usage:
    from cashflow_session.config import CashflowConfig, configure_logging

    # Load from environment variables and .env file
    config = CashflowConfig()
    configure_logging(config)

    # Access persistence settings
    print(config.persistence.save_debounce_seconds)
"""

import logging

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cashflow_core.months import normalize_month
from cashflow_core.exceptions import ValidationError


class PersistenceConfig(BaseSettings):
    """Document store settings.

    Environment Variables:
        CASHFLOW_PERSISTENCE_SAVE_DEBOUNCE_SECONDS: Quiet period before a save
    """

    model_config = SettingsConfigDict(
        env_prefix="CASHFLOW_PERSISTENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    save_debounce_seconds: float = Field(
        default=0.6,
        ge=0.0,
        le=60.0,
        description="Seconds of quiet after the last edit before state is saved",
    )


class CashflowConfig(BaseSettings):
    """Root configuration for the dashboard session layer.

    Environment Variables:
        CASHFLOW_ENV: Environment name (development, staging, production, test)
        CASHFLOW_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        CASHFLOW_DEFAULT_MONTH: Viewed month for a first-time user (YYYY-MM)
        CASHFLOW_MONTH_OPTIONS_YEAR: Year offered in month pickers

    Example:
        config = CashflowConfig(
            persistence=PersistenceConfig(save_debounce_seconds=0.0),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="CASHFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    default_month: str = Field(
        default="2026-01",
        description="Viewed month for a first-time user",
    )
    month_options_year: int = Field(
        default=2026,
        ge=1900,
        le=2100,
        description="Calendar year enumerated by month pickers",
    )

    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)

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

    @field_validator("default_month")
    @classmethod
    def validate_default_month(cls, v: str) -> str:
        """Default month must be a YYYY-MM token."""
        try:
            return normalize_month(v)
        except ValidationError as e:
            raise ValueError(e.message) from e

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"


def configure_logging(config: CashflowConfig) -> None:
    """Configure structlog output at the configured level.

    Production renders JSON lines; other environments use the console renderer.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if config.is_production
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.log_level)
        ),
        cache_logger_on_first_use=False,
    )


__all__ = ["PersistenceConfig", "CashflowConfig", "configure_logging"]
