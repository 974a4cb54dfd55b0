"""
Centralized configuration management for the realm content core.

This module provides a unified configuration system with support for:
- Environment variables
- Feature flags
- Locale fallback settings
- Validation using Pydantic
"""

import os
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    UNTRANSLATED,
    EnvironmentVariable,
    LogLevel,
)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, "sqlite:///./realm_cms.db"
        ),
        description="Database connection string",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")


class QueueConfig(BaseModel):
    """Queue configuration for shipping logs to Azure Storage Queues."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default="logs-queue", description="Log queue name")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


def _supported_locales_from_env() -> List[str]:
    raw = os.getenv(EnvironmentVariable.SUPPORTED_LOCALES.value)
    if not raw:
        return list(SUPPORTED_LOCALES)
    return [code.strip() for code in raw.split(",") if code.strip()]


class LocaleConfig(BaseModel):
    """Locale fallback configuration for display-name resolution."""

    default_locale: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DEFAULT_LOCALE.value, DEFAULT_LOCALE),
        description="Locale used when the requested translation is missing",
    )
    supported_locales: List[str] = Field(
        default_factory=_supported_locales_from_env,
        description="Locales seeded when bootstrapping a database",
    )
    untranslated_sentinel: str = Field(
        default=UNTRANSLATED, description="Returned when no name can be resolved"
    )

    @model_validator(mode="after")
    def default_must_be_supported(self) -> "LocaleConfig":
        if self.default_locale not in self.supported_locales:
            raise ValueError(
                f"Default locale {self.default_locale!r} is not in supported locales "
                f"{self.supported_locales}"
            )
        return self


class FeatureFlags(BaseModel):
    """Feature flags for controlling core behavior."""

    enable_logs_queue: bool = Field(default=False, description="Ship logs to an Azure queue")
    enable_operation_context: bool = Field(
        default=True, description="Enable operation context tracking"
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true",
        description="Debug mode",
    )

    # Sub-configurations
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    queue: QueueConfig = Field(default_factory=QueueConfig, description="Queue configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    locales: LocaleConfig = Field(default_factory=LocaleConfig, description="Locale configuration")
    features: FeatureFlags = Field(default_factory=FeatureFlags, description="Feature flags")

    # Custom configuration
    custom: Dict[str, Any] = Field(default_factory=dict, description="Custom configuration values")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()

    def get_custom(self, key: str, default: Any = None) -> Any:
        """Get a custom configuration value."""
        return self.custom.get(key, default)

    def set_custom(self, key: str, value: Any) -> None:
        """Set a custom configuration value."""
        self.custom[key] = value


# Global configuration instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
