"""
Constants for the realm content core.

This module centralizes the magic strings and limits used throughout
the package to ensure consistency and maintainability.
"""

from enum import Enum


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    DEFAULT_LOCALE = "DEFAULT_LOCALE"
    SUPPORTED_LOCALES = "SUPPORTED_LOCALES"


class QueueName(str, Enum):
    """Queue names used by the optional log shipping handler."""

    LOGS = "logs-queue"


# Returned by display-name resolution when nothing can be shown
UNTRANSLATED = "[untranslated]"

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES = ("en", "nl", "fr")

# Role ordinals; comparison is by level, never by name
ROLE_LEVEL = {
    "operator": 1,
    "admin": 2,
    "superuser": 3,
}


class FieldLimit:
    """Validation limits for string and numeric fields."""

    SLUG_MAX_LENGTH = 100
    NAME_MAX_LENGTH = 255
    ENDONYM_MAX_LENGTH = 255
    DESCRIPTION_MAX_LENGTH = 5000
    ICON_REFERENCE_MAX_LENGTH = 50
    LOCALE_CODE_MAX_LENGTH = 5
    ICON_SCALE_MIN = 0.5
    ICON_SCALE_MAX = 3.0
    DEFAULT_COLOR = "#CCCCCC"


SLUG_PATTERN = r"^[a-z0-9-]+$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
ISO_639_3_PATTERN = r"^[a-z]{3}$"
