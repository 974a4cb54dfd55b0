"""Utility modules for the realm content core."""

from .json_utils import dumps, loads
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
)
from .sanitization import sanitize_optional_text, sanitize_slug, sanitize_text

__all__ = [
    # Logging utilities
    "AzureQueueHandler",
    "ContextAwareLogger",
    "TenantContextFilter",
    "configure_logging",
    "get_logger",
    # JSON helpers
    "dumps",
    "loads",
    # Sanitization
    "sanitize_text",
    "sanitize_optional_text",
    "sanitize_slug",
]
