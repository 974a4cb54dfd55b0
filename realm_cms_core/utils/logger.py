"""
Logging for the realm content core.

This module provides:
1. ContextAwareLogger for console logs (with pipe-delimited extras)
2. AzureQueueHandler for structured queue logs, enabled by feature flag
"""

import logging
import os
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from azure.storage.queue import QueueClient, QueueServiceClient

from ..config import get_config
from ..constants import QueueName
from .json_utils import dumps

_component_logger = None

# Attributes owned by LogRecord; extras with these names would be rejected
_RESERVED_RECORD_KEYS = frozenset(
    [
        "name",
        "msg",
        "message",
        "args",
        "asctime",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    ]
)


class ContextAwareLogger:
    """
    Logger wrapper that formats extra attributes in message while preserving them.

    Extras show up in console output even when a host runtime replaces the
    formatters.
    """

    def __init__(self, logger):
        """Initialize with an existing logger."""
        self.logger = logger

    def _log_with_formatted_extra(self, level, msg, **kwargs):
        extra = kwargs.pop("extra", None) or {}
        exc_info = kwargs.pop("exc_info", None)

        if extra:
            extra_str = " | ".join([f"{k}={v}" for k, v in extra.items()])
            full_msg = f"{msg} | {extra_str}"
        else:
            full_msg = msg

        safe_extra = {
            (f"ctx_{k}" if k in _RESERVED_RECORD_KEYS else k): v for k, v in extra.items()
        }

        log_method = getattr(self.logger, level)
        if exc_info is not None:
            log_method(full_msg, extra=safe_extra, exc_info=exc_info)
        else:
            log_method(full_msg, extra=safe_extra)

    def set_level(self, level):
        """Set the logging level of the underlying logger."""
        self.logger.setLevel(level)

    def info(self, msg, **kwargs):
        self._log_with_formatted_extra("info", msg, **kwargs)

    def error(self, msg, **kwargs):
        self._log_with_formatted_extra("error", msg, **kwargs)

    def warning(self, msg, **kwargs):
        self._log_with_formatted_extra("warning", msg, **kwargs)

    def debug(self, msg, **kwargs):
        self._log_with_formatted_extra("debug", msg, **kwargs)

    def exception(self, msg, **kwargs):
        """Log exception with formatted extra."""
        self._log_with_formatted_extra("exception", msg, **kwargs)


class TenantContextFilter(logging.Filter):
    """Logging filter that stamps the current realm id on every record."""

    def filter(self, record):
        # Lazy import to avoid circular dependency
        from ..context.tenant_context import TenantContext

        realm_id = TenantContext.get_current_tenant_id()
        if realm_id:
            record.realm_id = realm_id

        return True


class AzureQueueHandler(logging.Handler):
    """
    Logging handler that ships log entries to an Azure Storage Queue.

    Records are converted to plain dictionaries, buffered, and sent one
    message per entry once the buffer reaches ``batch_size``.
    """

    def __init__(
        self,
        queue_name: str = QueueName.LOGS.value,
        connection_string: Optional[str] = None,
        batch_size: int = 10,
    ):
        """
        Initialize the Azure Queue handler.

        Args:
            queue_name: Name of the queue to send logs to
            connection_string: Azure Storage connection string
            batch_size: Number of logs to batch before sending
        """
        super().__init__()
        self.queue_name = queue_name
        self.connection_string = connection_string or os.getenv("AzureWebJobsStorage")
        self.batch_size = batch_size
        self.log_buffer: List[Dict[str, Any]] = []

        if not self.connection_string:
            sys.stderr.write("Azure Storage connection string not provided\n")

        try:
            self._ensure_queue_exists()
        except Exception as e:
            sys.stderr.write(f"Failed to ensure queue exists: {str(e)}\n")

    def _ensure_queue_exists(self) -> bool:
        if not self.connection_string:
            return False

        try:
            queue_service = QueueServiceClient.from_connection_string(self.connection_string)

            queues = queue_service.list_queues()
            queue_exists = any(queue.name == self.queue_name for queue in queues)

            if not queue_exists:
                sys.stderr.write(f"Queue '{self.queue_name}' does not exist. Creating...\n")
                queue_service.create_queue(self.queue_name)

            return True

        except Exception as e:
            sys.stderr.write(f"Failed to ensure queue exists: {str(e)}\n")
            return False

    def build_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Convert a log record into the queue message payload."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in ["realm_id", "principal_id", "entity_id"]:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        context = {}
        for key, value in record.__dict__.items():
            if (
                key in _RESERVED_RECORD_KEYS
                or key in ("realm_id", "principal_id", "entity_id")
                or key.startswith("__")
                or callable(value)
            ):
                continue
            context[key] = value

        if context:
            log_entry["context"] = context

        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": [
                    line.rstrip() for line in traceback.format_exception(*record.exc_info)
                ],
            }

        return log_entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.log_buffer.append(self.build_entry(record))

            if len(self.log_buffer) >= self.batch_size:
                self.flush()

        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        """Send any buffered log records to the queue."""
        if not self.log_buffer:
            return

        if not self.connection_string:
            return

        try:
            queue_client = QueueClient.from_connection_string(
                conn_str=self.connection_string, queue_name=self.queue_name
            )

            # One message per entry
            for log_entry in self.log_buffer:
                try:
                    queue_client.send_message(dumps(log_entry))
                except Exception as log_error:
                    sys.stderr.write(f"Error sending individual log entry: {str(log_error)}\n")

            self.log_buffer.clear()

        except Exception as e:
            sys.stderr.write(f"Error sending logs to Azure Queue: {str(e)}\n")

    def close(self) -> None:
        """Flush any remaining logs before closing."""
        self.flush()
        super().close()


def configure_logging(
    component_name: str,
    log_level: Optional[Union[int, str]] = None,
    enable_queue: Optional[bool] = None,
    queue_name: Optional[str] = None,
    queue_batch_size: int = 10,
    connection_string: Optional[str] = None,
) -> "ContextAwareLogger":
    """
    Configure logging with console and optional queue output.

    Args:
        component_name: Name of the hosting component (used as logger suffix)
        log_level: Logging level (default: from config.logging.level)
        enable_queue: Whether to enable Azure Queue logging
            (default: from config.features.enable_logs_queue)
        queue_name: Name of the queue to send logs to (default: "logs-queue")
        queue_batch_size: Number of logs to batch before sending
        connection_string: Azure Storage connection string (default: from config)

    Returns:
        The configured logger wrapped with ContextAwareLogger
    """
    global _component_logger

    app_config = get_config()

    if log_level is None:
        log_level = app_config.logging.level
    if enable_queue is None:
        enable_queue = app_config.features.enable_logs_queue
    if connection_string is None:
        connection_string = app_config.queue.connection_string

    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"realm_cms_core.{component_name}")
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    tenant_filter = TenantContextFilter()
    console_handler.addFilter(tenant_filter)
    logger.addHandler(console_handler)

    if enable_queue:
        queue_name = queue_name or app_config.queue.logs_queue_name
        queue_handler = AzureQueueHandler(
            queue_name=queue_name, connection_string=connection_string, batch_size=queue_batch_size
        )
        queue_handler.setLevel(log_level)
        queue_handler.addFilter(tenant_filter)
        logger.addHandler(queue_handler)

    wrapped_logger = ContextAwareLogger(logger)

    wrapped_logger.info(
        "Component logger configured",
        extra={
            "component_name": component_name,
            "queue_logging": enable_queue,
            "queue_name": queue_name if enable_queue else None,
        },
    )
    _component_logger = wrapped_logger
    return wrapped_logger


def reset_logging() -> None:
    """Forget the configured component logger; get_logger falls back to root."""
    global _component_logger
    _component_logger = None


def get_logger(
    log_level: Optional[Union[int, str]] = None,
) -> "ContextAwareLogger":
    """
    Get the component logger, or a wrapped root logger if none is configured.

    Args:
        log_level: Optional log level to set on the root logger fallback

    Returns:
        Logger instance
    """
    if _component_logger is not None:
        return _component_logger

    logger = logging.getLogger()

    if log_level is None:
        log_level = get_config().logging.level

    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(log_level)

    return ContextAwareLogger(logger)
