"""
Operation context for handling cross-cutting concerns.

This module provides context management for operations including logging,
error enrichment and correlation id propagation.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar, Union, cast

from ..config import get_config
from ..exceptions import BaseError, get_correlation_id, set_correlation_id
from ..utils.logger import ContextAwareLogger, get_logger
from .tenant_context import TenantContext


class OperationContext:
    """Context for a specific operation."""

    def __init__(self, operation_name: str, correlation_id: Optional[str] = None, **context):
        self.operation_name = operation_name
        self.operation_id = str(uuid.uuid4())

        # Reuse the caller's correlation id so nested operations share it
        self.correlation_id = correlation_id or get_correlation_id() or str(uuid.uuid4())
        set_correlation_id(self.correlation_id)

        self.context = context
        self.context["operation_id"] = self.operation_id
        self.context["correlation_id"] = self.correlation_id

        self.start_time = time.time()
        self.metrics: Dict[str, Union[int, float]] = {}

    @property
    def duration_ms(self) -> float:
        """Get the operation duration in milliseconds."""
        return (time.time() - self.start_time) * 1000

    def add_context(self, **kwargs) -> None:
        self.context.update(kwargs)

    def add_metric(self, name: str, value: Union[int, float]) -> None:
        """Attach a numeric measurement that is logged on exit."""
        self.metrics[name] = value


class OperationHandler:
    """Handles operation logging and error enrichment."""

    def __init__(self, logger: Optional[Union[logging.Logger, ContextAwareLogger]] = None):
        self.logger = logger if logger is not None else get_logger()

    @contextmanager
    def operation(self, name: str, **context):
        """Context manager for operations."""
        realm_id = TenantContext.get_current_tenant_id()
        if realm_id and "realm_id" not in context:
            context["realm_id"] = realm_id
        principal_id = TenantContext.get_current_principal_id()
        if principal_id and "principal_id" not in context:
            context["principal_id"] = principal_id

        op_ctx = OperationContext(name, **context)
        ids = {"operation_id": op_ctx.operation_id, "correlation_id": op_ctx.correlation_id}

        self.logger.info(f"ENTER: {name}", extra={**context, **ids})

        try:
            yield op_ctx

            self.logger.info(
                f"EXIT: {name}",
                extra={
                    **context,
                    **ids,
                    "duration_ms": op_ctx.duration_ms,
                    "status": "success",
                    **op_ctx.metrics,
                },
            )

        except BaseError as e:
            # BaseError already logged itself; enrich it and log the operation failure
            e.add_context(
                operation_name=name,
                operation_id=op_ctx.operation_id,
                operation_duration_ms=op_ctx.duration_ms,
            )

            self.logger.error(
                f"ERROR: {name} -> {e.error_code}: {e.message}",
                extra={
                    **context,
                    **ids,
                    "duration_ms": op_ctx.duration_ms,
                    "error_id": e.error_id,
                    "error_code": e.error_code.value,
                    "status": "error",
                    **op_ctx.metrics,
                },
            )
            raise

        except Exception as e:
            self.logger.exception(
                f"ERROR: {name} -> {type(e).__name__}: {str(e)}",
                extra={
                    **context,
                    **ids,
                    "duration_ms": op_ctx.duration_ms,
                    "error_type": type(e).__name__,
                    "status": "error",
                    **op_ctx.metrics,
                },
            )
            raise


F = TypeVar("F", bound=Callable[..., Any])


def _sanitize_param(param):
    """Reduce a parameter to something small and safe to log."""
    if param is None:
        return None
    elif isinstance(param, (str, int, float, bool)):
        return param
    elif isinstance(param, dict) and len(param) < 10:
        return {k: _sanitize_param(v) for k, v in param.items()}
    elif isinstance(param, (list, tuple)) and len(param) < 10:
        return [_sanitize_param(x) for x in param]
    else:
        return f"{type(param).__name__}"


def operation(name: Union[Optional[str], Callable] = None):
    """
    Decorator for operations.

    Args:
        name: Optional operation name. If not provided, a name is generated
             from the module, class and function names.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            if not get_config().features.enable_operation_context:
                return func(*args, **kwargs)

            logger = get_logger()
            if name is not None:
                op_name = name
            else:
                op_name = func.__name__
                if args and hasattr(args[0], "__class__"):
                    op_name = f"{args[0].__class__.__name__}.{op_name}"
                op_name = f"{func.__module__.split('.')[-1]}.{op_name}"

            context = {}
            if args and hasattr(args[0], "__class__"):
                context["class"] = args[0].__class__.__name__
            context["source_module"] = func.__module__

            # Skip 'self'
            sanitized_args = [_sanitize_param(arg) for arg in args[1:]]
            sanitized_kwargs = {k: _sanitize_param(v) for k, v in kwargs.items()}
            logger.debug(f"{op_name} args: {sanitized_args}, kwargs: {sanitized_kwargs}")

            handler = OperationHandler(logger)
            with handler.operation(op_name, **context):
                return func(*args, **kwargs)

        return cast(F, wrapper)

    # Usage without parentheses
    if callable(name):
        func, name = name, None
        return decorator(func)

    return decorator
