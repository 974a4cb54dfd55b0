"""
Consolidated exception system with error codes, context, and correlation support.

This module provides a unified exception hierarchy for the realm content core,
with automatic logging and correlation ID tracking. The boundary-facing error
kinds (authorization denial, validation, uniqueness, referential block and
transaction failure) are subclasses of ``BaseError`` so that every failure
carries the same context and logging behavior internally, and collapses to a
small ``ErrorKind`` when it crosses the façade.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes for boundary responses."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"
    TIMEOUT_ERROR = "1004"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"
    CONSTRAINT_VIOLATION = "2004"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"
    REFERENCED = "3006"

    # Business logic errors (4xxx)
    PERMISSION_DENIED = "4003"
    PRECONDITION_FAILED = "4004"


class ErrorKind(str, Enum):
    """The small set of error kinds that cross the façade boundary."""

    AUTHORIZATION_DENIED = "authorization_denied"
    VALIDATION_FAILED = "validation_failed"
    UNIQUENESS_CONFLICT = "uniqueness_conflict"
    REFERENTIAL_BLOCK = "referential_block"
    TRANSACTION_FAILURE = "transaction_failure"
    NOT_FOUND = "not_found"


class BaseError(Exception):
    """Base exception with context, error codes, logging, and error chaining."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP-style status code used to pick the log level
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        # Imported lazily: the logger module imports config, which imports constants
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if "correlation_id" in self.context:
            log_data["correlation_id"] = self.context["correlation_id"]

        if self.status_code >= 500:
            logger.error(
                f"Error {self.error_code}: {self.message}", extra=log_data, exc_info=self.cause
            )
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code}: {self.message}", extra=log_data)

    @property
    def kind(self) -> ErrorKind:
        """Boundary error kind for this error."""
        return error_kind_for(self)

    @property
    def field(self) -> Optional[str]:
        """Field path the error refers to, if any."""
        return self.context.get("field")

    def to_dict(
        self, include_cause: bool = False, include_traceback: bool = False
    ) -> Dict[str, Any]:
        """
        Convert to dict for serialization.

        Args:
            include_cause: Include cause information (useful for debugging)
            include_traceback: Include full traceback (only in debug mode)

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        result: Dict[str, Any] = {
            "error": {
                "id": self.error_id,
                "code": self.error_code.value,
                "message": self.message,
                "timestamp": self.timestamp,
                "context": {
                    k: v
                    for k, v in self.context.items()
                    if k not in ["cause", "error_id", "correlation_id"]
                },
            }
        }

        if "correlation_id" in self.context:
            result["error"]["correlation_id"] = self.context["correlation_id"]

        if include_cause and "cause" in self.context:
            result["error"]["cause"] = {
                "type": self.context["cause"]["type"],
                "message": self.context["cause"]["message"],
            }
            if include_traceback:
                result["error"]["cause"]["traceback"] = self.context["cause"]["traceback"]

        return result

    def add_context(self, **kwargs: Any) -> "BaseError":
        """
        Add additional context to the error (fluent interface).

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    @property
    def error_chain(self) -> List[Exception]:
        """Get the full chain of errors."""
        chain: List[Exception] = [self]
        current = self.cause
        while current:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


# Layer-specific base exceptions
class RepositoryError(BaseError):
    """Persistence layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context,
    ):
        super().__init__(message, error_code, status_code, cause, **context)


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize service error with operation context."""
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Malformed input: bad color token, empty required field, unknown locale."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize validation error with field context."""
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class AuthorizationDenied(BaseError):
    """Principal lacks the required role in the realm.

    The message is always just "denied" so that nothing about the target
    resource leaks to the caller; the internal context still records who was
    denied what, for the logs.
    """

    def __init__(self, cause: Optional[Exception] = None, **context):
        super().__init__("denied", ErrorCode.PERMISSION_DENIED, 403, cause, **context)


class UniquenessConflict(RepositoryError):
    """A realm-scoped slug or other unique key already exists."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if field:
            context["field"] = field
        super().__init__(message, ErrorCode.DUPLICATE, 409, cause, **context)


class ReferentialBlock(RepositoryError):
    """Delete attempted while dependents still reference the row."""

    def __init__(
        self,
        resource_type: str,
        dependents: int,
        cause: Optional[Exception] = None,
        **context,
    ):
        self.dependents = dependents
        if dependents:
            message = f"cannot delete {resource_type}: referenced by {dependents} dependents"
        else:
            message = f"cannot delete {resource_type}: referenced by dependents"
        super().__init__(
            message,
            ErrorCode.REFERENCED,
            409,
            cause,
            resource_type=resource_type,
            dependents=dependents,
            **context,
        )


class TransactionFailure(RepositoryError):
    """Infrastructure failure inside a transaction; the whole write may be retried."""

    def __init__(self, message: str, cause: Optional[Exception] = None, **context):
        super().__init__(message, ErrorCode.DATABASE_ERROR, 503, cause, **context)


_KIND_BY_CODE = {
    ErrorCode.PERMISSION_DENIED: ErrorKind.AUTHORIZATION_DENIED,
    ErrorCode.VALIDATION_FAILED: ErrorKind.VALIDATION_FAILED,
    ErrorCode.INVALID_FORMAT: ErrorKind.VALIDATION_FAILED,
    ErrorCode.MISSING_REQUIRED: ErrorKind.VALIDATION_FAILED,
    ErrorCode.CONSTRAINT_VIOLATION: ErrorKind.VALIDATION_FAILED,
    ErrorCode.PRECONDITION_FAILED: ErrorKind.VALIDATION_FAILED,
    ErrorCode.DUPLICATE: ErrorKind.UNIQUENESS_CONFLICT,
    ErrorCode.REFERENCED: ErrorKind.REFERENTIAL_BLOCK,
    ErrorCode.NOT_FOUND: ErrorKind.NOT_FOUND,
}


def error_kind_for(error: BaseError) -> ErrorKind:
    """Map an internal error onto the boundary error kind.

    Anything without a specific mapping is an infrastructure failure.
    """
    return _KIND_BY_CODE.get(error.error_code, ErrorKind.TRANSACTION_FAILURE)


# Factory functions for common error patterns
def not_found(
    resource_type: str, cause: Optional[Exception] = None, **identifiers
) -> RepositoryError:
    """
    Factory for not found errors.

    Args:
        resource_type: Type of resource (e.g., 'Realm', 'Language')
        cause: Original exception if any
        **identifiers: Resource identifiers (e.g., entity_id='123')

    Returns:
        Configured RepositoryError instance with 404 status
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"{resource_type} not found"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return RepositoryError(
        message,
        error_code=ErrorCode.NOT_FOUND,
        status_code=404,
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def duplicate(
    resource_type: str, field: Optional[str] = None, cause: Optional[Exception] = None, **identifiers
) -> UniquenessConflict:
    """
    Factory for duplicate resource errors.

    Args:
        resource_type: Type of resource (e.g., 'Language', 'ClassificationType')
        field: Field carrying the conflicting value, usually 'slug'
        cause: Original exception if any
        **identifiers: Resource identifiers

    Returns:
        Configured UniquenessConflict instance
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"{resource_type} already exists"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return UniquenessConflict(
        message, field=field, cause=cause, resource_type=resource_type, **identifiers
    )


def validation_failed(
    field: str, value: Any, reason: str, cause: Optional[Exception] = None
) -> ValidationError:
    """
    Factory for validation errors.

    Args:
        field: Field that failed validation
        value: The invalid value
        reason: Why validation failed
        cause: Original exception if any

    Returns:
        Configured ValidationError instance
    """
    return ValidationError(
        f"Validation failed for {field}: {reason}",
        field=field,
        error_code=ErrorCode.VALIDATION_FAILED,
        cause=cause,
        value=str(value),
        reason=reason,
    )


def permission_denied(
    action: str, resource: str, cause: Optional[Exception] = None, **context
) -> AuthorizationDenied:
    """
    Factory for permission denied errors.

    Args:
        action: Action that was denied (e.g., 'write', 'grant_role')
        resource: Resource being accessed
        cause: Original exception if any
        **context: Additional context

    Returns:
        Configured AuthorizationDenied instance
    """
    return AuthorizationDenied(cause=cause, action=action, resource=resource, **context)


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
