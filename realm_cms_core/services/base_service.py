"""
Base service with session ownership and shared error translation.

Services either own a session from the global database manager or share
one handed to them by the write coordinator, in which case commit and
rollback are left to the coordinator.
"""

import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..config import get_config
from ..db.db_config import get_db_manager
from ..db.db_realm_models import Realm
from ..exceptions import (
    BaseError,
    ErrorCode,
    ReferentialBlock,
    ServiceError,
    TransactionFailure,
    UniquenessConflict,
    ValidationError,
    not_found,
)
from ..utils.logger import get_logger


def classify_integrity_error(
    exception: IntegrityError,
    resource_type: str = "record",
    operation: Optional[str] = None,
    field: Optional[str] = None,
) -> BaseError:
    """
    Turn a driver integrity error into the matching domain error.

    Covers the SQLite and PostgreSQL message formats. ``field`` names the
    column behind a unique violation when the caller knows it.
    """
    text = str(exception.orig if exception.orig is not None else exception).lower()
    context = {"operation": operation} if operation else {}
    if "unique" in text or "duplicate key" in text:
        return UniquenessConflict(
            f"{resource_type} already exists", field=field, cause=exception, **context
        )
    if "foreign key" in text:
        return ReferentialBlock(resource_type, 0, cause=exception, **context)
    if "check constraint" in text or "not null" in text:
        return ValidationError(
            f"{resource_type} violates a data constraint",
            error_code=ErrorCode.CONSTRAINT_VIOLATION,
            cause=exception,
            **context,
        )
    return TransactionFailure(f"{resource_type} write failed", cause=exception, **context)


def translate_db_error(
    exception: Exception, resource_type: str = "record", operation: Optional[str] = None
) -> BaseError:
    """
    Map any exception raised inside a transaction to a ``BaseError``.

    Only package errors keep their own message. Anything else gets a fixed
    message; the original exception stays on ``cause`` for the logs.
    """
    if isinstance(exception, BaseError):
        return exception
    if isinstance(exception, IntegrityError):
        return classify_integrity_error(exception, resource_type, operation)
    if isinstance(exception, (OperationalError, DBAPIError)):
        return TransactionFailure(
            "database unavailable, the write can be retried",
            cause=exception,
            operation=operation,
        )
    return ServiceError(
        "internal error, nothing was committed",
        error_code=ErrorCode.INTERNAL_ERROR,
        operation=operation,
        cause=exception,
    )


class SessionManagedService:
    """
    Service that owns, or shares, a database session.

    Pass ``session`` to take part in a caller's transaction; otherwise a new
    session is taken from the global database manager and this service
    commits and rolls back itself.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if session is not None:
            self.session = session
            self._owns_session = False
        else:
            self.session = get_db_manager().session_factory()
            self._owns_session = True

        self.logger = logger or get_logger()
        self.config = get_config()

    def _get_realm(self, realm_id: str) -> Realm:
        realm = self.session.get(Realm, realm_id)
        if realm is None:
            raise not_found("Realm", realm_id=realm_id)
        return realm

    @contextmanager
    def transaction(self):
        """
        Context manager for transactional operations.

        Commits on success and rolls back on exception when this service
        owns its session; otherwise the owner decides.
        """
        try:
            yield self.session
            if self._owns_session:
                self.session.commit()
        except Exception:
            if self._owns_session:
                self.session.rollback()
            raise

    def commit(self):
        if self._owns_session:
            self.session.commit()

    def rollback(self):
        if self._owns_session:
            self.session.rollback()

    def close(self):
        """Close the session if we own it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.rollback()
        else:
            self.commit()
        self.close()
