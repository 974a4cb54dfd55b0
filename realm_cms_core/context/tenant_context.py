"""
Realm (tenant) context management.

The current realm and acting principal are kept in thread-local storage for
the duration of a request so that log records and operation contexts can be
stamped with them. Context is informational only: every query still carries
an explicit realm filter.
"""

import threading
from contextlib import contextmanager
from typing import Generator, Optional

from ..exceptions import ErrorCode, ValidationError
from ..utils.logger import get_logger


class TenantContext:
    """Thread-local holder for the current realm id and principal id."""

    _thread_local = threading.local()
    _logger = get_logger()

    @classmethod
    def set_current_tenant(cls, tenant_id: str) -> None:
        """
        Set the current realm id for the execution context.

        Raises:
            ValidationError: If tenant_id is empty or not a string
        """
        if not tenant_id or not isinstance(tenant_id, str) or not tenant_id.strip():
            raise ValidationError(
                "tenant_id must be a non-empty string",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="tenant_id",
                value=tenant_id,
            )

        cls._thread_local.tenant_id = tenant_id.strip()
        cls._logger.debug(f"Current realm set to: {tenant_id}")

    @classmethod
    def get_current_tenant_id(cls) -> Optional[str]:
        return getattr(cls._thread_local, "tenant_id", None)

    @classmethod
    def clear_current_tenant(cls) -> None:
        if hasattr(cls._thread_local, "tenant_id"):
            delattr(cls._thread_local, "tenant_id")
        cls._logger.debug("Current realm cleared")

    @classmethod
    def set_current_principal(cls, principal_id: Optional[str]) -> None:
        """Record the acting principal; None clears it."""
        if principal_id:
            cls._thread_local.principal_id = principal_id
        elif hasattr(cls._thread_local, "principal_id"):
            delattr(cls._thread_local, "principal_id")

    @classmethod
    def get_current_principal_id(cls) -> Optional[str]:
        return getattr(cls._thread_local, "principal_id", None)


@contextmanager
def tenant_context(
    tenant_id: str, principal_id: Optional[str] = None
) -> Generator[None, None, None]:
    """
    Set the current realm (and optionally principal) for the duration of the block.

    The previous values are restored afterward, so contexts nest.
    """
    previous_tenant = TenantContext.get_current_tenant_id()
    previous_principal = TenantContext.get_current_principal_id()
    TenantContext.set_current_tenant(tenant_id)
    if principal_id is not None:
        TenantContext.set_current_principal(principal_id)
    try:
        yield
    finally:
        if previous_tenant:
            TenantContext.set_current_tenant(previous_tenant)
        else:
            TenantContext.clear_current_tenant()
        TenantContext.set_current_principal(previous_principal)
