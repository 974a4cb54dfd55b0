"""
Boundary result types returned by the ``RealmOperations`` façade.

Every entrypoint returns either a value or a ``BoundaryError``; no exception
raised inside the core crosses the façade.
"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from ..enums import WriteState
from ..exceptions import AuthorizationDenied, BaseError, ErrorKind

T = TypeVar("T")


class BoundaryError(BaseModel):
    """Small structured error: kind, human message and optional field path."""

    kind: ErrorKind
    message: str
    field: Optional[str] = None

    @classmethod
    def from_exception(cls, error: BaseError) -> "BoundaryError":
        if isinstance(error, AuthorizationDenied):
            # Nothing beyond "denied" crosses the boundary
            return cls(kind=ErrorKind.AUTHORIZATION_DENIED, message="denied")
        return cls(kind=error.kind, message=error.message, field=error.field)


class WriteResult(BaseModel):
    ok: bool
    id: Optional[str] = None
    error: Optional[BoundaryError] = None
    state: WriteState
    state_history: List[WriteState] = Field(default_factory=list)


class ReadResult(BaseModel, Generic[T]):
    ok: bool
    data: Optional[T] = None
    error: Optional[BoundaryError] = None

    @classmethod
    def success(cls, data: Any) -> "ReadResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: BaseError) -> "ReadResult":
        return cls(ok=False, error=BoundaryError.from_exception(error))
