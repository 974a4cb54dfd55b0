"""
Common Pydantic schema mixins and payload parsing.

Every boundary payload is parsed through ``parse_payload`` so that pydantic
errors surface as the package's own ``ValidationError`` carrying a field path
the caller can use to redisplay a form.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..constants import SLUG_PATTERN, FieldLimit
from ..exceptions import ErrorCode, ValidationError
from ..utils.sanitization import sanitize_optional_text, sanitize_text

M = TypeVar("M", bound=BaseModel)


class IdMixin(BaseModel):
    """Mixin for schemas that include a unique identifier."""

    id: str = Field(..., description="Unique identifier for the record")


class RealmMixin(BaseModel):
    """Mixin for realm-owned records."""

    realm_id: str = Field(..., description="Owning realm")


class TimestampMixin(BaseModel):
    """Mixin for schemas that include creation and update timestamps."""

    created_at: datetime = Field(..., description="Timestamp when the record was created")
    updated_at: datetime = Field(..., description="Timestamp when the record was last updated")


class SlugMixin(BaseModel):
    """Mixin for payloads carrying a realm-scoped slug."""

    slug: str = Field(
        ...,
        min_length=1,
        max_length=FieldLimit.SLUG_MAX_LENGTH,
        pattern=SLUG_PATTERN,
        description="Lowercase letters, digits and hyphens",
    )


class TranslationInput(BaseModel):
    """One locale's translated fields. An empty name means "skip this locale"."""

    name: str = Field(default="", max_length=FieldLimit.NAME_MAX_LENGTH)
    description: Optional[str] = Field(default=None)

    @field_validator("name", mode="before")
    def clean_name(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("name must be a string")
        return sanitize_text(v, FieldLimit.NAME_MAX_LENGTH)

    @field_validator("description", mode="before")
    def clean_description(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("description must be a string")
        return sanitize_optional_text(v, FieldLimit.DESCRIPTION_MAX_LENGTH)

    @property
    def is_empty(self) -> bool:
        return not self.name.strip()


class TranslationRead(BaseModel):
    locale_code: str
    name: str
    description: Optional[str] = None
    is_ai_translated: bool = False
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


def translations_to_read(rows) -> Dict[str, TranslationRead]:
    """Key a translation collection by locale code."""
    return {row.locale_code: TranslationRead.model_validate(row) for row in rows}


def _field_path(loc) -> str:
    return ".".join(str(part) for part in loc)


def parse_payload(schema: Type[M], data: Any, prefix: Optional[str] = None) -> M:
    """
    Validate ``data`` against ``schema``.

    Args:
        schema: Pydantic model class to validate with
        data: A mapping, or an instance of ``schema`` (returned unchanged)
        prefix: Field path prefix for nested payloads, e.g. "fields"

    Raises:
        ValidationError: With the dotted path of the first offending field
    """
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data if data is not None else {})
    except PydanticValidationError as e:
        first = e.errors()[0]
        path = _field_path(first["loc"])
        if prefix:
            path = f"{prefix}.{path}" if path else prefix
        raise ValidationError(
            f"Invalid {path or schema.__name__}: {first['msg']}",
            field=path or None,
            error_code=ErrorCode.VALIDATION_FAILED,
            errors=[
                {"field": _field_path(err["loc"]), "message": err["msg"]} for err in e.errors()
            ],
        ) from e
