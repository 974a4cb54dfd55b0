"""
Pydantic schemas for realms, principals and role grants.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..constants import SLUG_PATTERN, FieldLimit
from ..enums import RealmRole, RealmStatus
from ..utils.sanitization import sanitize_slug, sanitize_text


class RealmCreate(BaseModel):
    """
    Schema for creating a new realm.

    When ``slug`` is omitted it is derived from ``name``.
    """

    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(
        default=None, max_length=FieldLimit.SLUG_MAX_LENGTH, pattern=SLUG_PATTERN
    )
    status: RealmStatus = RealmStatus.DRAFT
    default_locale: Optional[str] = Field(default=None, max_length=FieldLimit.LOCALE_CODE_MAX_LENGTH)
    map_settings: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def derive_slug(self) -> "RealmCreate":
        self.name = sanitize_text(self.name, 200)
        if not self.name:
            raise ValueError("name must not be empty")
        if not self.slug:
            self.slug = sanitize_slug(self.name)
            if not self.slug:
                raise ValueError("a slug could not be derived from name")
        return self


class RealmRead(BaseModel):
    id: str
    slug: str
    name: str
    status: RealmStatus
    default_locale: Optional[str] = None
    map_settings: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleGrantCreate(BaseModel):
    principal_id: str = Field(..., min_length=1)
    role: RealmRole

    model_config = ConfigDict(extra="forbid")


class RoleGrantRead(BaseModel):
    realm_id: str
    principal_id: str
    role: RealmRole
    granted_by: Optional[str] = None
    granted_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RealmLocalesUpdate(BaseModel):
    """The complete set of locales a realm's content may be written in."""

    locale_codes: List[str] = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")
