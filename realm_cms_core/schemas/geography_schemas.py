"""
Pydantic schemas for language points: where a language is spoken.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import FieldLimit
from ..utils.sanitization import sanitize_optional_text


class LanguagePointCreate(BaseModel):
    language_id: str = Field(..., min_length=1)
    neighborhood_id: Optional[str] = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    community_name: Optional[str] = Field(default=None, max_length=FieldLimit.NAME_MAX_LENGTH)
    notes: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("postal_code", "community_name", "notes")
    @classmethod
    def clean_text(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_optional_text(value)


class LanguagePointRead(BaseModel):
    id: str
    realm_id: str
    language_id: str
    neighborhood_id: Optional[str] = None
    latitude: float
    longitude: float
    postal_code: Optional[str] = None
    community_name: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
