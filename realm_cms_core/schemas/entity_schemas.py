"""
Pydantic schemas for translatable content entities.

Core fields are validated per kind; translations are a mapping from locale
code to ``TranslationInput``.
"""

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import ISO_639_3_PATTERN, SLUG_PATTERN, FieldLimit
from ..enums import EntityKind, PublicationStatus
from ..utils.sanitization import sanitize_optional_text
from .mixins import SlugMixin, TranslationInput, TranslationRead, parse_payload


class LanguageFields(SlugMixin):
    endonym: Optional[str] = Field(default=None, max_length=FieldLimit.ENDONYM_MAX_LENGTH)
    iso_639_3_code: Optional[str] = Field(default=None, pattern=ISO_639_3_PATTERN)
    language_family_id: Optional[str] = None
    speaker_count: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("endonym", mode="before")
    def clean_endonym(cls, v: Any) -> Optional[str]:
        if v is None or not isinstance(v, str):
            return v
        return sanitize_optional_text(v, FieldLimit.ENDONYM_MAX_LENGTH)

    @field_validator("iso_639_3_code", "language_family_id", mode="before")
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LanguageFamilyFields(SlugMixin):
    model_config = ConfigDict(extra="forbid")


class DistrictFields(SlugMixin):
    model_config = ConfigDict(extra="forbid")


class NeighborhoodFields(SlugMixin):
    district_id: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class _UpdateBase(BaseModel):
    slug: Optional[str] = Field(
        default=None, min_length=1, max_length=FieldLimit.SLUG_MAX_LENGTH, pattern=SLUG_PATTERN
    )

    model_config = ConfigDict(extra="forbid")


class LanguageFieldsUpdate(_UpdateBase):
    endonym: Optional[str] = Field(default=None, max_length=FieldLimit.ENDONYM_MAX_LENGTH)
    iso_639_3_code: Optional[str] = Field(default=None, pattern=ISO_639_3_PATTERN)
    language_family_id: Optional[str] = None
    speaker_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("endonym", mode="before")
    def clean_endonym(cls, v: Any) -> Optional[str]:
        if v is None or not isinstance(v, str):
            return v
        return sanitize_optional_text(v, FieldLimit.ENDONYM_MAX_LENGTH)

    @field_validator("iso_639_3_code", "language_family_id", mode="before")
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LanguageFamilyFieldsUpdate(_UpdateBase):
    pass


class DistrictFieldsUpdate(_UpdateBase):
    pass


class NeighborhoodFieldsUpdate(_UpdateBase):
    district_id: Optional[str] = Field(default=None, min_length=1)


CREATE_FIELD_SCHEMAS: Dict[EntityKind, Type[BaseModel]] = {
    EntityKind.LANGUAGE: LanguageFields,
    EntityKind.LANGUAGE_FAMILY: LanguageFamilyFields,
    EntityKind.DISTRICT: DistrictFields,
    EntityKind.NEIGHBORHOOD: NeighborhoodFields,
}

UPDATE_FIELD_SCHEMAS: Dict[EntityKind, Type[BaseModel]] = {
    EntityKind.LANGUAGE: LanguageFieldsUpdate,
    EntityKind.LANGUAGE_FAMILY: LanguageFamilyFieldsUpdate,
    EntityKind.DISTRICT: DistrictFieldsUpdate,
    EntityKind.NEIGHBORHOOD: NeighborhoodFieldsUpdate,
}


def parse_core_fields(kind: EntityKind, data: Any, for_update: bool = False) -> Dict[str, Any]:
    """
    Validate core fields for ``kind`` and return them as a plain dict.

    For updates only the keys the caller supplied are returned, so omitted
    fields keep their stored values.
    """
    schemas = UPDATE_FIELD_SCHEMAS if for_update else CREATE_FIELD_SCHEMAS
    model = parse_payload(schemas[kind], data, prefix="fields")
    return model.model_dump(exclude_unset=for_update)


class EntityCreate(BaseModel):
    """Payload for creating an entity together with its first translations."""

    kind: EntityKind
    fields: Dict[str, Any] = Field(default_factory=dict)
    translations: Dict[str, TranslationInput] = Field(default_factory=dict)


class EntityUpdate(BaseModel):
    """
    Payload for updating core fields.

    A supplied translation set replaces the stored one entirely; leaving
    ``translations`` out keeps the stored set.
    """

    kind: Optional[EntityKind] = None
    fields: Dict[str, Any] = Field(default_factory=dict)
    translations: Optional[Dict[str, TranslationInput]] = None


class EntityFilter(BaseModel):
    """Filters for listing entities of one kind within a realm."""

    kind: EntityKind = EntityKind.LANGUAGE
    slug: Optional[str] = None
    status: Optional[PublicationStatus] = None
    classification_value_id: Optional[str] = None
    name_contains: Optional[str] = Field(default=None, max_length=FieldLimit.NAME_MAX_LENGTH)
    locale: Optional[str] = None
    limit: int = Field(default=100, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class EntityRead(BaseModel):
    id: str
    realm_id: str
    kind: EntityKind
    slug: str
    status: PublicationStatus
    display_name: str
    fields: Dict[str, Any] = Field(default_factory=dict)
    translations: Dict[str, TranslationRead] = Field(default_factory=dict)
    classification_value_ids: List[str] = Field(default_factory=list)
