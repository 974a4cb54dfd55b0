"""
Pydantic schemas for classification types, values and assignments.

Boolean flags are strict: "yes" or 1 is a validation failure, not a truthy
value.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from ..constants import COLOR_PATTERN, SLUG_PATTERN, FieldLimit
from ..enums import EntityKind
from .mixins import SlugMixin, TranslationInput


class ClassificationTypeCreate(SlugMixin):
    entity_kind: EntityKind = EntityKind.LANGUAGE
    required: StrictBool = False
    allow_multiple: StrictBool = False
    used_for_filtering: StrictBool = True
    used_for_rendering_style: StrictBool = False
    display_order: int = Field(default=0, ge=0)
    translations: Dict[str, TranslationInput] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class ClassificationTypeUpdate(BaseModel):
    """Partial update. ``translations`` replaces the whole set when supplied."""

    slug: Optional[str] = Field(
        default=None, min_length=1, max_length=FieldLimit.SLUG_MAX_LENGTH, pattern=SLUG_PATTERN
    )
    required: Optional[StrictBool] = None
    allow_multiple: Optional[StrictBool] = None
    used_for_filtering: Optional[StrictBool] = None
    used_for_rendering_style: Optional[StrictBool] = None
    display_order: Optional[int] = Field(default=None, ge=0)
    translations: Optional[Dict[str, TranslationInput]] = None

    model_config = ConfigDict(extra="forbid")


class ClassificationValueCreate(SlugMixin):
    color: str = Field(default=FieldLimit.DEFAULT_COLOR, pattern=COLOR_PATTERN)
    icon_reference: Optional[str] = Field(
        default=None, max_length=FieldLimit.ICON_REFERENCE_MAX_LENGTH
    )
    icon_scale: float = Field(
        default=1.0, ge=FieldLimit.ICON_SCALE_MIN, le=FieldLimit.ICON_SCALE_MAX
    )
    display_order: int = Field(default=0, ge=0)
    translations: Dict[str, TranslationInput] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class ClassificationValueUpdate(BaseModel):
    slug: Optional[str] = Field(
        default=None, min_length=1, max_length=FieldLimit.SLUG_MAX_LENGTH, pattern=SLUG_PATTERN
    )
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    icon_reference: Optional[str] = Field(
        default=None, max_length=FieldLimit.ICON_REFERENCE_MAX_LENGTH
    )
    icon_scale: Optional[float] = Field(
        default=None, ge=FieldLimit.ICON_SCALE_MIN, le=FieldLimit.ICON_SCALE_MAX
    )
    display_order: Optional[int] = Field(default=None, ge=0)
    translations: Optional[Dict[str, TranslationInput]] = None

    model_config = ConfigDict(extra="forbid")


class AssignmentRequest(BaseModel):
    entity_kind: EntityKind = EntityKind.LANGUAGE
    entity_id: str = Field(..., min_length=1)
    classification_value_id: str = Field(..., min_length=1)


class ClassificationTypeRead(BaseModel):
    id: str
    realm_id: str
    slug: str
    entity_kind: EntityKind
    required: bool
    allow_multiple: bool
    used_for_filtering: bool
    used_for_rendering_style: bool
    display_order: int
    names: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_model(cls, model) -> "ClassificationTypeRead":
        return cls(
            id=model.id,
            realm_id=model.realm_id,
            slug=model.slug,
            entity_kind=model.entity_kind,
            required=model.required,
            allow_multiple=model.allow_multiple,
            used_for_filtering=model.used_for_filtering,
            used_for_rendering_style=model.used_for_rendering_style,
            display_order=model.display_order,
            names={t.locale_code: t.name for t in model.translations},
        )


class ClassificationValueRead(BaseModel):
    id: str
    classification_type_id: str
    slug: str
    color: str
    icon_reference: Optional[str] = None
    icon_scale: float
    display_order: int
    names: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_model(cls, model) -> "ClassificationValueRead":
        return cls(
            id=model.id,
            classification_type_id=model.classification_type_id,
            slug=model.slug,
            color=model.color,
            icon_reference=model.icon_reference,
            icon_scale=model.icon_scale,
            display_order=model.display_order,
            names={t.locale_code: t.name for t in model.translations},
        )


class AssignmentRead(BaseModel):
    id: str
    realm_id: str
    entity_kind: EntityKind
    entity_id: str
    classification_value_id: str
    classification_type_id: str

    @classmethod
    def from_model(cls, model) -> "AssignmentRead":
        return cls(
            id=model.id,
            realm_id=model.realm_id,
            entity_kind=model.entity_kind,
            entity_id=model.entity_id,
            classification_value_id=model.classification_value_id,
            classification_type_id=model.classification_value.classification_type_id,
        )


class CompletenessReport(BaseModel):
    entity_id: str
    missing_type_ids: List[str] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing_type_ids
