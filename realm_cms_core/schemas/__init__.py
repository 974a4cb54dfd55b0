"""Pydantic schemas for boundary payloads and read models."""

from .classification_schemas import (
    AssignmentRead,
    AssignmentRequest,
    ClassificationTypeCreate,
    ClassificationTypeRead,
    ClassificationTypeUpdate,
    ClassificationValueCreate,
    ClassificationValueRead,
    ClassificationValueUpdate,
    CompletenessReport,
)
from .entity_schemas import (
    EntityCreate,
    EntityFilter,
    EntityRead,
    EntityUpdate,
    parse_core_fields,
)
from .geography_schemas import LanguagePointCreate, LanguagePointRead
from .mixins import TranslationInput, TranslationRead, parse_payload
from .realm_schemas import (
    RealmCreate,
    RealmLocalesUpdate,
    RealmRead,
    RoleGrantCreate,
    RoleGrantRead,
)
from .result_schemas import BoundaryError, ReadResult, WriteResult

__all__ = [
    "AssignmentRead",
    "AssignmentRequest",
    "BoundaryError",
    "ClassificationTypeCreate",
    "ClassificationTypeRead",
    "ClassificationTypeUpdate",
    "ClassificationValueCreate",
    "ClassificationValueRead",
    "ClassificationValueUpdate",
    "CompletenessReport",
    "EntityCreate",
    "EntityFilter",
    "EntityRead",
    "EntityUpdate",
    "LanguagePointCreate",
    "LanguagePointRead",
    "ReadResult",
    "RealmCreate",
    "RealmLocalesUpdate",
    "RealmRead",
    "RoleGrantCreate",
    "RoleGrantRead",
    "TranslationInput",
    "TranslationRead",
    "WriteResult",
    "parse_core_fields",
    "parse_payload",
]
