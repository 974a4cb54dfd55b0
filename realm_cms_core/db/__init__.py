"""
SQLAlchemy models and connection management.

This module provides a common entry point for all models.
"""

from .db_base import JSON, TimestampMixin, TranslationMixin, UUIDMixin, new_id, utc_now
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    close_db,
    get_db_manager,
    import_all_models,
    initialize_db,
    set_db_manager,
)
from .db_classification_models import (
    ClassificationAssignment,
    ClassificationType,
    ClassificationTypeTranslation,
    ClassificationValue,
    ClassificationValueTranslation,
)
from .db_content_models import (
    CONTENT_MODELS,
    DEPENDENT_REFERENCES,
    REALM_REFERENCES,
    TRANSLATION_MODELS,
    District,
    DistrictTranslation,
    Language,
    LanguageFamily,
    LanguageFamilyTranslation,
    LanguagePoint,
    LanguageTranslation,
    Neighborhood,
    NeighborhoodTranslation,
    RealmOwnedMixin,
)
from .db_principal_models import Principal, RoleGrant
from .db_realm_models import Locale, Realm, RealmLocale

__all__ = [
    # Base definitions
    "Base",
    "JSON",
    "TimestampMixin",
    "TranslationMixin",
    "UUIDMixin",
    "new_id",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "close_db",
    "get_db_manager",
    "import_all_models",
    "initialize_db",
    "set_db_manager",
    # Realms and principals
    "Locale",
    "Principal",
    "Realm",
    "RealmLocale",
    "RoleGrant",
    # Content
    "CONTENT_MODELS",
    "DEPENDENT_REFERENCES",
    "REALM_REFERENCES",
    "TRANSLATION_MODELS",
    "District",
    "DistrictTranslation",
    "Language",
    "LanguageFamily",
    "LanguageFamilyTranslation",
    "LanguagePoint",
    "LanguageTranslation",
    "Neighborhood",
    "NeighborhoodTranslation",
    "RealmOwnedMixin",
    # Classification
    "ClassificationAssignment",
    "ClassificationType",
    "ClassificationTypeTranslation",
    "ClassificationValue",
    "ClassificationValueTranslation",
]
