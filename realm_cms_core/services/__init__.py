"""Service layer for business logic."""

from .authorization_service import AuthorizationService
from .base_service import SessionManagedService, classify_integrity_error, translate_db_error
from .classification_service import ClassificationService
from .entity_service import TranslatableEntityService
from .language_point_service import LanguagePointService
from .locale_service import LocaleService
from .realm_operations import RealmOperations
from .realm_service import RealmService
from .translation_writer import TranslationWriter
from .write_coordinator import WriteContext, WriteCoordinator

__all__ = [
    "AuthorizationService",
    "ClassificationService",
    "LanguagePointService",
    "LocaleService",
    "RealmOperations",
    "RealmService",
    "SessionManagedService",
    "TranslatableEntityService",
    "TranslationWriter",
    "WriteContext",
    "WriteCoordinator",
    "classify_integrity_error",
    "translate_db_error",
]
