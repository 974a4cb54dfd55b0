"""
Realm-owned translatable content models.

Each kind has a core table holding the locale-invariant fields and its own
translation table holding one row per locale. Translation rows belong
exclusively to their parent and are deleted with it; every other foreign key
into a content row is RESTRICT.
"""

from typing import Any, Dict, List, Tuple, Type

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declared_attr, relationship

from ..enums import EntityKind, PublicationStatus
from .db_base import TimestampMixin, TranslationMixin, UUIDMixin
from .db_config import Base

class RealmOwnedMixin(UUIDMixin, TimestampMixin):
    """Columns shared by every content kind: realm, slug and publication status."""

    @declared_attr
    def realm_id(cls):
        return Column(String(36), ForeignKey("realm.id"), nullable=False, index=True)

    slug = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default=PublicationStatus.DRAFT.value)

    # Overridden by kinds that carry a locale-invariant name
    invariant_name_field = None

    def invariant_name(self):
        if self.invariant_name_field is None:
            return None
        return getattr(self, self.invariant_name_field)

def _translations(model_name: str):
    return relationship(
        model_name,
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=f"{model_name}.locale_code",
    )

# ---------------------------------------------------------------- language family

class LanguageFamily(Base, RealmOwnedMixin):
    __tablename__ = "language_family"

    translations = _translations("LanguageFamilyTranslation")

    __table_args__ = (UniqueConstraint("realm_id", "slug", name="uq_language_family_realm_slug"),)

class LanguageFamilyTranslation(Base, TranslationMixin):
    __tablename__ = "language_family_translation"

    entity_id = Column(
        String(36), ForeignKey("language_family.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("entity_id", "locale_code", name="uq_language_family_translation_locale"),
    )

# ---------------------------------------------------------------- language

class Language(Base, RealmOwnedMixin):
    """A language spoken in the realm. ``endonym`` is its untranslated self-name."""

    __tablename__ = "language"

    endonym = Column(String(255), nullable=True)
    iso_639_3_code = Column(String(3), nullable=True)
    language_family_id = Column(
        String(36), ForeignKey("language_family.id", ondelete="RESTRICT"), nullable=True
    )
    speaker_count = Column(Integer, nullable=True)

    invariant_name_field = "endonym"

    translations = _translations("LanguageTranslation")

    __table_args__ = (
        UniqueConstraint("realm_id", "slug", name="uq_language_realm_slug"),
        CheckConstraint("speaker_count IS NULL OR speaker_count >= 0", name="ck_language_speakers"),
        Index("ix_language_family", "language_family_id"),
        Index("ix_language_iso_code", "iso_639_3_code"),
    )

class LanguageTranslation(Base, TranslationMixin):
    __tablename__ = "language_translation"

    entity_id = Column(String(36), ForeignKey("language.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("entity_id", "locale_code", name="uq_language_translation_locale"),
    )

# ---------------------------------------------------------------- district

class District(Base, RealmOwnedMixin):
    __tablename__ = "district"

    translations = _translations("DistrictTranslation")

    __table_args__ = (UniqueConstraint("realm_id", "slug", name="uq_district_realm_slug"),)

class DistrictTranslation(Base, TranslationMixin):
    __tablename__ = "district_translation"

    entity_id = Column(String(36), ForeignKey("district.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("entity_id", "locale_code", name="uq_district_translation_locale"),
    )

# ---------------------------------------------------------------- neighborhood

class Neighborhood(Base, RealmOwnedMixin):
    __tablename__ = "neighborhood"

    district_id = Column(
        String(36), ForeignKey("district.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    translations = _translations("NeighborhoodTranslation")

    __table_args__ = (UniqueConstraint("realm_id", "slug", name="uq_neighborhood_realm_slug"),)

class NeighborhoodTranslation(Base, TranslationMixin):
    __tablename__ = "neighborhood_translation"

    entity_id = Column(
        String(36), ForeignKey("neighborhood.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("entity_id", "locale_code", name="uq_neighborhood_translation_locale"),
    )

# ---------------------------------------------------------------- language point

class LanguagePoint(Base, UUIDMixin, TimestampMixin):
    """
    A place where a language is spoken, optionally inside a neighborhood.

    Points carry no translations. They block deletion of the language and of
    the neighborhood they reference.
    """

    __tablename__ = "language_point"

    realm_id = Column(String(36), ForeignKey("realm.id"), nullable=False, index=True)
    language_id = Column(
        String(36), ForeignKey("language.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    neighborhood_id = Column(
        String(36), ForeignKey("neighborhood.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    postal_code = Column(String(20), nullable=True)
    community_name = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(36), nullable=True)

    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_language_point_latitude"),
        CheckConstraint(
            "longitude >= -180 AND longitude <= 180", name="ck_language_point_longitude"
        ),
        Index("ix_language_point_coordinates", "latitude", "longitude"),
    )

# ---------------------------------------------------------------- registry

CONTENT_MODELS: Dict[EntityKind, Type[RealmOwnedMixin]] = {
    EntityKind.LANGUAGE: Language,
    EntityKind.LANGUAGE_FAMILY: LanguageFamily,
    EntityKind.DISTRICT: District,
    EntityKind.NEIGHBORHOOD: Neighborhood,
}

TRANSLATION_MODELS: Dict[EntityKind, Type[TranslationMixin]] = {
    EntityKind.LANGUAGE: LanguageTranslation,
    EntityKind.LANGUAGE_FAMILY: LanguageFamilyTranslation,
    EntityKind.DISTRICT: DistrictTranslation,
    EntityKind.NEIGHBORHOOD: NeighborhoodTranslation,
}

# Restricting foreign keys into each kind: (referencing model, referencing column name)
DEPENDENT_REFERENCES: Dict[EntityKind, List[Tuple[Any, str]]] = {
    EntityKind.LANGUAGE: [(LanguagePoint, "language_id")],
    EntityKind.LANGUAGE_FAMILY: [(Language, "language_family_id")],
    EntityKind.DISTRICT: [(Neighborhood, "district_id")],
    EntityKind.NEIGHBORHOOD: [(LanguagePoint, "neighborhood_id")],
}

# Core-row foreign keys that must point into the same realm: column -> referenced kind
REALM_REFERENCES: Dict[EntityKind, Dict[str, EntityKind]] = {
    EntityKind.LANGUAGE: {"language_family_id": EntityKind.LANGUAGE_FAMILY},
    EntityKind.LANGUAGE_FAMILY: {},
    EntityKind.DISTRICT: {},
    EntityKind.NEIGHBORHOOD: {"district_id": EntityKind.DISTRICT},
}
