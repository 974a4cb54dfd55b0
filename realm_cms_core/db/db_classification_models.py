"""
Generic per-realm classification (taxonomy) models.

A realm defines its own classification types (axes such as "endangerment
status"), each with a set of values; assignments attach values to content
entities. Assignments reference values with RESTRICT, so a type or value
cannot be deleted while anything is classified by it.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..constants import FieldLimit
from ..enums import EntityKind
from .db_base import TimestampMixin, TranslationMixin, UUIDMixin
from .db_config import Base


class ClassificationType(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "classification_type"

    realm_id = Column(String(36), ForeignKey("realm.id"), nullable=False, index=True)
    slug = Column(String(100), nullable=False)
    entity_kind = Column(String(30), nullable=False, default=EntityKind.LANGUAGE.value)
    required = Column(Boolean, nullable=False, default=False)
    allow_multiple = Column(Boolean, nullable=False, default=False)
    used_for_filtering = Column(Boolean, nullable=False, default=True)
    used_for_rendering_style = Column(Boolean, nullable=False, default=False)
    display_order = Column(Integer, nullable=False, default=0)

    translations = relationship(
        "ClassificationTypeTranslation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ClassificationTypeTranslation.locale_code",
    )
    values = relationship(
        "ClassificationValue",
        back_populates="classification_type",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ClassificationValue.display_order",
    )

    __table_args__ = (
        UniqueConstraint("realm_id", "slug", name="uq_classification_type_realm_slug"),
        Index("ix_classification_type_display_order", "realm_id", "display_order"),
    )

    def __repr__(self) -> str:
        return (
            f"<ClassificationType(id='{self.id}', slug='{self.slug}', "
            f"required={self.required}, allow_multiple={self.allow_multiple})>"
        )


class ClassificationTypeTranslation(Base, TranslationMixin):
    __tablename__ = "classification_type_translation"

    entity_id = Column(
        String(36), ForeignKey("classification_type.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "entity_id", "locale_code", name="uq_classification_type_translation_locale"
        ),
    )


class ClassificationValue(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "classification_value"

    classification_type_id = Column(
        String(36),
        ForeignKey("classification_type.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    slug = Column(String(100), nullable=False)
    color = Column(String(7), nullable=False, default=FieldLimit.DEFAULT_COLOR)
    icon_reference = Column(String(50), nullable=True)
    icon_scale = Column(Float, nullable=False, default=1.0)
    display_order = Column(Integer, nullable=False, default=0)

    classification_type = relationship("ClassificationType", back_populates="values")
    translations = relationship(
        "ClassificationValueTranslation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ClassificationValueTranslation.locale_code",
    )

    __table_args__ = (
        UniqueConstraint("classification_type_id", "slug", name="uq_classification_value_slug"),
        CheckConstraint("icon_scale >= 0.5 AND icon_scale <= 3.0", name="ck_value_icon_scale"),
        CheckConstraint("display_order >= 0", name="ck_value_display_order"),
    )


class ClassificationValueTranslation(Base, TranslationMixin):
    __tablename__ = "classification_value_translation"

    entity_id = Column(
        String(36), ForeignKey("classification_value.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "entity_id", "locale_code", name="uq_classification_value_translation_locale"
        ),
    )


class ClassificationAssignment(Base, UUIDMixin, TimestampMixin):
    """Attaches one classification value to one content entity."""

    __tablename__ = "classification_assignment"

    realm_id = Column(String(36), ForeignKey("realm.id"), nullable=False, index=True)
    entity_kind = Column(String(30), nullable=False)
    # Polymorphic reference; the owning kind's delete path checks it explicitly
    entity_id = Column(String(36), nullable=False)
    classification_value_id = Column(
        String(36),
        ForeignKey("classification_value.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    classification_value = relationship("ClassificationValue")

    __table_args__ = (
        UniqueConstraint(
            "entity_kind",
            "entity_id",
            "classification_value_id",
            name="uq_classification_assignment",
        ),
        Index("ix_classification_assignment_entity", "entity_kind", "entity_id"),
    )
