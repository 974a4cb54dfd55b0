"""
Realm (tenant) and locale models.

Just the data structure - no business logic or class methods.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, UniqueConstraint

from ..enums import RealmStatus
from .db_base import JSON, TimestampMixin, UUIDMixin
from .db_config import Base


class Realm(Base, UUIDMixin, TimestampMixin):
    """An isolation boundary (a city). Archived, never deleted."""

    __tablename__ = "realm"

    slug = Column(String(100), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default=RealmStatus.DRAFT.value)

    # Falls back to the configured default locale when unset
    default_locale = Column(String(5), nullable=True)

    # Presentation settings (map center, zoom, brand colour); opaque to the core
    map_settings = Column(JSON, nullable=True)

    __table_args__ = (Index("ix_realm_status", "status"),)

    def __repr__(self) -> str:
        return f"<Realm(id='{self.id}', slug='{self.slug}', status='{self.status}')>"


class Locale(Base, TimestampMixin):
    """A locale that translation rows may be written in."""

    __tablename__ = "locale"

    code = Column(String(5), primary_key=True)
    name = Column(String(100), nullable=False)
    native_name = Column(String(100), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)


class RealmLocale(Base, UUIDMixin, TimestampMixin):
    """
    A locale enabled (or disabled) for one realm.

    A realm with no rows here accepts every active locale.
    """

    __tablename__ = "realm_locale"

    realm_id = Column(String(36), ForeignKey("realm.id", ondelete="CASCADE"), nullable=False)
    locale_code = Column(String(5), ForeignKey("locale.code"), nullable=False)
    is_enabled = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("realm_id", "locale_code", name="uq_realm_locale"),
        Index("ix_realm_locale_realm", "realm_id"),
    )
