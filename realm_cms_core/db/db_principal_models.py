"""
Principal and role grant models.

``role_grant`` is only ever written through the authorization service.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import relationship

from ..enums import GlobalRole
from .db_base import TimestampMixin, UUIDMixin, utc_now
from .db_config import Base


class Principal(Base, UUIDMixin, TimestampMixin):
    """A global (not realm-owned) identity."""

    __tablename__ = "principal"

    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(255), nullable=True)
    global_role = Column(String(20), nullable=False, default=GlobalRole.NONE.value)
    is_active = Column(Boolean, nullable=False, default=True)

    grants = relationship(
        "RoleGrant",
        back_populates="principal",
        foreign_keys="RoleGrant.principal_id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("global_role IN ('none', 'superuser')", name="ck_principal_global_role"),
    )

    def __repr__(self) -> str:
        return f"<Principal(id='{self.id}', email='{self.email}', global_role='{self.global_role}')>"


class RoleGrant(Base):
    """A principal's role within one realm. At most one per (realm, principal)."""

    __tablename__ = "role_grant"

    realm_id = Column(String(36), ForeignKey("realm.id", ondelete="CASCADE"), primary_key=True)
    principal_id = Column(
        String(36), ForeignKey("principal.id", ondelete="CASCADE"), primary_key=True
    )
    role = Column(String(20), nullable=False)
    granted_by = Column(String(36), ForeignKey("principal.id"), nullable=True)
    granted_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    principal = relationship("Principal", back_populates="grants", foreign_keys=[principal_id])

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'operator')", name="ck_role_grant_role"),
        Index("ix_role_grant_principal", "principal_id"),
    )
