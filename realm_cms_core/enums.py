"""
Enums used across the realm_cms_core package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum


class GlobalRole(str, enum.Enum):
    """Platform-wide role held on the principal record itself."""

    NONE = "none"
    SUPERUSER = "superuser"


class RealmRole(str, enum.Enum):
    """Roles that can be granted within a single realm."""

    ADMIN = "admin"
    OPERATOR = "operator"


class Role(str, enum.Enum):
    """Role levels that an operation can require."""

    OPERATOR = "operator"
    ADMIN = "admin"
    SUPERUSER = "superuser"


class RealmStatus(str, enum.Enum):
    """Lifecycle of a realm. Realms are archived, never deleted."""

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class PublicationStatus(str, enum.Enum):
    """Lifecycle of a content entity."""

    DRAFT = "draft"
    PUBLISHED = "published"


class EntityKind(str, enum.Enum):
    """Kinds of translatable, realm-owned content entities."""

    LANGUAGE = "language"
    LANGUAGE_FAMILY = "language_family"
    DISTRICT = "district"
    NEIGHBORHOOD = "neighborhood"


class WriteState(str, enum.Enum):
    """States a write request moves through in the coordinator."""

    RECEIVED = "received"
    AUTHORIZATION_CHECKED = "authorization_checked"
    DENIED = "denied"
    IN_TRANSACTION = "in_transaction"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
