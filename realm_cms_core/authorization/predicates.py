"""
Per-row visibility predicates.

Each predicate is a SQLAlchemy boolean expression to be added to a query's
WHERE clause. Predicates are composed from values the privileged primitives
in ``grants.py`` have already resolved, so none of them embeds a sub-query
against ``role_grant``.
"""

from dataclasses import dataclass
from typing import Optional, Set

from sqlalchemy import false, true
from sqlalchemy.orm import Session

from ..db.db_principal_models import RoleGrant
from ..enums import Role
from .grants import accessible_realm_ids, is_superuser
from .roles import RoleLike


@dataclass(frozen=True)
class AccessScope:
    """Resolved read scope for one principal."""

    principal_id: str
    realm_ids: Optional[Set[str]]  # None means every realm

    @property
    def unrestricted(self) -> bool:
        return self.realm_ids is None

    def allows(self, realm_id: str) -> bool:
        return self.realm_ids is None or realm_id in self.realm_ids

    def realm_predicate(self, column):
        return realm_scope_predicate(column, self.realm_ids)


def resolve_scope(
    session: Session, principal_id: str, min_role: RoleLike = Role.OPERATOR
) -> AccessScope:
    return AccessScope(principal_id, accessible_realm_ids(session, principal_id, min_role))


def realm_scope_predicate(column, realm_ids: Optional[Set[str]]):
    """Restrict ``column`` (a realm id column) to the accessible realms."""
    if realm_ids is None:
        return true()
    if not realm_ids:
        return false()
    return column.in_(sorted(realm_ids))


def role_grant_visibility_predicate(session: Session, principal_id: str):
    """
    Rows of ``role_grant`` the principal may see: their own, or all for superusers.

    The superuser test reads ``principal`` only, never ``role_grant``.
    """
    if is_superuser(session, principal_id):
        return true()
    return RoleGrant.principal_id == principal_id
