"""
Privileged authorization primitives.

These functions read ``principal`` and ``role_grant`` directly with plain
primary-key/column filters. They never go through the row-visibility
predicates in ``predicates.py``; those predicates are built on top of them.
A permission check therefore never has to evaluate itself.
"""

from typing import Optional, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..enums import GlobalRole, Role
from ..db.db_principal_models import Principal, RoleGrant
from .roles import RoleLike, satisfies


def lookup_global_role(session: Session, principal_id: Optional[str]) -> Optional[str]:
    """
    Global role of an active principal.

    Returns None for unknown or inactive principals, so they hold no rights
    anywhere.
    """
    if not principal_id:
        return None
    row = session.execute(
        select(Principal.global_role, Principal.is_active).where(Principal.id == principal_id)
    ).first()
    if row is None or not row.is_active:
        return None
    return row.global_role


def is_superuser(session: Session, principal_id: Optional[str]) -> bool:
    return lookup_global_role(session, principal_id) == GlobalRole.SUPERUSER.value


def lookup_grant_role(session: Session, principal_id: str, realm_id: str) -> Optional[str]:
    """The principal's granted role in ``realm_id``, or None. Single-row lookup."""
    return session.execute(
        select(RoleGrant.role).where(
            RoleGrant.realm_id == realm_id, RoleGrant.principal_id == principal_id
        )
    ).scalar_one_or_none()


def effective_role(session: Session, principal_id: str, realm_id: str) -> Optional[str]:
    """
    The strongest role the principal holds in the realm.

    Superusers report ``superuser`` everywhere; inactive principals report None.
    """
    global_role = lookup_global_role(session, principal_id)
    if global_role is None:
        return None
    if global_role == GlobalRole.SUPERUSER.value:
        return Role.SUPERUSER.value
    return lookup_grant_role(session, principal_id, realm_id)


def can_act(session: Session, principal_id: str, realm_id: str, required_role: RoleLike) -> bool:
    """
    Whether the principal may act in the realm at ``required_role``.

    (1) superusers always may; (2) otherwise the realm grant is looked up and
    (3) compared by ordinal; (4) no grant means no.
    """
    global_role = lookup_global_role(session, principal_id)
    if global_role is None:
        return False
    if global_role == GlobalRole.SUPERUSER.value:
        return True
    return satisfies(lookup_grant_role(session, principal_id, realm_id), required_role)


def accessible_realm_ids(
    session: Session, principal_id: str, min_role: RoleLike = Role.OPERATOR
) -> Optional[Set[str]]:
    """
    Realms in which the principal holds at least ``min_role``.

    Returns None for superusers, meaning "every realm"; an empty set means none.
    """
    global_role = lookup_global_role(session, principal_id)
    if global_role is None:
        return set()
    if global_role == GlobalRole.SUPERUSER.value:
        return None
    rows = session.execute(
        select(RoleGrant.realm_id, RoleGrant.role).where(RoleGrant.principal_id == principal_id)
    ).all()
    return {row.realm_id for row in rows if satisfies(row.role, min_role)}
