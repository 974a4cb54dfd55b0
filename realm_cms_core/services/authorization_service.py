"""
Authorization service.

Wraps the privileged primitives in ``realm_cms_core.authorization`` with a
session and owns every write to ``role_grant``. Grant and revoke are
superuser-only.
"""

from typing import List, Optional, Set

from sqlalchemy import select

from ..authorization import grants, predicates
from ..authorization.roles import RoleLike
from ..context.operation_context import operation
from ..db.db_base import utc_now
from ..db.db_principal_models import Principal, RoleGrant
from ..enums import RealmRole, Role
from ..exceptions import AuthorizationDenied, ValidationError, not_found, permission_denied
from .base_service import SessionManagedService


class AuthorizationService(SessionManagedService):
    """Answers "may P act in realm R at role X" and manages role grants."""

    def can_act(self, principal_id: str, realm_id: str, required_role: RoleLike) -> bool:
        allowed = grants.can_act(self.session, principal_id, realm_id, required_role)
        self.logger.debug(
            "Authorization check",
            extra={
                "principal_id": principal_id,
                "realm_id": realm_id,
                "required_role": getattr(required_role, "value", required_role),
                "allowed": allowed,
            },
        )
        return allowed

    def require(self, principal_id: str, realm_id: str, required_role: RoleLike) -> None:
        """Raise AuthorizationDenied unless ``can_act`` holds."""
        if not self.can_act(principal_id, realm_id, required_role):
            raise AuthorizationDenied(
                principal_id=principal_id,
                realm_id=realm_id,
                required_role=getattr(required_role, "value", required_role),
            )

    def require_superuser(self, principal_id: str, action: str) -> None:
        if not grants.is_superuser(self.session, principal_id):
            raise permission_denied(action, "role_grant", principal_id=principal_id)

    def accessible_realm_ids(
        self, principal_id: str, min_role: RoleLike = Role.OPERATOR
    ) -> Optional[Set[str]]:
        return grants.accessible_realm_ids(self.session, principal_id, min_role)

    def resolve_scope(
        self, principal_id: str, min_role: RoleLike = Role.OPERATOR
    ) -> predicates.AccessScope:
        return predicates.resolve_scope(self.session, principal_id, min_role)

    def get_role(self, principal_id: str, realm_id: str) -> Optional[str]:
        """The role to display for the principal in the realm, or None."""
        return grants.effective_role(self.session, principal_id, realm_id)

    @operation()
    def grant_role(
        self, actor_id: str, realm_id: str, principal_id: str, role: RealmRole
    ) -> RoleGrant:
        """
        Give ``principal_id`` ``role`` in the realm, replacing any existing grant.
        """
        self.require_superuser(actor_id, "grant_role")
        role = RealmRole(role)
        self._get_realm(realm_id)
        if self.session.get(Principal, principal_id) is None:
            raise not_found("Principal", principal_id=principal_id)

        grant = self.session.get(RoleGrant, (realm_id, principal_id))
        if grant is None:
            grant = RoleGrant(realm_id=realm_id, principal_id=principal_id)
            self.session.add(grant)
        grant.role = role.value
        grant.granted_by = actor_id
        grant.granted_at = utc_now()
        self.session.flush()

        self.logger.info(
            "Role granted",
            extra={"realm_id": realm_id, "principal_id": principal_id, "role": role.value},
        )
        return grant

    @operation()
    def revoke_role(self, actor_id: str, realm_id: str, principal_id: str) -> bool:
        """Delete the principal's grant in the realm. Idempotent."""
        self.require_superuser(actor_id, "revoke_role")
        grant = self.session.get(RoleGrant, (realm_id, principal_id))
        if grant is None:
            return False
        self.session.delete(grant)
        self.session.flush()
        self.logger.info(
            "Role revoked", extra={"realm_id": realm_id, "principal_id": principal_id}
        )
        return True

    def list_grants(self, actor_id: str, realm_id: Optional[str] = None) -> List[RoleGrant]:
        """Grants visible to ``actor_id``: their own, or all of them for superusers."""
        if not actor_id:
            raise ValidationError("actor_id is required", field="actor_id")
        query = select(RoleGrant).where(
            predicates.role_grant_visibility_predicate(self.session, actor_id)
        )
        if realm_id:
            query = query.where(RoleGrant.realm_id == realm_id)
        query = query.order_by(RoleGrant.realm_id, RoleGrant.principal_id)
        return list(self.session.execute(query).scalars())
