"""
Tests for AuthorizationService: checks plus grant/revoke, which are
superuser-only.
"""

import pytest

from realm_cms_core.db import RoleGrant
from realm_cms_core.enums import RealmRole, Role
from realm_cms_core.exceptions import AuthorizationDenied, ErrorCode, RepositoryError
from tests.fixtures.factories import (
    PrincipalFactory,
    RealmFactory,
    RoleGrantFactory,
    SuperuserFactory,
)


class TestAuthorizationChecks:
    def test_require_passes_with_sufficient_grant(self, authorization_service):
        grant = RoleGrantFactory.create(role="admin")

        authorization_service.require(grant.principal_id, grant.realm_id, Role.ADMIN)

    def test_require_raises_denied(self, authorization_service):
        grant = RoleGrantFactory.create(role="operator")

        with pytest.raises(AuthorizationDenied) as exc_info:
            authorization_service.require(grant.principal_id, grant.realm_id, Role.ADMIN)

        assert exc_info.value.message == "denied"
        assert exc_info.value.error_code == ErrorCode.PERMISSION_DENIED
        assert exc_info.value.status_code == 403

    def test_get_role_for_display(self, authorization_service):
        grant = RoleGrantFactory.create(role="admin")
        stranger = PrincipalFactory.create()

        assert authorization_service.get_role(grant.principal_id, grant.realm_id) == "admin"
        assert authorization_service.get_role(stranger.id, grant.realm_id) is None


class TestGrantRole:
    def test_superuser_grants_role(self, authorization_service, db_session):
        superuser = SuperuserFactory.create()
        realm = RealmFactory.create()
        principal = PrincipalFactory.create()

        grant = authorization_service.grant_role(
            superuser.id, realm.id, principal.id, RealmRole.OPERATOR
        )
        db_session.commit()

        assert grant.role == "operator"
        assert grant.granted_by == superuser.id
        assert authorization_service.can_act(principal.id, realm.id, Role.OPERATOR)

    def test_grant_replaces_existing_role(self, authorization_service, db_session):
        superuser = SuperuserFactory.create()
        existing = RoleGrantFactory.create(role="operator")

        authorization_service.grant_role(
            superuser.id, existing.realm_id, existing.principal_id, RealmRole.ADMIN
        )
        db_session.commit()

        rows = db_session.query(RoleGrant).filter_by(principal_id=existing.principal_id).all()
        assert len(rows) == 1
        assert rows[0].role == "admin"

    @pytest.mark.parametrize("actor_role", ["admin", "operator"])
    def test_realm_staff_cannot_grant(self, authorization_service, actor_role):
        actor_grant = RoleGrantFactory.create(role=actor_role)
        principal = PrincipalFactory.create()

        with pytest.raises(AuthorizationDenied):
            authorization_service.grant_role(
                actor_grant.principal_id, actor_grant.realm_id, principal.id, RealmRole.OPERATOR
            )

    def test_grant_in_unknown_realm(self, authorization_service):
        superuser = SuperuserFactory.create()
        principal = PrincipalFactory.create()

        with pytest.raises(RepositoryError) as exc_info:
            authorization_service.grant_role(
                superuser.id, "missing-realm", principal.id, RealmRole.OPERATOR
            )

        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_grant_to_unknown_principal(self, authorization_service):
        superuser = SuperuserFactory.create()
        realm = RealmFactory.create()

        with pytest.raises(RepositoryError) as exc_info:
            authorization_service.grant_role(superuser.id, realm.id, "nobody", RealmRole.ADMIN)

        assert exc_info.value.error_code == ErrorCode.NOT_FOUND


class TestRevokeRole:
    def test_revoke_removes_grant(self, authorization_service, db_session):
        superuser = SuperuserFactory.create()
        grant = RoleGrantFactory.create(role="admin")
        realm_id, principal_id = grant.realm_id, grant.principal_id

        assert authorization_service.revoke_role(superuser.id, realm_id, principal_id) is True
        db_session.commit()

        assert authorization_service.can_act(principal_id, realm_id, Role.OPERATOR) is False

    def test_revoke_is_idempotent(self, authorization_service):
        superuser = SuperuserFactory.create()
        realm = RealmFactory.create()
        principal = PrincipalFactory.create()

        assert authorization_service.revoke_role(superuser.id, realm.id, principal.id) is False

    def test_admin_cannot_revoke(self, authorization_service):
        grant = RoleGrantFactory.create(role="admin")

        with pytest.raises(AuthorizationDenied):
            authorization_service.revoke_role(grant.principal_id, grant.realm_id, grant.principal_id)


class TestListGrants:
    def test_principal_lists_own_grants(self, authorization_service):
        principal = PrincipalFactory.create()
        RoleGrantFactory.create(principal=principal, role="admin")
        RoleGrantFactory.create(principal=principal, role="operator")
        RoleGrantFactory.create()

        grants = authorization_service.list_grants(principal.id)

        assert len(grants) == 2
        assert {g.principal_id for g in grants} == {principal.id}

    def test_superuser_lists_all_grants_in_realm(self, authorization_service):
        superuser = SuperuserFactory.create()
        realm = RealmFactory.create()
        RoleGrantFactory.create_batch(2, realm=realm)
        RoleGrantFactory.create()

        grants = authorization_service.list_grants(superuser.id, realm.id)

        assert len(grants) == 2
        assert {g.realm_id for g in grants} == {realm.id}
