"""
Tests for the WriteCoordinator state machine and error translation.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from realm_cms_core.context.tenant_context import TenantContext
from realm_cms_core.db import District
from realm_cms_core.enums import EntityKind, Role, WriteState
from realm_cms_core.exceptions import ErrorKind, ValidationError
from realm_cms_core.services import WriteCoordinator


class FailingCommitSession(Session):
    """Session whose commit fails the way a dropped connection does."""

    def commit(self):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))


@pytest.fixture
def coordinator(db_manager, db_session):
    return WriteCoordinator(session_factory=db_manager.session_factory)


@pytest.fixture
def actors(staff):
    return {name: staff[name].id for name in ("admin", "operator", "outsider", "superuser")}


def _districts(session):
    session.expire_all()
    return session.execute(select(func.count()).select_from(District)).scalar_one()


def _create_district(slug="centrum"):
    def work(ctx, _payload):
        return ctx.entities.create_with_translations(
            ctx.realm_id, EntityKind.DISTRICT, {"slug": slug}, {"en": {"name": "Centre"}}
        )

    return work


class TestExecute:
    def test_commits_work(self, coordinator, actors, db_session):
        result = coordinator.execute(
            "create_district", actors["operator"], "amsterdam", Role.OPERATOR, _create_district()
        )

        assert result.ok
        assert result.id
        assert result.state == WriteState.COMMITTED
        assert _districts(db_session) == 1

    def test_denied_never_runs_work(self, coordinator, actors):
        calls = []

        result = coordinator.execute(
            "create_district",
            actors["operator"],
            "amsterdam",
            Role.ADMIN,
            lambda ctx, payload: calls.append(payload),
        )

        assert result.state == WriteState.DENIED
        assert calls == []

    def test_validator_output_reaches_work(self, coordinator, actors):
        seen = []

        def work(ctx, payload):
            seen.append(payload)
            return None

        coordinator.execute(
            "noop", actors["admin"], "amsterdam", Role.OPERATOR, work, lambda ctx: {"checked": True}
        )

        assert seen == [{"checked": True}]

    def test_first_error_rolls_back_everything(self, coordinator, actors, db_session):
        def work(ctx, _payload):
            _create_district("first")(ctx, None)
            raise ValidationError("second step failed", field="fields.second")

        result = coordinator.execute("two_steps", actors["admin"], "amsterdam", Role.ADMIN, work)

        assert result.state == WriteState.ROLLED_BACK
        assert result.error.field == "fields.second"
        assert _districts(db_session) == 0

    def test_unexpected_exception_is_translated(self, coordinator, actors, db_session):
        def work(ctx, payload):
            _create_district()(ctx, payload)
            raise RuntimeError("password=hunter2 host=10.0.0.5")

        result = coordinator.execute("explode", actors["admin"], "amsterdam", Role.ADMIN, work)

        assert result.state == WriteState.ROLLED_BACK
        assert result.error.kind == ErrorKind.TRANSACTION_FAILURE
        assert result.error.message == "internal error, nothing was committed"
        assert "hunter2" not in result.error.message
        assert "10.0.0.5" not in result.error.message
        assert result.error.field is None
        assert _districts(db_session) == 0

    def test_unexpected_exception_in_read_is_not_exposed(self, coordinator, actors):
        def fetch(ctx):
            raise KeyError("internal_column_name")

        result = coordinator.read("peek", actors["operator"], "amsterdam", fetch)

        assert not result.ok
        assert "internal_column_name" not in result.error.message

    def test_commit_failure_is_transaction_failure(self, db_manager, actors, db_session):
        coordinator = WriteCoordinator(
            session_factory=sessionmaker(bind=db_manager.engine, class_=FailingCommitSession)
        )

        result = coordinator.execute(
            "create_district", actors["admin"], "amsterdam", Role.ADMIN, _create_district()
        )

        assert result.state == WriteState.ROLLED_BACK
        assert result.error.kind == ErrorKind.TRANSACTION_FAILURE
        assert _districts(db_session) == 0

    def test_realm_context_is_set_during_work(self, coordinator, actors, staff):
        seen = []

        def work(ctx, _payload):
            seen.append(TenantContext.get_current_tenant_id())
            seen.append(TenantContext.get_current_principal_id())
            return None

        coordinator.execute("peek", actors["operator"], "amsterdam", Role.OPERATOR, work)

        assert seen == [staff["realm"].id, actors["operator"]]
        assert TenantContext.get_current_tenant_id() is None

    def test_realmless_request_needs_superuser(self, coordinator, actors):
        admin_result = coordinator.execute(
            "global", actors["admin"], None, Role.SUPERUSER, lambda ctx, p: None
        )
        superuser_result = coordinator.execute(
            "global", actors["superuser"], None, Role.SUPERUSER, lambda ctx, p: None
        )

        assert admin_result.state == WriteState.DENIED
        assert superuser_result.state == WriteState.COMMITTED


class TestRead:
    def test_read_returns_data(self, coordinator, actors):
        result = coordinator.read(
            "peek", actors["operator"], "amsterdam", lambda ctx: ctx.realm.slug
        )

        assert result.ok
        assert result.data == "amsterdam"

    def test_read_scope_is_resolved(self, coordinator, actors, staff):
        result = coordinator.read(
            "scope", actors["operator"], "amsterdam", lambda ctx: ctx.scope.realm_ids
        )

        assert result.data == {staff["realm"].id}

    def test_read_errors_are_structured(self, coordinator, actors):
        def fetch(ctx):
            raise ValidationError("bad filter", field="filters.slug")

        result = coordinator.read("bad", actors["operator"], "amsterdam", fetch)

        assert not result.ok
        assert result.error.kind == ErrorKind.VALIDATION_FAILED
        assert result.error.field == "filters.slug"
