"""
Transactional write coordinator.

Every write request moves through a small state machine::

    RECEIVED -> AUTHORIZATION_CHECKED -> DENIED
                                      -> IN_TRANSACTION -> COMMITTED
                                                        -> ROLLED_BACK

Authorization is answered first. Payload validation runs next, before any
write is issued. The write itself runs on one session and is committed or
rolled back as a unit; the first error raised inside it is translated into a
``BaseError`` and reported in the ``WriteResult``. Concurrent writers to the
same row are last-commit-wins.
"""

from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..authorization import grants
from ..authorization.predicates import AccessScope
from ..authorization.roles import RoleLike
from ..context.operation_context import OperationHandler
from ..context.tenant_context import tenant_context
from ..db.db_config import get_db_manager
from ..db.db_realm_models import Realm
from ..enums import EntityKind, GlobalRole, PublicationStatus, Role, WriteState
from ..exceptions import (
    AuthorizationDenied,
    BaseError,
    ErrorCode,
    ValidationError,
    not_found,
)
from ..schemas.result_schemas import BoundaryError, ReadResult, WriteResult
from ..utils.logger import get_logger
from .authorization_service import AuthorizationService
from .base_service import translate_db_error
from .classification_service import ClassificationService
from .entity_service import TranslatableEntityService
from .language_point_service import LanguagePointService
from .locale_service import LocaleService
from .realm_service import RealmService


@dataclass
class WriteContext:
    """Services bound to one request's session, plus who is acting where."""

    session: Session
    principal_id: str
    realms: RealmService
    authorization: AuthorizationService
    locales: LocaleService
    entities: TranslatableEntityService
    classifications: ClassificationService
    points: LanguagePointService
    realm: Optional[Realm] = None
    scope: Optional[AccessScope] = None

    @property
    def realm_id(self) -> Optional[str]:
        return self.realm.id if self.realm is not None else None


@dataclass
class _Trace:
    history: List[WriteState] = field(default_factory=lambda: [WriteState.RECEIVED])

    @property
    def state(self) -> WriteState:
        return self.history[-1]

    def move(self, state: WriteState) -> None:
        self.history.append(state)


Validator = Callable[[WriteContext], Any]
Work = Callable[[WriteContext, Any], Optional[str]]


class WriteCoordinator:
    """Runs authorized, validated writes as single transactions."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None, logger=None):
        self._session_factory = session_factory
        self.logger = logger or get_logger()

    def _open_session(self) -> Session:
        factory = self._session_factory or get_db_manager().session_factory
        return factory()

    def _context(self, session: Session, principal_id: str) -> WriteContext:
        shared = {"session": session, "logger": self.logger}
        return WriteContext(
            session=session,
            principal_id=principal_id,
            realms=RealmService(**shared),
            authorization=AuthorizationService(**shared),
            locales=LocaleService(**shared),
            entities=TranslatableEntityService(**shared),
            classifications=ClassificationService(**shared),
            points=LanguagePointService(**shared),
        )

    def _authorize(
        self, ctx: WriteContext, realm_slug: Optional[str], required_role: Optional[RoleLike]
    ) -> Tuple[bool, Optional[Realm]]:
        """
        Resolve the realm and answer whether the principal may act in it.

        An unknown realm is denied to everyone but superusers, who get
        NOT_FOUND instead. With no required role any active principal may
        act; otherwise a realm-less request is for superusers only.
        """
        global_role = grants.lookup_global_role(ctx.session, ctx.principal_id)
        superuser = global_role == GlobalRole.SUPERUSER.value
        if realm_slug is None:
            if required_role is None:
                return global_role is not None, None
            return superuser, None

        realm = ctx.realms.get_by_slug(realm_slug)
        if realm is None:
            if superuser:
                raise not_found("Realm", slug=realm_slug)
            return False, None

        if required_role is None:
            return global_role is not None, realm
        return ctx.authorization.can_act(ctx.principal_id, realm.id, required_role), realm

    def _log_state(self, operation_name: str, trace: _Trace, ctx: WriteContext) -> None:
        self.logger.info(
            f"Write {operation_name}: {trace.state.value}",
            extra={
                "operation_name": operation_name,
                "write_state": trace.state.value,
                "realm_id": ctx.realm_id,
                "principal_id": ctx.principal_id,
            },
        )

    def _result(
        self,
        trace: _Trace,
        result_id: Optional[str] = None,
        error: Optional[BaseError] = None,
    ) -> WriteResult:
        return WriteResult(
            ok=error is None and trace.state == WriteState.COMMITTED,
            id=result_id,
            error=BoundaryError.from_exception(error) if error is not None else None,
            state=trace.state,
            state_history=list(trace.history),
        )

    def execute(
        self,
        operation_name: str,
        principal_id: str,
        realm_slug: Optional[str],
        required_role: RoleLike,
        work: Work,
        validate: Optional[Validator] = None,
    ) -> WriteResult:
        """
        Run ``work`` for ``principal_id`` in the realm named ``realm_slug``.

        ``validate`` runs after authorization and before the transaction is
        considered open; whatever it returns is handed to ``work``. ``work``
        returns the id of the affected row, if any.
        """
        trace = _Trace()
        session = self._open_session()
        ctx = self._context(session, principal_id)
        try:
            try:
                allowed, ctx.realm = self._authorize(ctx, realm_slug, required_role)
                trace.move(WriteState.AUTHORIZATION_CHECKED)
                if not allowed:
                    trace.move(WriteState.DENIED)
                    self._log_state(operation_name, trace, ctx)
                    return self._result(
                        trace,
                        error=AuthorizationDenied(
                            principal_id=principal_id,
                            realm_slug=realm_slug,
                            operation=operation_name,
                        ),
                    )
                payload = validate(ctx) if validate is not None else None
            except Exception as e:
                session.rollback()
                if trace.state == WriteState.RECEIVED:
                    trace.move(WriteState.AUTHORIZATION_CHECKED)
                trace.move(WriteState.ROLLED_BACK)
                self._log_state(operation_name, trace, ctx)
                return self._result(trace, error=translate_db_error(e, operation=operation_name))

            trace.move(WriteState.IN_TRANSACTION)
            scope = (
                tenant_context(ctx.realm_id, principal_id)
                if ctx.realm_id
                else nullcontext()
            )
            try:
                with scope, OperationHandler(self.logger).operation(
                    operation_name, principal_id=principal_id
                ):
                    result_id = work(ctx, payload)
                    session.commit()
            except Exception as e:
                session.rollback()
                trace.move(WriteState.ROLLED_BACK)
                self._log_state(operation_name, trace, ctx)
                return self._result(trace, error=translate_db_error(e, operation=operation_name))

            trace.move(WriteState.COMMITTED)
            self._log_state(operation_name, trace, ctx)
            return self._result(trace, result_id=result_id)
        finally:
            session.close()

    def read(
        self,
        operation_name: str,
        principal_id: str,
        realm_slug: Optional[str],
        fetch: Callable[[WriteContext], Any],
        required_role: Optional[RoleLike] = Role.OPERATOR,
    ) -> ReadResult:
        """
        Run ``fetch`` on a fresh session after the same authorization check
        as writes. Nothing is committed.

        ``ctx.scope`` carries the principal's resolved realm visibility for
        row predicates.
        """
        session = self._open_session()
        ctx = self._context(session, principal_id)
        try:
            allowed, ctx.realm = self._authorize(ctx, realm_slug, required_role)
            if not allowed:
                return ReadResult.failure(
                    AuthorizationDenied(principal_id=principal_id, operation=operation_name)
                )
            ctx.scope = ctx.authorization.resolve_scope(principal_id)
            if ctx.realm_id:
                with tenant_context(ctx.realm_id, principal_id):
                    data = fetch(ctx)
            else:
                data = fetch(ctx)
            return ReadResult.success(data)
        except Exception as e:
            return ReadResult.failure(translate_db_error(e, operation=operation_name))
        finally:
            session.rollback()
            session.close()

    def publish(
        self,
        realm_slug: str,
        principal_id: str,
        entity_id: str,
        kind: Optional[EntityKind] = None,
    ) -> WriteResult:
        """
        Move an entity from draft to published.

        Refused with a validation error on ``classifications`` while any
        required classification type governing the entity's kind has no
        assignment. Draft saves are never checked.
        """

        def work(ctx: WriteContext, _payload: Any) -> str:
            entity_kind, entity = ctx.entities.locate(ctx.realm_id, entity_id, kind)
            missing = ctx.classifications.validate_completeness(
                ctx.realm_id, entity_kind, entity.id
            )
            if missing:
                slugs = [ctx.classifications.get_type(ctx.realm_id, t).slug for t in missing]
                raise ValidationError(
                    f"required classifications missing: {', '.join(slugs)}",
                    field="classifications",
                    error_code=ErrorCode.PRECONDITION_FAILED,
                    missing_type_ids=missing,
                )
            ctx.entities.set_status(
                ctx.realm_id, entity_kind, entity.id, PublicationStatus.PUBLISHED
            )
            return entity.id

        return self.execute("publish_entity", principal_id, realm_slug, Role.OPERATOR, work)
