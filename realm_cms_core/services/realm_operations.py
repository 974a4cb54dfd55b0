"""
Boundary façade over the CMS core.

One method per entrypoint. Each takes the realm slug, the acting principal id
and a payload, and returns a ``WriteResult`` or ``ReadResult``; errors come
back as a ``BoundaryError`` and are never raised to the caller.

Required roles:

- entity create/update/publish, classification assign/unassign and language
  points: operator
- entity delete and classification type/value changes: admin
- realms, realm locales and role grants: superuser
"""

from typing import Any, Callable, List, Optional

from sqlalchemy.orm import Session

from ..enums import EntityKind, Role
from ..exceptions import not_found
from ..schemas.classification_schemas import (
    AssignmentRead,
    AssignmentRequest,
    ClassificationTypeCreate,
    ClassificationTypeRead,
    ClassificationTypeUpdate,
    ClassificationValueCreate,
    ClassificationValueRead,
    ClassificationValueUpdate,
)
from ..schemas.entity_schemas import (
    EntityCreate,
    EntityFilter,
    EntityRead,
    EntityUpdate,
    parse_core_fields,
)
from ..schemas.geography_schemas import LanguagePointCreate, LanguagePointRead
from ..schemas.mixins import parse_payload
from ..schemas.realm_schemas import (
    RealmCreate,
    RealmLocalesUpdate,
    RealmRead,
    RoleGrantCreate,
    RoleGrantRead,
)
from ..schemas.result_schemas import ReadResult, WriteResult
from ..utils.logger import get_logger
from .entity_service import parse_translations
from .write_coordinator import WriteContext, WriteCoordinator


def _translations_validator(schema, payload: Any, locales_of: Callable[[Any], Any]):
    """Parse ``payload`` and check its locales before the transaction opens."""

    def validate(ctx: WriteContext):
        request = parse_payload(schema, payload)
        translations = locales_of(request)
        if translations:
            ctx.locales.require_active(translations.keys(), realm_id=ctx.realm_id)
        return request

    return validate


class RealmOperations:
    """Entrypoints used by the operator UI and import jobs."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None, logger=None):
        self.logger = logger or get_logger()
        self.coordinator = WriteCoordinator(session_factory=session_factory, logger=self.logger)

    # ------------------------------------------------------------------ entities

    def create_entity_with_translations(
        self, realm_slug: str, principal_id: str, payload: Any
    ) -> WriteResult:
        def validate(ctx: WriteContext) -> EntityCreate:
            request = parse_payload(EntityCreate, payload)
            parse_core_fields(request.kind, request.fields)
            ctx.locales.require_active(request.translations.keys(), realm_id=ctx.realm_id)
            return request

        def work(ctx: WriteContext, request: EntityCreate) -> str:
            return ctx.entities.create_with_translations(
                ctx.realm_id, request.kind, request.fields, request.translations
            )

        return self.coordinator.execute(
            "create_entity_with_translations",
            principal_id,
            realm_slug,
            Role.OPERATOR,
            work,
            validate,
        )

    def update_entity_with_translations(
        self, realm_slug: str, principal_id: str, entity_id: str, payload: Any
    ) -> WriteResult:
        def validate(ctx: WriteContext) -> EntityUpdate:
            request = parse_payload(EntityUpdate, payload)
            kind, _ = ctx.entities.locate(ctx.realm_id, entity_id, request.kind)
            parse_core_fields(kind, request.fields, for_update=True)
            if request.translations is not None:
                parse_translations(request.translations)
                ctx.locales.require_active(request.translations.keys(), realm_id=ctx.realm_id)
            return request.model_copy(update={"kind": kind})

        def work(ctx: WriteContext, request: EntityUpdate) -> str:
            kind, entity = ctx.entities.locate(ctx.realm_id, entity_id, request.kind)
            ctx.entities.update_with_translations(
                ctx.realm_id, kind, entity.id, request.fields, request.translations
            )
            return entity.id

        return self.coordinator.execute(
            "update_entity_with_translations",
            principal_id,
            realm_slug,
            Role.OPERATOR,
            work,
            validate,
        )

    def delete_entity(
        self,
        realm_slug: str,
        principal_id: str,
        entity_id: str,
        kind: Optional[EntityKind] = None,
    ) -> WriteResult:
        def work(ctx: WriteContext, _payload: Any) -> str:
            entity_kind, entity = ctx.entities.locate(ctx.realm_id, entity_id, kind)
            ctx.entities.delete(ctx.realm_id, entity_kind, entity.id)
            return entity_id

        return self.coordinator.execute(
            "delete_entity", principal_id, realm_slug, Role.ADMIN, work
        )

    def publish_entity(
        self,
        realm_slug: str,
        principal_id: str,
        entity_id: str,
        kind: Optional[EntityKind] = None,
    ) -> WriteResult:
        return self.coordinator.publish(realm_slug, principal_id, entity_id, kind)

    def list_entities(self, realm_slug: str, principal_id: str, filters: Any = None) -> ReadResult:
        def fetch(ctx: WriteContext) -> List[EntityRead]:
            criteria = parse_payload(EntityFilter, filters or {}, prefix="filters")
            rows = ctx.entities.list_entities(
                ctx.realm_id, criteria, scope_predicate=ctx.scope.realm_predicate
            )
            return [ctx.entities.to_read(criteria.kind, row, criteria.locale) for row in rows]

        return self.coordinator.read("list_entities", principal_id, realm_slug, fetch)

    def get_entity(
        self,
        realm_slug: str,
        principal_id: str,
        entity_id: str,
        requested_locale: Optional[str] = None,
        kind: Optional[EntityKind] = None,
    ) -> ReadResult:
        def fetch(ctx: WriteContext) -> EntityRead:
            entity_kind, entity = ctx.entities.locate(ctx.realm_id, entity_id, kind)
            if not ctx.scope.allows(entity.realm_id):
                raise not_found("Entity", entity_id=entity_id)
            return ctx.entities.to_read(entity_kind, entity, requested_locale)

        return self.coordinator.read("get_entity", principal_id, realm_slug, fetch)

    # ------------------------------------------------------ classification types and values

    def define_classification_type(
        self, realm_slug: str, principal_id: str, payload: Any
    ) -> WriteResult:
        validate = _translations_validator(
            ClassificationTypeCreate, payload, lambda request: request.translations
        )

        def work(ctx: WriteContext, request: ClassificationTypeCreate) -> str:
            return ctx.classifications.define_type(ctx.realm_id, request)

        return self.coordinator.execute(
            "define_classification_type", principal_id, realm_slug, Role.ADMIN, work, validate
        )

    def update_classification_type(
        self, realm_slug: str, principal_id: str, type_id: str, payload: Any
    ) -> WriteResult:
        validate = _translations_validator(
            ClassificationTypeUpdate, payload, lambda request: request.translations
        )

        def work(ctx: WriteContext, request: ClassificationTypeUpdate) -> str:
            ctx.classifications.update_type(
                ctx.realm_id, type_id, request.model_dump(exclude_unset=True)
            )
            return type_id

        return self.coordinator.execute(
            "update_classification_type", principal_id, realm_slug, Role.ADMIN, work, validate
        )

    def delete_classification_type(
        self, realm_slug: str, principal_id: str, type_id: str
    ) -> WriteResult:
        def work(ctx: WriteContext, _payload: Any) -> str:
            ctx.classifications.delete_type(ctx.realm_id, type_id)
            return type_id

        return self.coordinator.execute(
            "delete_classification_type", principal_id, realm_slug, Role.ADMIN, work
        )

    def define_classification_value(
        self, realm_slug: str, principal_id: str, type_id: str, payload: Any
    ) -> WriteResult:
        validate = _translations_validator(
            ClassificationValueCreate, payload, lambda request: request.translations
        )

        def work(ctx: WriteContext, request: ClassificationValueCreate) -> str:
            return ctx.classifications.define_value(ctx.realm_id, type_id, request)

        return self.coordinator.execute(
            "define_classification_value", principal_id, realm_slug, Role.ADMIN, work, validate
        )

    def update_classification_value(
        self, realm_slug: str, principal_id: str, value_id: str, payload: Any
    ) -> WriteResult:
        validate = _translations_validator(
            ClassificationValueUpdate, payload, lambda request: request.translations
        )

        def work(ctx: WriteContext, request: ClassificationValueUpdate) -> str:
            ctx.classifications.update_value(
                ctx.realm_id, value_id, request.model_dump(exclude_unset=True)
            )
            return value_id

        return self.coordinator.execute(
            "update_classification_value", principal_id, realm_slug, Role.ADMIN, work, validate
        )

    def delete_classification_value(
        self, realm_slug: str, principal_id: str, value_id: str
    ) -> WriteResult:
        def work(ctx: WriteContext, _payload: Any) -> str:
            ctx.classifications.delete_value(ctx.realm_id, value_id)
            return value_id

        return self.coordinator.execute(
            "delete_classification_value", principal_id, realm_slug, Role.ADMIN, work
        )

    def list_classification_types(
        self, realm_slug: str, principal_id: str, entity_kind: Optional[EntityKind] = None
    ) -> ReadResult:
        def fetch(ctx: WriteContext) -> List[ClassificationTypeRead]:
            types = ctx.classifications.list_types(
                ctx.realm_id, entity_kind, scope_predicate=ctx.scope.realm_predicate
            )
            return [ClassificationTypeRead.from_model(t) for t in types]

        return self.coordinator.read(
            "list_classification_types", principal_id, realm_slug, fetch
        )

    def list_classification_values(
        self, realm_slug: str, principal_id: str, type_id: str
    ) -> ReadResult:
        def fetch(ctx: WriteContext) -> List[ClassificationValueRead]:
            values = ctx.classifications.list_values(ctx.realm_id, type_id)
            return [ClassificationValueRead.from_model(v) for v in values]

        return self.coordinator.read(
            "list_classification_values", principal_id, realm_slug, fetch
        )

    # ------------------------------------------------------------------ assignments

    def assign_classification(
        self, realm_slug: str, principal_id: str, payload: Any
    ) -> WriteResult:
        def work(ctx: WriteContext, request: AssignmentRequest) -> str:
            return ctx.classifications.assign(
                ctx.realm_id,
                request.entity_kind,
                request.entity_id,
                request.classification_value_id,
            )

        return self.coordinator.execute(
            "assign_classification",
            principal_id,
            realm_slug,
            Role.OPERATOR,
            work,
            lambda ctx: parse_payload(AssignmentRequest, payload),
        )

    def unassign_classification(
        self, realm_slug: str, principal_id: str, payload: Any
    ) -> WriteResult:
        def work(ctx: WriteContext, request: AssignmentRequest) -> Optional[str]:
            ctx.classifications.unassign(
                ctx.realm_id,
                request.entity_kind,
                request.entity_id,
                request.classification_value_id,
            )
            return None

        return self.coordinator.execute(
            "unassign_classification",
            principal_id,
            realm_slug,
            Role.OPERATOR,
            work,
            lambda ctx: parse_payload(AssignmentRequest, payload),
        )

    def list_assignments(
        self,
        realm_slug: str,
        principal_id: str,
        entity_id: str,
        kind: Optional[EntityKind] = None,
    ) -> ReadResult:
        def fetch(ctx: WriteContext) -> List[AssignmentRead]:
            entity_kind, entity = ctx.entities.locate(ctx.realm_id, entity_id, kind)
            rows = ctx.classifications.list_assignments(
                ctx.realm_id, entity_kind, entity.id, scope_predicate=ctx.scope.realm_predicate
            )
            return [AssignmentRead.from_model(row) for row in rows]

        return self.coordinator.read("list_assignments", principal_id, realm_slug, fetch)

    # ------------------------------------------------------------------ language points

    def add_language_point(self, realm_slug: str, principal_id: str, payload: Any) -> WriteResult:
        def work(ctx: WriteContext, request: LanguagePointCreate) -> str:
            return ctx.points.add_point(ctx.realm_id, request, created_by=principal_id)

        return self.coordinator.execute(
            "add_language_point",
            principal_id,
            realm_slug,
            Role.OPERATOR,
            work,
            lambda ctx: parse_payload(LanguagePointCreate, payload),
        )

    def delete_language_point(
        self, realm_slug: str, principal_id: str, point_id: str
    ) -> WriteResult:
        def work(ctx: WriteContext, _payload: Any) -> str:
            ctx.points.delete_point(ctx.realm_id, point_id)
            return point_id

        return self.coordinator.execute(
            "delete_language_point", principal_id, realm_slug, Role.OPERATOR, work
        )

    def list_language_points(
        self, realm_slug: str, principal_id: str, language_id: Optional[str] = None
    ) -> ReadResult:
        def fetch(ctx: WriteContext) -> List[LanguagePointRead]:
            points = ctx.points.list_points(
                ctx.realm_id, language_id, scope_predicate=ctx.scope.realm_predicate
            )
            return [LanguagePointRead.model_validate(point) for point in points]

        return self.coordinator.read("list_language_points", principal_id, realm_slug, fetch)

    # ------------------------------------------------------------------ realms and grants

    def create_realm(self, principal_id: str, payload: Any) -> WriteResult:
        def work(ctx: WriteContext, request: RealmCreate) -> str:
            return ctx.realms.create_realm(request)

        return self.coordinator.execute(
            "create_realm",
            principal_id,
            None,
            Role.SUPERUSER,
            work,
            lambda ctx: parse_payload(RealmCreate, payload),
        )

    def archive_realm(self, realm_slug: str, principal_id: str) -> WriteResult:
        def work(ctx: WriteContext, _payload: Any) -> str:
            ctx.realms.archive_realm(ctx.realm_id)
            return ctx.realm_id

        return self.coordinator.execute(
            "archive_realm", principal_id, realm_slug, Role.SUPERUSER, work
        )

    def set_realm_locales(self, realm_slug: str, principal_id: str, payload: Any) -> WriteResult:
        """Restrict the locales the realm's translations may be written in."""

        def work(ctx: WriteContext, request: RealmLocalesUpdate) -> str:
            ctx.locales.set_realm_locales(ctx.realm_id, request.locale_codes)
            return ctx.realm_id

        return self.coordinator.execute(
            "set_realm_locales",
            principal_id,
            realm_slug,
            Role.SUPERUSER,
            work,
            lambda ctx: parse_payload(RealmLocalesUpdate, payload),
        )

    def list_realm_locales(self, realm_slug: str, principal_id: str) -> ReadResult:
        def fetch(ctx: WriteContext) -> List[str]:
            return ctx.locales.realm_locale_codes(ctx.realm_id)

        return self.coordinator.read("list_realm_locales", principal_id, realm_slug, fetch)

    def grant_role(self, realm_slug: str, principal_id: str, payload: Any) -> WriteResult:
        def work(ctx: WriteContext, request: RoleGrantCreate) -> str:
            grant = ctx.authorization.grant_role(
                principal_id, ctx.realm_id, request.principal_id, request.role
            )
            return grant.principal_id

        return self.coordinator.execute(
            "grant_role",
            principal_id,
            realm_slug,
            Role.SUPERUSER,
            work,
            lambda ctx: parse_payload(RoleGrantCreate, payload),
        )

    def revoke_role(
        self, realm_slug: str, principal_id: str, target_principal_id: str
    ) -> WriteResult:
        def work(ctx: WriteContext, _payload: Any) -> str:
            ctx.authorization.revoke_role(principal_id, ctx.realm_id, target_principal_id)
            return target_principal_id

        return self.coordinator.execute(
            "revoke_role", principal_id, realm_slug, Role.SUPERUSER, work
        )

    def get_role(
        self,
        realm_slug: str,
        principal_id: str,
        target_principal_id: Optional[str] = None,
    ) -> ReadResult:
        """
        Role of ``target_principal_id`` (default: the caller) in the realm, for
        display. Looking up someone else's role needs admin.
        """
        target = target_principal_id or principal_id
        required = None if target == principal_id else Role.ADMIN

        def fetch(ctx: WriteContext) -> Optional[str]:
            return ctx.authorization.get_role(target, ctx.realm_id)

        return self.coordinator.read(
            "get_role", principal_id, realm_slug, fetch, required_role=required
        )

    def list_grants(self, principal_id: str, realm_slug: Optional[str] = None) -> ReadResult:
        """Grants the caller may see: their own, or every grant for superusers."""

        def fetch(ctx: WriteContext) -> List[RoleGrantRead]:
            grants = ctx.authorization.list_grants(principal_id, ctx.realm_id)
            return [RoleGrantRead.model_validate(grant) for grant in grants]

        return self.coordinator.read(
            "list_grants", principal_id, realm_slug, fetch, required_role=None
        )

    def list_realms(self, principal_id: str) -> ReadResult:
        """Realms the caller holds any grant in; every realm for superusers."""

        def fetch(ctx: WriteContext) -> List[RealmRead]:
            realms = ctx.realms.list_realms(scope_predicate=ctx.scope.realm_predicate)
            return [RealmRead.model_validate(realm) for realm in realms]

        return self.coordinator.read("list_realms", principal_id, None, fetch, required_role=None)
