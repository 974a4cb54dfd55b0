"""
Realm lifecycle service. Realms are archived, never deleted.
"""

from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..context.operation_context import operation
from ..db.db_realm_models import Realm
from ..enums import RealmStatus
from ..exceptions import duplicate, not_found
from ..schemas.mixins import parse_payload
from ..schemas.realm_schemas import RealmCreate
from .base_service import SessionManagedService, classify_integrity_error
from .locale_service import LocaleService


class RealmService(SessionManagedService):
    def get_by_slug(self, slug: str) -> Optional[Realm]:
        return self.session.execute(select(Realm).where(Realm.slug == slug)).scalar_one_or_none()

    def require_by_slug(self, slug: str) -> Realm:
        realm = self.get_by_slug(slug)
        if realm is None:
            raise not_found("Realm", slug=slug)
        return realm

    @operation()
    def create_realm(self, attributes: Any) -> str:
        """Create a realm. Its default locale, when given, must be active."""
        data = parse_payload(RealmCreate, attributes)
        if data.default_locale:
            LocaleService(session=self.session, logger=self.logger).require_active(
                [data.default_locale], field_prefix="default_locale"
            )
        if self.get_by_slug(data.slug) is not None:
            raise duplicate("Realm", field="slug", slug=data.slug)

        realm = Realm(
            slug=data.slug,
            name=data.name,
            status=data.status.value,
            default_locale=data.default_locale,
            map_settings=data.map_settings,
        )
        self.session.add(realm)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise classify_integrity_error(e, "Realm", "create_realm", field="slug") from e

        self.logger.info("Created realm", extra={"realm_id": realm.id, "slug": realm.slug})
        return realm.id

    @operation()
    def archive_realm(self, realm_id: str) -> None:
        realm = self._get_realm(realm_id)
        realm.status = RealmStatus.ARCHIVED.value
        self.session.flush()
        self.logger.info("Archived realm", extra={"realm_id": realm_id})

    def list_realms(self, scope_predicate=None) -> List[Realm]:
        query = select(Realm)
        if scope_predicate is not None:
            query = query.where(scope_predicate(Realm.id))
        return list(self.session.execute(query.order_by(Realm.slug)).scalars())
