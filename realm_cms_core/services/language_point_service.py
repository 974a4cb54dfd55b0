"""
Language points: coordinates where a language is spoken in a realm.
"""

from typing import Any, List, Optional

from sqlalchemy import select

from ..context.operation_context import operation
from ..db.db_content_models import Language, LanguagePoint, Neighborhood
from ..exceptions import ValidationError, not_found
from ..schemas.geography_schemas import LanguagePointCreate
from ..schemas.mixins import parse_payload
from .base_service import SessionManagedService


class LanguagePointService(SessionManagedService):
    def _require_in_realm(self, model, realm_id: str, row_id: str, field: str) -> None:
        found = self.session.execute(
            select(model.id).where(model.id == row_id, model.realm_id == realm_id)
        ).scalar_one_or_none()
        if found is None:
            raise ValidationError(
                f"Unknown {model.__tablename__} for {field}", field=field, value=row_id
            )

    def get_point(self, realm_id: str, point_id: str) -> LanguagePoint:
        point = self.session.execute(
            select(LanguagePoint).where(
                LanguagePoint.id == point_id, LanguagePoint.realm_id == realm_id
            )
        ).scalar_one_or_none()
        if point is None:
            raise not_found("LanguagePoint", point_id=point_id)
        return point

    @operation()
    def add_point(self, realm_id: str, attributes: Any, created_by: Optional[str] = None) -> str:
        """
        Record a point for a language of ``realm_id``.

        The language and the optional neighborhood must belong to the same realm.
        """
        data = parse_payload(LanguagePointCreate, attributes)
        self._require_in_realm(Language, realm_id, data.language_id, "language_id")
        if data.neighborhood_id:
            self._require_in_realm(Neighborhood, realm_id, data.neighborhood_id, "neighborhood_id")

        point = LanguagePoint(realm_id=realm_id, created_by=created_by, **data.model_dump())
        self.session.add(point)
        self.session.flush()
        self.logger.info(
            "Added language point",
            extra={"point_id": point.id, "language_id": data.language_id, "realm_id": realm_id},
        )
        return point.id

    @operation()
    def delete_point(self, realm_id: str, point_id: str) -> None:
        self.session.delete(self.get_point(realm_id, point_id))
        self.session.flush()

    def list_points(
        self, realm_id: str, language_id: Optional[str] = None, scope_predicate=None
    ) -> List[LanguagePoint]:
        query = select(LanguagePoint).where(LanguagePoint.realm_id == realm_id)
        if language_id:
            query = query.where(LanguagePoint.language_id == language_id)
        if scope_predicate is not None:
            query = query.where(scope_predicate(LanguagePoint.realm_id))
        return list(
            self.session.execute(
                query.order_by(LanguagePoint.created_at, LanguagePoint.id)
            ).scalars()
        )
