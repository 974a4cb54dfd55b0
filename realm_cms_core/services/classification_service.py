"""
Per-realm classification engine.

Manages classification types and values (each with its own translation set)
and the assignment of values to content entities. Cardinality is enforced on
assign; required types are only checked by ``validate_completeness``, which
the write coordinator runs before publishing.
"""

from typing import Any, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError

from ..context.operation_context import operation
from ..db.db_classification_models import (
    ClassificationAssignment,
    ClassificationType,
    ClassificationTypeTranslation,
    ClassificationValue,
    ClassificationValueTranslation,
)
from ..enums import EntityKind
from ..exceptions import (
    ReferentialBlock,
    ValidationError,
    duplicate,
    not_found,
)
from ..schemas.classification_schemas import (
    ClassificationTypeCreate,
    ClassificationTypeUpdate,
    ClassificationValueCreate,
    ClassificationValueUpdate,
)
from ..schemas.mixins import parse_payload
from .base_service import SessionManagedService, classify_integrity_error
from .entity_service import TranslatableEntityService
from .locale_service import LocaleService
from .translation_writer import TranslationWriter


class ClassificationService(SessionManagedService):
    """Classification types, values and assignments for one realm at a time."""

    def __init__(self, session=None, logger=None):
        super().__init__(session=session, logger=logger)
        self.locale_service = LocaleService(session=self.session, logger=self.logger)
        self.writer = TranslationWriter(self.session, self.locale_service)
        self.entities = TranslatableEntityService(session=self.session, logger=self.logger)

    # ------------------------------------------------------------------ lookups

    def get_type(self, realm_id: str, type_id: str) -> ClassificationType:
        found = self.session.execute(
            select(ClassificationType).where(
                ClassificationType.id == type_id, ClassificationType.realm_id == realm_id
            )
        ).scalar_one_or_none()
        if found is None:
            raise not_found("ClassificationType", type_id=type_id)
        return found

    def get_value(self, realm_id: str, value_id: str) -> ClassificationValue:
        """A value, reachable only through a type owned by ``realm_id``."""
        found = self.session.execute(
            select(ClassificationValue)
            .join(ClassificationType)
            .where(ClassificationValue.id == value_id, ClassificationType.realm_id == realm_id)
        ).scalar_one_or_none()
        if found is None:
            raise not_found("ClassificationValue", value_id=value_id)
        return found

    def _type_slug_taken(self, realm_id: str, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = select(ClassificationType.id).where(
            ClassificationType.realm_id == realm_id, ClassificationType.slug == slug
        )
        if exclude_id:
            query = query.where(ClassificationType.id != exclude_id)
        return self.session.execute(select(query.exists())).scalar()

    def _value_slug_taken(self, type_id: str, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = select(ClassificationValue.id).where(
            ClassificationValue.classification_type_id == type_id,
            ClassificationValue.slug == slug,
        )
        if exclude_id:
            query = query.where(ClassificationValue.id != exclude_id)
        return self.session.execute(select(query.exists())).scalar()

    def _flush(
        self, resource_type: str, operation_name: str, field: Optional[str] = None
    ) -> None:
        try:
            self.session.flush()
        except IntegrityError as e:
            raise classify_integrity_error(e, resource_type, operation_name, field) from e

    def count_type_assignments(self, type_id: str) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(ClassificationAssignment)
            .join(ClassificationValue)
            .where(ClassificationValue.classification_type_id == type_id)
        ).scalar_one()

    def count_value_assignments(self, value_id: str) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(ClassificationAssignment)
            .where(ClassificationAssignment.classification_value_id == value_id)
        ).scalar_one()

    # ------------------------------------------------------------------ types

    @operation()
    def define_type(self, realm_id: str, attributes: Any) -> str:
        """Create a classification type and its translations. Returns the type id."""
        data = parse_payload(ClassificationTypeCreate, attributes)
        self._get_realm(realm_id)

        if self._type_slug_taken(realm_id, data.slug):
            raise duplicate("ClassificationType", field="slug", slug=data.slug)

        type_ = ClassificationType(
            realm_id=realm_id,
            slug=data.slug,
            entity_kind=data.entity_kind.value,
            required=data.required,
            allow_multiple=data.allow_multiple,
            used_for_filtering=data.used_for_filtering,
            used_for_rendering_style=data.used_for_rendering_style,
            display_order=data.display_order,
        )
        self.session.add(type_)
        self._flush("ClassificationType", "define_type", field="slug")

        self.writer.add(
            type_, ClassificationTypeTranslation, data.translations, realm_id=realm_id
        )
        self.logger.info(
            "Defined classification type",
            extra={"type_id": type_.id, "slug": data.slug, "realm_id": realm_id},
        )
        return type_.id

    @operation()
    def update_type(self, realm_id: str, type_id: str, attributes: Any) -> None:
        """
        Update a type's attributes; a supplied translation set replaces the old one.

        Switching ``allow_multiple`` off leaves existing assignments in place.
        """
        data = parse_payload(ClassificationTypeUpdate, attributes)
        type_ = self.get_type(realm_id, type_id)
        changes = data.model_dump(exclude_unset=True, exclude={"translations"})

        if changes.get("slug") and changes["slug"] != type_.slug:
            if self._type_slug_taken(realm_id, changes["slug"], exclude_id=type_id):
                raise duplicate("ClassificationType", field="slug", slug=changes["slug"])

        for key, value in changes.items():
            if value is None:
                raise ValidationError(f"{key} cannot be cleared", field=key)
            setattr(type_, key, value)
        self._flush("ClassificationType", "update_type", field="slug")

        if data.translations is not None:
            self.writer.replace(
                type_, ClassificationTypeTranslation, data.translations, realm_id=realm_id
            )

    @operation()
    def delete_type(self, realm_id: str, type_id: str) -> None:
        """Delete a type and its values; refused while any of its values is assigned."""
        type_ = self.get_type(realm_id, type_id)
        dependents = self.count_type_assignments(type_id)
        if dependents:
            raise ReferentialBlock("classification type", dependents, type_id=type_id)

        self.session.delete(type_)
        self._flush("classification type", "delete_type")

    def list_types(
        self, realm_id: str, entity_kind: Optional[EntityKind] = None, scope_predicate=None
    ) -> List[ClassificationType]:
        query = select(ClassificationType).where(ClassificationType.realm_id == realm_id)
        if scope_predicate is not None:
            query = query.where(scope_predicate(ClassificationType.realm_id))
        if entity_kind is not None:
            query = query.where(ClassificationType.entity_kind == EntityKind(entity_kind).value)
        query = query.order_by(ClassificationType.display_order, ClassificationType.slug)
        return list(self.session.execute(query).scalars())

    # ------------------------------------------------------------------ values

    @operation()
    def define_value(self, realm_id: str, type_id: str, attributes: Any) -> str:
        """Create a value under ``type_id``. Returns the value id."""
        data = parse_payload(ClassificationValueCreate, attributes)
        type_ = self.get_type(realm_id, type_id)

        if self._value_slug_taken(type_.id, data.slug):
            raise duplicate("ClassificationValue", field="slug", slug=data.slug)

        value = ClassificationValue(
            classification_type_id=type_.id,
            slug=data.slug,
            color=data.color.upper(),
            icon_reference=data.icon_reference,
            icon_scale=data.icon_scale,
            display_order=data.display_order,
        )
        self.session.add(value)
        self._flush("ClassificationValue", "define_value", field="slug")

        self.writer.add(
            value, ClassificationValueTranslation, data.translations, realm_id=realm_id
        )
        return value.id

    @operation()
    def update_value(self, realm_id: str, value_id: str, attributes: Any) -> None:
        data = parse_payload(ClassificationValueUpdate, attributes)
        value = self.get_value(realm_id, value_id)
        changes = data.model_dump(exclude_unset=True, exclude={"translations"})

        if changes.get("slug") and changes["slug"] != value.slug:
            if self._value_slug_taken(value.classification_type_id, changes["slug"], value_id):
                raise duplicate("ClassificationValue", field="slug", slug=changes["slug"])

        for key, new_value in changes.items():
            if new_value is None and key != "icon_reference":
                raise ValidationError(f"{key} cannot be cleared", field=key)
            if key == "color":
                new_value = new_value.upper()
            setattr(value, key, new_value)
        self._flush("ClassificationValue", "update_value", field="slug")

        if data.translations is not None:
            self.writer.replace(
                value, ClassificationValueTranslation, data.translations, realm_id=realm_id
            )

    @operation()
    def delete_value(self, realm_id: str, value_id: str) -> None:
        """Delete a value; refused while any assignment references it."""
        value = self.get_value(realm_id, value_id)
        dependents = self.count_value_assignments(value_id)
        if dependents:
            raise ReferentialBlock("classification value", dependents, value_id=value_id)

        self.session.delete(value)
        self._flush("classification value", "delete_value")

    def list_values(self, realm_id: str, type_id: str) -> List[ClassificationValue]:
        type_ = self.get_type(realm_id, type_id)
        return list(
            self.session.execute(
                select(ClassificationValue)
                .where(ClassificationValue.classification_type_id == type_.id)
                .order_by(ClassificationValue.display_order, ClassificationValue.slug)
            ).scalars()
        )

    # ------------------------------------------------------------------ assignments

    @operation()
    def assign(
        self,
        realm_id: str,
        entity_kind: EntityKind,
        entity_id: str,
        value_id: str,
    ) -> str:
        """
        Attach a value to an entity.

        For single-valued types any other value of the same type is removed
        first; re-assigning the held value is a no-op. For multi-valued types
        an exact duplicate is a uniqueness conflict.
        """
        entity_kind = EntityKind(entity_kind)
        self.entities.get_entity(realm_id, entity_kind, entity_id)
        value = self.get_value(realm_id, value_id)
        type_ = value.classification_type

        if type_.entity_kind != entity_kind.value:
            raise ValidationError(
                f"Classification type {type_.slug} does not apply to {entity_kind.value}",
                field="classification_value_id",
                type_id=type_.id,
            )

        existing = self._assignments_of_type(entity_kind, entity_id, type_.id)
        held = next((a for a in existing if a.classification_value_id == value_id), None)

        if type_.allow_multiple:
            if held is not None:
                raise duplicate(
                    "ClassificationAssignment",
                    field="classification_value_id",
                    entity_id=entity_id,
                    value_id=value_id,
                )
        else:
            if held is not None and len(existing) == 1:
                return held.id
            for assignment in existing:
                if assignment is not held:
                    self.session.delete(assignment)
            self._flush("ClassificationAssignment", "assign")
            if held is not None:
                return held.id

        assignment = ClassificationAssignment(
            realm_id=realm_id,
            entity_kind=entity_kind.value,
            entity_id=entity_id,
            classification_value_id=value_id,
        )
        self.session.add(assignment)
        self._flush("ClassificationAssignment", "assign", field="classification_value_id")
        return assignment.id

    def _assignments_of_type(
        self, entity_kind: EntityKind, entity_id: str, type_id: str
    ) -> List[ClassificationAssignment]:
        return list(
            self.session.execute(
                select(ClassificationAssignment)
                .join(ClassificationValue)
                .where(
                    ClassificationAssignment.entity_kind == EntityKind(entity_kind).value,
                    ClassificationAssignment.entity_id == entity_id,
                    ClassificationValue.classification_type_id == type_id,
                )
            ).scalars()
        )

    @operation()
    def unassign(
        self, realm_id: str, entity_kind: EntityKind, entity_id: str, value_id: str
    ) -> bool:
        """Remove an assignment. Idempotent; returns whether a row was removed."""
        assignment = self.session.execute(
            select(ClassificationAssignment).where(
                ClassificationAssignment.realm_id == realm_id,
                ClassificationAssignment.entity_kind == EntityKind(entity_kind).value,
                ClassificationAssignment.entity_id == entity_id,
                ClassificationAssignment.classification_value_id == value_id,
            )
        ).scalar_one_or_none()
        if assignment is None:
            return False
        self.session.delete(assignment)
        self._flush("ClassificationAssignment", "unassign")
        return True

    @operation()
    def replace_assignments(
        self, realm_id: str, entity_kind: EntityKind, entity_id: str, value_ids: List[str]
    ) -> List[str]:
        """
        Make ``value_ids`` the entity's complete assignment set.

        At most one value per single-valued type may be listed.
        """
        entity_kind = EntityKind(entity_kind)
        wanted = list(dict.fromkeys(value_ids))

        seen_types = set()
        for value_id in wanted:
            type_ = self.get_value(realm_id, value_id).classification_type
            if type_.allow_multiple:
                continue
            if type_.id in seen_types:
                raise ValidationError(
                    f"Classification type {type_.slug} allows a single value",
                    field="classification_value_ids",
                    type_id=type_.id,
                )
            seen_types.add(type_.id)

        current = self.list_assignments(realm_id, entity_kind, entity_id)
        kept = {}
        for assignment in current:
            if assignment.classification_value_id in wanted:
                kept[assignment.classification_value_id] = assignment.id
            else:
                self.session.delete(assignment)
        self._flush("ClassificationAssignment", "replace_assignments")
        return [
            kept.get(value_id) or self.assign(realm_id, entity_kind, entity_id, value_id)
            for value_id in wanted
        ]

    def list_assignments(
        self,
        realm_id: str,
        entity_kind: EntityKind,
        entity_id: str,
        scope_predicate=None,
    ) -> List[ClassificationAssignment]:
        query = select(ClassificationAssignment).where(
            ClassificationAssignment.realm_id == realm_id,
            ClassificationAssignment.entity_kind == EntityKind(entity_kind).value,
            ClassificationAssignment.entity_id == entity_id,
        )
        if scope_predicate is not None:
            query = query.where(scope_predicate(ClassificationAssignment.realm_id))
        return list(
            self.session.execute(
                query.order_by(ClassificationAssignment.created_at, ClassificationAssignment.id)
            ).scalars()
        )

    # ------------------------------------------------------------------ completeness

    def validate_completeness(
        self,
        realm_id: str,
        entity_kind: EntityKind,
        entity_id: str,
        type_scope: Optional[List[str]] = None,
    ) -> List[str]:
        """
        Ids of required types governing ``entity_kind`` for which the entity
        holds no assignment, in display order.

        ``type_scope`` narrows the check to the given type ids.
        """
        entity_kind = EntityKind(entity_kind)
        held = (
            select(ClassificationAssignment.id)
            .join(ClassificationValue)
            .where(
                and_(
                    ClassificationValue.classification_type_id == ClassificationType.id,
                    ClassificationAssignment.entity_kind == entity_kind.value,
                    ClassificationAssignment.entity_id == entity_id,
                )
            )
            .correlate(ClassificationType)
        )
        query = select(ClassificationType.id).where(
            ClassificationType.realm_id == realm_id,
            ClassificationType.entity_kind == entity_kind.value,
            ClassificationType.required.is_(True),
            ~held.exists(),
        )
        if type_scope is not None:
            query = query.where(ClassificationType.id.in_(list(type_scope)))
        query = query.order_by(ClassificationType.display_order, ClassificationType.slug)
        return list(self.session.execute(query).scalars())
