"""
Translatable entity store.

Creates, updates, reads and deletes realm-owned content entities together
with their per-locale translation rows. Every method runs inside the
caller's transaction; nothing here commits.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError

from ..context.operation_context import operation
from ..db.db_classification_models import ClassificationAssignment
from ..db.db_content_models import (
    CONTENT_MODELS,
    DEPENDENT_REFERENCES,
    REALM_REFERENCES,
    TRANSLATION_MODELS,
    RealmOwnedMixin,
)
from ..enums import EntityKind, PublicationStatus
from ..exceptions import (
    ReferentialBlock,
    ValidationError,
    duplicate,
    not_found,
    validation_failed,
)
from ..schemas.entity_schemas import (
    CREATE_FIELD_SCHEMAS,
    EntityFilter,
    EntityRead,
    parse_core_fields,
)
from ..schemas.mixins import TranslationInput, parse_payload, translations_to_read
from .base_service import SessionManagedService, classify_integrity_error
from .locale_service import LocaleService
from .translation_writer import TranslationWriter

TranslationPayload = Mapping[str, Union[TranslationInput, Mapping[str, Any]]]


def parse_translations(translations: Optional[TranslationPayload]) -> Dict[str, TranslationInput]:
    """Validate a locale -> {name, description} mapping."""
    parsed: Dict[str, TranslationInput] = {}
    for code, payload in (translations or {}).items():
        parsed[code] = parse_payload(TranslationInput, payload, prefix=f"translations.{code}")
    return parsed


class TranslatableEntityService(SessionManagedService):
    """Service for content entities and their translation sets."""

    def __init__(self, session=None, logger=None):
        super().__init__(session=session, logger=logger)
        self.locale_service = LocaleService(session=self.session, logger=self.logger)
        self.writer = TranslationWriter(self.session, self.locale_service)

    # ------------------------------------------------------------------ lookups

    @staticmethod
    def model_for(kind: EntityKind) -> Type[RealmOwnedMixin]:
        return CONTENT_MODELS[EntityKind(kind)]

    def get_entity(self, realm_id: str, kind: EntityKind, entity_id: str) -> RealmOwnedMixin:
        """Load an entity of ``kind`` in ``realm_id``. Other realms' rows are not found."""
        model = self.model_for(kind)
        entity = self.session.execute(
            select(model).where(model.id == entity_id, model.realm_id == realm_id)
        ).scalar_one_or_none()
        if entity is None:
            raise not_found(model.__name__, entity_id=entity_id)
        return entity

    def locate(
        self, realm_id: str, entity_id: str, kind: Optional[EntityKind] = None
    ) -> Tuple[EntityKind, RealmOwnedMixin]:
        """Find an entity by id, across all kinds when ``kind`` is not given."""
        if kind is not None:
            return EntityKind(kind), self.get_entity(realm_id, kind, entity_id)
        for candidate, model in CONTENT_MODELS.items():
            entity = self.session.execute(
                select(model).where(model.id == entity_id, model.realm_id == realm_id)
            ).scalar_one_or_none()
            if entity is not None:
                return candidate, entity
        raise not_found("Entity", entity_id=entity_id)

    def _slug_taken(
        self, model: Type[RealmOwnedMixin], realm_id: str, slug: str, exclude_id: Optional[str] = None
    ) -> bool:
        query = select(model.id).where(model.realm_id == realm_id, model.slug == slug)
        if exclude_id:
            query = query.where(model.id != exclude_id)
        return self.session.execute(select(query.exists())).scalar()

    def _check_realm_references(
        self, realm_id: str, kind: EntityKind, fields: Dict[str, Any]
    ) -> None:
        """Foreign keys on the core row must point at rows of the same realm."""
        for column, target_kind in REALM_REFERENCES[kind].items():
            target_id = fields.get(column)
            if not target_id:
                continue
            target = self.model_for(target_kind)
            found = self.session.execute(
                select(exists().where(target.id == target_id, target.realm_id == realm_id))
            ).scalar()
            if not found:
                raise ValidationError(
                    f"Unknown {target_kind.value} for {column}",
                    field=f"fields.{column}",
                    value=target_id,
                )

    # ------------------------------------------------------------------ writes

    @operation()
    def create_with_translations(
        self,
        realm_id: str,
        kind: EntityKind,
        core_fields: Mapping[str, Any],
        translations: Optional[TranslationPayload] = None,
    ) -> str:
        """
        Insert the core row, then one translation row per locale with a name.

        A slug conflict aborts before any translation is written; the caller's
        transaction rollback removes the core row if a later step fails.
        """
        kind = EntityKind(kind)
        model = self.model_for(kind)
        fields = parse_core_fields(kind, dict(core_fields))
        parsed = parse_translations(translations)

        self._check_realm_references(realm_id, kind, fields)
        if self._slug_taken(model, realm_id, fields["slug"]):
            raise duplicate(model.__name__, field="slug", slug=fields["slug"])

        entity = model(realm_id=realm_id, status=PublicationStatus.DRAFT.value, **fields)
        self.session.add(entity)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise classify_integrity_error(
                e, model.__name__, "create_with_translations", field="slug"
            ) from e

        written = self.writer.add(entity, TRANSLATION_MODELS[kind], parsed, realm_id=realm_id)
        self.logger.info(
            f"Created {kind.value}",
            extra={"entity_id": entity.id, "realm_id": realm_id, "translation_count": written},
        )
        return entity.id

    @operation()
    def update_with_translations(
        self,
        realm_id: str,
        kind: EntityKind,
        entity_id: str,
        core_fields: Optional[Mapping[str, Any]] = None,
        translations: Optional[TranslationPayload] = None,
    ) -> None:
        """
        Update supplied core fields. A supplied translation set replaces the
        stored one in full; ``None`` leaves the stored set alone.
        """
        kind = EntityKind(kind)
        model = self.model_for(kind)
        fields = parse_core_fields(kind, dict(core_fields or {}), for_update=True)
        parsed = parse_translations(translations) if translations is not None else None

        entity = self.get_entity(realm_id, kind, entity_id)
        self._check_realm_references(realm_id, kind, fields)

        new_slug = fields.get("slug")
        if new_slug is None and "slug" in fields:
            raise validation_failed("fields.slug", None, "slug cannot be cleared")
        if new_slug and new_slug != entity.slug and self._slug_taken(
            model, realm_id, new_slug, exclude_id=entity.id
        ):
            raise duplicate(model.__name__, field="slug", slug=new_slug)

        for key, value in fields.items():
            setattr(entity, key, value)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise classify_integrity_error(
                e, model.__name__, "update_with_translations", field="slug"
            ) from e

        written = None
        if parsed is not None:
            written = self.writer.replace(
                entity, TRANSLATION_MODELS[kind], parsed, realm_id=realm_id
            )
        self.logger.info(
            f"Updated {kind.value}",
            extra={"entity_id": entity_id, "realm_id": realm_id, "translation_count": written},
        )

    def count_dependents(self, kind: EntityKind, entity_id: str) -> int:
        """Rows that reference the entity and would block its deletion."""
        total = 0
        for referencing_model, column in DEPENDENT_REFERENCES[EntityKind(kind)]:
            total += self.session.execute(
                select(func.count())
                .select_from(referencing_model)
                .where(getattr(referencing_model, column) == entity_id)
            ).scalar_one()
        total += self.session.execute(
            select(func.count())
            .select_from(ClassificationAssignment)
            .where(
                ClassificationAssignment.entity_kind == EntityKind(kind).value,
                ClassificationAssignment.entity_id == entity_id,
            )
        ).scalar_one()
        return total

    @operation()
    def delete(self, realm_id: str, kind: EntityKind, entity_id: str) -> None:
        """Delete an entity and its translations; dependents block the delete."""
        kind = EntityKind(kind)
        entity = self.get_entity(realm_id, kind, entity_id)

        dependents = self.count_dependents(kind, entity_id)
        if dependents:
            raise ReferentialBlock(kind.value, dependents, entity_id=entity_id)

        self.session.delete(entity)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise classify_integrity_error(e, kind.value, "delete") from e
        self.logger.info(f"Deleted {kind.value}", extra={"entity_id": entity_id})

    @operation()
    def set_status(
        self, realm_id: str, kind: EntityKind, entity_id: str, status: PublicationStatus
    ) -> None:
        entity = self.get_entity(realm_id, kind, entity_id)
        entity.status = PublicationStatus(status).value
        self.session.flush()

    # ------------------------------------------------------------------ reads

    def resolve_display_name(
        self,
        realm_id: str,
        entity_id: str,
        requested_locale: Optional[str],
        kind: Optional[EntityKind] = None,
    ) -> str:
        _, entity = self.locate(realm_id, entity_id, kind)
        return self.display_name_for(entity, requested_locale)

    def display_name_for(self, entity: RealmOwnedMixin, requested_locale: Optional[str]) -> str:
        """
        Requested locale, then the realm default locale, then the configured
        default, then the locale-invariant name, then the untranslated sentinel.
        """
        names = {row.locale_code: row.name for row in entity.translations}
        locale_config = self.config.locales

        realm_default = self._get_realm(entity.realm_id).default_locale
        for code in (requested_locale, realm_default, locale_config.default_locale):
            if code and names.get(code):
                return names[code]

        invariant = entity.invariant_name()
        if invariant:
            return invariant
        return locale_config.untranslated_sentinel

    def classification_value_ids(self, kind: EntityKind, entity_id: str) -> List[str]:
        return list(
            self.session.execute(
                select(ClassificationAssignment.classification_value_id)
                .where(
                    ClassificationAssignment.entity_kind == EntityKind(kind).value,
                    ClassificationAssignment.entity_id == entity_id,
                )
                .order_by(ClassificationAssignment.classification_value_id)
            ).scalars()
        )

    def to_read(
        self, kind: EntityKind, entity: RealmOwnedMixin, requested_locale: Optional[str] = None
    ) -> EntityRead:
        kind = EntityKind(kind)
        core_columns = CREATE_FIELD_SCHEMAS[kind].model_fields
        return EntityRead(
            id=entity.id,
            realm_id=entity.realm_id,
            kind=kind,
            slug=entity.slug,
            status=entity.status,
            display_name=self.display_name_for(entity, requested_locale),
            fields={name: getattr(entity, name) for name in core_columns if name != "slug"},
            translations=translations_to_read(entity.translations),
            classification_value_ids=self.classification_value_ids(kind, entity.id),
        )

    def list_entities(self, realm_id: str, filters: EntityFilter, scope_predicate=None) -> List[Any]:
        """
        Entities of ``filters.kind`` in ``realm_id``, ordered by slug.

        ``scope_predicate`` is the caller's resolved row-visibility predicate,
        built from the model's ``realm_id`` column.
        """
        kind = EntityKind(filters.kind)
        model = self.model_for(kind)
        translation_model = TRANSLATION_MODELS[kind]

        query = select(model).where(model.realm_id == realm_id)
        if scope_predicate is not None:
            query = query.where(scope_predicate(model.realm_id))
        if filters.slug:
            query = query.where(model.slug == filters.slug)
        if filters.status:
            query = query.where(model.status == PublicationStatus(filters.status).value)
        if filters.classification_value_id:
            query = query.where(
                exists().where(
                    ClassificationAssignment.entity_kind == kind.value,
                    ClassificationAssignment.entity_id == model.id,
                    ClassificationAssignment.classification_value_id
                    == filters.classification_value_id,
                )
            )
        if filters.name_contains:
            name_match = [
                translation_model.entity_id == model.id,
                translation_model.name.ilike(f"%{filters.name_contains}%"),
            ]
            if filters.locale:
                name_match.append(translation_model.locale_code == filters.locale)
            query = query.where(exists().where(*name_match))

        query = query.order_by(model.slug).limit(filters.limit).offset(filters.offset)
        return list(self.session.execute(query).scalars())
