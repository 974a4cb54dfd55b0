"""Tests for RealmService lifecycle operations."""

import pytest

from realm_cms_core.authorization.predicates import realm_scope_predicate
from realm_cms_core.db import Realm
from realm_cms_core.enums import RealmStatus
from realm_cms_core.exceptions import (
    ErrorCode,
    RepositoryError,
    UniquenessConflict,
    ValidationError,
)
from tests.fixtures.factories import RealmFactory


class TestCreateRealm:
    def test_create_with_derived_slug(self, db_session, realm_service):
        realm_id = realm_service.create_realm(
            {"name": "Den Haag", "default_locale": "nl", "map_settings": {"zoom": 11}}
        )

        realm = db_session.get(Realm, realm_id)
        assert realm.slug == "den-haag"
        assert realm.status == RealmStatus.DRAFT.value
        assert realm.map_settings == {"zoom": 11}

    def test_unknown_default_locale(self, realm_service):
        with pytest.raises(ValidationError) as exc_info:
            realm_service.create_realm({"name": "Berlin", "default_locale": "de"})

        assert exc_info.value.field == "default_locale.de"

    def test_duplicate_slug(self, realm_service):
        RealmFactory.create(slug="utrecht")

        with pytest.raises(UniquenessConflict) as exc_info:
            realm_service.create_realm({"name": "Utrecht"})

        assert exc_info.value.field == "slug"

    def test_name_required(self, realm_service):
        with pytest.raises(ValidationError) as exc_info:
            realm_service.create_realm({"slug": "nameless"})

        assert exc_info.value.field == "name"


class TestRealmLookup:
    def test_require_by_slug(self, realm_service):
        realm = RealmFactory.create(slug="haarlem")

        assert realm_service.require_by_slug("haarlem").id == realm.id
        assert realm_service.get_by_slug("nowhere") is None

        with pytest.raises(RepositoryError) as exc_info:
            realm_service.require_by_slug("nowhere")
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_list_realms_with_scope(self, realm_service):
        first = RealmFactory.create(slug="a-realm")
        RealmFactory.create(slug="b-realm")

        scoped = realm_service.list_realms(
            scope_predicate=lambda column: realm_scope_predicate(column, {first.id})
        )

        assert [r.slug for r in scoped] == ["a-realm"]
        assert [r.slug for r in realm_service.list_realms()] == ["a-realm", "b-realm"]


class TestArchiveRealm:
    def test_archive(self, db_session, realm_service):
        realm = RealmFactory.create()

        realm_service.archive_realm(realm.id)

        assert db_session.get(Realm, realm.id).status == RealmStatus.ARCHIVED.value

    def test_archive_unknown_realm(self, realm_service):
        with pytest.raises(RepositoryError) as exc_info:
            realm_service.archive_realm("missing")

        assert exc_info.value.error_code == ErrorCode.NOT_FOUND
