"""Tests for LanguagePointService."""

import pytest

from realm_cms_core.db import LanguagePoint
from realm_cms_core.exceptions import ErrorCode, RepositoryError, ValidationError
from realm_cms_core.services import LanguagePointService
from tests.fixtures.factories import (
    DistrictFactory,
    LanguageFactory,
    LanguagePointFactory,
    NeighborhoodFactory,
    RealmFactory,
)


@pytest.fixture
def point_service(db_session):
    return LanguagePointService(session=db_session)


@pytest.fixture
def realm(db_session):
    return RealmFactory.create()


@pytest.fixture
def language(realm):
    return LanguageFactory.create(realm=realm)


def test_add_point(point_service, realm, language, db_session):
    neighborhood = NeighborhoodFactory.create(district=DistrictFactory.create(realm=realm))

    point_id = point_service.add_point(
        realm.id,
        {
            "language_id": language.id,
            "neighborhood_id": neighborhood.id,
            "latitude": 52.3676,
            "longitude": 4.9041,
            "community_name": "<i>De Pijp</i>",
        },
        created_by="principal-1",
    )
    db_session.commit()

    point = db_session.get(LanguagePoint, point_id)
    assert point.realm_id == realm.id
    assert point.neighborhood_id == neighborhood.id
    assert point.community_name == "iDe Pijp/i"
    assert point.created_by == "principal-1"


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"latitude": 91}, "latitude"),
        ({"longitude": -180.5}, "longitude"),
        ({"elevation": 3}, "elevation"),
    ],
)
def test_invalid_coordinates(point_service, language, overrides, field):
    payload = {"language_id": language.id, "latitude": 52.0, "longitude": 4.0, **overrides}

    with pytest.raises(ValidationError) as exc_info:
        point_service.add_point(language.realm_id, payload)

    assert exc_info.value.field == field


def test_language_of_other_realm_is_rejected(point_service, language):
    other = RealmFactory.create()

    with pytest.raises(ValidationError) as exc_info:
        point_service.add_point(
            other.id, {"language_id": language.id, "latitude": 0, "longitude": 0}
        )

    assert exc_info.value.field == "language_id"


def test_neighborhood_of_other_realm_is_rejected(point_service, language):
    foreign = NeighborhoodFactory.create()

    with pytest.raises(ValidationError) as exc_info:
        point_service.add_point(
            language.realm_id,
            {
                "language_id": language.id,
                "neighborhood_id": foreign.id,
                "latitude": 0,
                "longitude": 0,
            },
        )

    assert exc_info.value.field == "neighborhood_id"


def test_list_and_delete_points(point_service, language, db_session):
    first_id = LanguagePointFactory.create(language=language).id
    LanguagePointFactory.create(language=language)
    LanguagePointFactory.create()

    assert len(point_service.list_points(language.realm_id)) == 2
    assert len(point_service.list_points(language.realm_id, language_id=language.id)) == 2

    point_service.delete_point(language.realm_id, first_id)
    db_session.commit()

    assert first_id not in [p.id for p in point_service.list_points(language.realm_id)]
    assert db_session.get(LanguagePoint, first_id) is None


def test_point_of_other_realm_is_not_found(point_service):
    point = LanguagePointFactory.create()
    other = RealmFactory.create()

    with pytest.raises(RepositoryError) as exc_info:
        point_service.delete_point(other.id, point.id)

    assert exc_info.value.error_code == ErrorCode.NOT_FOUND
