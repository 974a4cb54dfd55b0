"""
Unit test conftest.py - service fixtures bound to the test session.
"""

import pytest

from realm_cms_core.services import (
    AuthorizationService,
    ClassificationService,
    LocaleService,
    RealmService,
    TranslatableEntityService,
)

# ==================== SERVICE FIXTURES ====================


@pytest.fixture(scope="function")
def entity_service(db_session):
    """Entity store with test session."""
    return TranslatableEntityService(session=db_session)


@pytest.fixture(scope="function")
def classification_service(db_session):
    """Classification engine with test session."""
    return ClassificationService(session=db_session)


@pytest.fixture(scope="function")
def authorization_service(db_session):
    return AuthorizationService(session=db_session)


@pytest.fixture(scope="function")
def locale_service(db_session):
    return LocaleService(session=db_session)


@pytest.fixture(scope="function")
def realm_service(db_session):
    return RealmService(session=db_session)
