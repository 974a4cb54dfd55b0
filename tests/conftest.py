"""
Test fixtures shared by unit and integration tests.

Tests run against a real SQLite in-memory database with foreign keys
enforced. Tables are created for every test and dropped afterwards.
"""

import pytest
from sqlalchemy.orm import Session

from realm_cms_core.config import reset_config
from realm_cms_core.context.tenant_context import TenantContext
from realm_cms_core.db import (
    DatabaseConfig,
    DatabaseManager,
    close_db,
    import_all_models,
)
from realm_cms_core.db.db_config import Base, initialize_db
from realm_cms_core.exceptions import clear_correlation_id
from realm_cms_core.services import LocaleService, RealmOperations
from tests.fixtures.factories import FixtureDataGenerator, configure_factories


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(
        db_type="sqlite",
        database=":memory:",
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    import_all_models()
    manager = initialize_db(db_config)
    yield manager
    close_db()


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created fresh and the configured locales (en, nl, fr) are
    seeded; everything is dropped again after the test.
    """
    session = db_manager.get_session()

    Base.metadata.create_all(db_manager.engine)
    LocaleService(session=session).ensure_locales()
    session.commit()
    configure_factories(session)

    yield session

    session.rollback()
    session.close()

    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture(autouse=True)
def clean_context():
    """Reset config, realm context and correlation id around each test."""
    reset_config()
    TenantContext.clear_current_tenant()
    TenantContext.set_current_principal(None)
    clear_correlation_id()
    yield
    TenantContext.clear_current_tenant()
    TenantContext.set_current_principal(None)
    clear_correlation_id()
    reset_config()


@pytest.fixture
def staff(db_session):
    """Realm ``amsterdam`` with an admin, an operator, an outsider and a superuser."""
    return FixtureDataGenerator.realm_with_staff("amsterdam")


@pytest.fixture
def realm(staff):
    return staff["realm"]


@pytest.fixture
def operations(db_manager, db_session) -> RealmOperations:
    """Façade bound to the test database."""
    return RealmOperations(session_factory=db_manager.session_factory)
