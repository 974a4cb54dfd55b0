"""Tests for database configuration and the global manager."""

import os
from unittest.mock import patch

import pytest
from sqlalchemy import inspect, text

from realm_cms_core.config import AppConfig
from realm_cms_core.db import db_config
from realm_cms_core.db.db_config import (
    DatabaseConfig,
    DatabaseManager,
    get_db_manager,
    set_db_manager,
)
from realm_cms_core.exceptions import ErrorCode, ServiceError, ValidationError


class TestDatabaseConfig:
    def test_sqlite_connection_string(self):
        config = DatabaseConfig(db_type="sqlite", database="/tmp/cms.db")

        assert config.get_connection_string() == "sqlite:////tmp/cms.db"
        assert DatabaseConfig(db_type="sqlite").get_connection_string() == "sqlite:///:memory:"

    def test_postgres_connection_string(self):
        config = DatabaseConfig(
            database="cms", host="db", username="cms", password="secret", port="6543"
        )

        assert config.get_connection_string() == "postgresql://cms:secret@db:6543/cms"

    def test_postgres_reports_missing_settings(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseConfig(database="cms", host="db").get_connection_string()

        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED
        assert exc_info.value.context["missing"] == ["username", "password"]

    def test_unsupported_type(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseConfig(db_type="oracle", database="cms").get_connection_string()

        assert exc_info.value.field == "db_type"

    def test_explicit_url_wins(self):
        config = DatabaseConfig(url="sqlite:///./other.db", db_type="postgres")

        assert config.get_connection_string() == "sqlite:///./other.db"

    def test_password_is_masked(self):
        config = DatabaseConfig(url="postgresql://cms:secret@db:5432/cms")

        assert "secret" not in config.masked_url()
        assert "secret" not in repr(config)
        assert "secret" not in repr(DatabaseConfig(database="cms", password="secret"))

    def test_from_app_config(self):
        env = {"DATABASE_URL": "sqlite:///./cities.db", "APP_ENV": "production"}
        with patch.dict(os.environ, env):
            config = DatabaseConfig.from_app_config(AppConfig())

        assert config.get_connection_string() == "sqlite:///./cities.db"
        assert config.pool_size == 5
        assert config.development_mode is False


class TestDatabaseManager:
    @pytest.fixture
    def manager(self):
        manager = DatabaseManager(DatabaseConfig(db_type="sqlite", database=":memory:"))
        yield manager
        manager.close()

    def test_sqlite_enforces_foreign_keys(self, manager):
        with manager.engine.connect() as connection:
            assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_create_tables(self, manager):
        manager.create_tables()

        tables = set(inspect(manager.engine).get_table_names())
        assert {"realm", "locale", "role_grant", "language", "classification_assignment"} <= tables

    def test_drop_tables_outside_development(self, manager):
        with pytest.raises(ServiceError) as exc_info:
            manager.drop_tables()

        assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR

    def test_drop_tables_in_development(self):
        manager = DatabaseManager(
            DatabaseConfig(db_type="sqlite", database=":memory:", development_mode=True)
        )
        manager.create_tables()

        manager.drop_tables()

        assert inspect(manager.engine).get_table_names() == []
        manager.close()


class TestGlobalManager:
    def test_uninitialized_manager_raises(self, monkeypatch):
        monkeypatch.setattr(db_config, "_db_manager", None)

        with pytest.raises(ServiceError):
            get_db_manager()

    def test_set_db_manager(self, monkeypatch, db_manager):
        monkeypatch.setattr(db_config, "_db_manager", None)

        set_db_manager(db_manager)

        assert get_db_manager() is db_manager
