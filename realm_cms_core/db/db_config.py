"""
Engine and session management.

Connection settings come either from the application config (``DATABASE_URL``
and the pool settings next to it) or from an explicit ``DatabaseConfig``.
SQLite engines switch on foreign-key enforcement, without which the cascade
and restrict rules on content tables are silently ignored.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker

from ..config import AppConfig, get_config
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils import get_logger

# Base class for all SQLAlchemy models
Base: Any = declarative_base()

_POSTGRES_SETTINGS = ("host", "database", "username", "password")


class DatabaseConfig(BaseModel):
    """
    Connection settings for one database.

    Either ``url`` is given verbatim, or it is assembled from ``db_type`` and
    the individual settings.
    """

    url: Optional[str] = None
    db_type: str = "postgres"
    database: Optional[str] = None
    host: Optional[str] = None
    port: str = "5432"
    username: Optional[str] = None
    password: Optional[str] = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False
    development_mode: bool = False

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def from_app_config(cls, app_config: Optional[AppConfig] = None) -> "DatabaseConfig":
        """Build connection settings from the ``database`` section of the app config."""
        app_config = app_config or get_config()
        section = app_config.database
        return cls(
            url=section.connection_string,
            pool_size=section.pool_size,
            max_overflow=section.max_overflow,
            pool_timeout=section.pool_timeout,
            echo=section.echo,
            development_mode=app_config.environment == "development",
        )

    def get_connection_string(self) -> str:
        if self.url:
            return self.url

        kind = self.db_type.lower()
        if kind == "sqlite":
            return f"sqlite:///{self.database or ':memory:'}"
        if kind == "postgres":
            missing = [name for name in _POSTGRES_SETTINGS if not getattr(self, name)]
            if missing:
                raise ValidationError(
                    f"Missing Postgres settings: {', '.join(missing)}",
                    error_code=ErrorCode.MISSING_REQUIRED,
                    field="database_config",
                    missing=missing,
                )
            return (
                f"postgresql://{self.username}:{self.password}@"
                f"{self.host}:{self.port}/{self.database}"
            )
        raise ValidationError(
            f"Unsupported database type: {self.db_type}",
            error_code=ErrorCode.INVALID_FORMAT,
            field="db_type",
            value=self.db_type,
        )

    def masked_url(self) -> str:
        """Connection string with the password hidden, safe to log."""
        return make_url(self.get_connection_string()).render_as_string(hide_password=True)

    def __repr__(self) -> str:
        if self.url:
            return f"DatabaseConfig(url='{self.masked_url()}')"
        return (
            f"DatabaseConfig(db_type='{self.db_type}', host='{self.host}', "
            f"database='{self.database}', username='{self.username}', password='***')"
        )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Engine plus the session factory bound to it."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine)
        self.scoped_session = scoped_session(self.session_factory)

    def _create_engine(self):
        url = self.config.get_connection_string()
        if make_url(url).get_backend_name() == "sqlite":
            engine = create_engine(
                url, echo=self.config.echo, connect_args={"check_same_thread": False}
            )
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            return engine
        return create_engine(
            url,
            echo=self.config.echo,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
            pool_pre_ping=True,
        )

    def create_tables(self) -> None:
        import_all_models()
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop every table. Refused outside development mode."""
        if not self.config.development_mode:
            raise ServiceError(
                "Cannot drop tables: not in development mode",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="drop_tables",
            )
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    def close(self) -> None:
        self.scoped_session.remove()
        self.engine.dispose()


def import_all_models():
    """Register every model with the metadata and resolve relationships."""
    from sqlalchemy.orm import configure_mappers

    # Realms and principals first; content and classification tables reference them
    from .db_realm_models import Locale, Realm, RealmLocale  # noqa
    from .db_principal_models import Principal, RoleGrant  # noqa
    from .db_content_models import (  # noqa
        District,
        Language,
        LanguageFamily,
        LanguagePoint,
        Neighborhood,
    )
    from .db_classification_models import (  # noqa
        ClassificationAssignment,
        ClassificationType,
        ClassificationValue,
    )

    configure_mappers()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    Get the global database manager instance.

    Raises:
        ServiceError: If no database manager has been initialized
    """
    if _db_manager is None:
        raise ServiceError(
            "Database manager not initialized. Call initialize_db() first.",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    """Install ``manager`` as the global database manager."""
    global _db_manager
    _db_manager = manager


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Create the global database manager and any missing tables.

    Args:
        config: Connection settings; defaults to ``DatabaseConfig.from_app_config()``
    """
    global _db_manager

    config = config or DatabaseConfig.from_app_config()
    _db_manager = DatabaseManager(config)
    _db_manager.create_tables()

    get_logger().info(
        "Database initialized",
        extra={"url": config.masked_url(), "dialect": _db_manager.engine.dialect.name},
    )
    return _db_manager


def close_db() -> None:
    """Dispose of the global engine and forget the manager."""
    global _db_manager
    if _db_manager:
        _db_manager.close()
        _db_manager = None
