"""
Database configuration and session management.

This module is intentionally small and test-friendly:
- Defaults to SQLite for local dev
- Supports Postgres via DATABASE_URL, with the reference tables placed in
  DB_SCHEMA through a schema translate map
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from everytrack.config import get_settings
from everytrack.models.base import Base


def get_database_url() -> str:
    settings = get_settings()
    return settings.DATABASE_URL


def create_db_engine(
    database_url: Optional[str] = None,
    *,
    schema: Optional[str] = None,
    echo: Optional[bool] = None,
) -> Engine:
    settings = get_settings()
    url = database_url or get_database_url()
    if echo is None:
        echo = settings.DB_ECHO
    if schema is None:
        schema = settings.DB_SCHEMA

    connect_args: dict = {}
    if "sqlite" in url:
        connect_args["check_same_thread"] = False

    if url.startswith("sqlite:///:memory:") or url == "sqlite://":
        from sqlalchemy.pool import StaticPool

        engine = create_engine(
            url,
            echo=echo,
            connect_args=connect_args,
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            pool_recycle=3600,
            connect_args=connect_args,
        )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):  # pragma: no cover
        if "sqlite" in url:
            cursor = dbapi_connection.cursor()
            # asset_provider_account_type rows cascade with their provider
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    if schema:
        engine = engine.execution_options(schema_translate_map={None: schema})
    return engine


def make_sessionmaker(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def SessionLocal() -> Session:
    global _session_factory
    if _session_factory is None:
        _session_factory = make_sessionmaker(get_engine())
    return _session_factory()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(*, create_tables: bool = False, bind_engine: Optional[Engine] = None) -> None:
    """
    Initialize database schema.

    When SCHEMA_MODE=migrations, this will NOT auto-create tables; the
    reference tables are expected to exist already.
    """
    settings = get_settings()
    target_engine = bind_engine or get_engine()

    if not create_tables:
        return

    if settings.SCHEMA_MODE == "migrations":
        schema = target_engine.get_execution_options().get("schema_translate_map", {}).get(None)
        existing_tables = inspect(target_engine).get_table_names(schema=schema)
        if not existing_tables:
            raise RuntimeError(
                "SCHEMA_MODE=migrations: Database is empty. "
                "Create the reference tables before seeding."
            )
        return

    # Ensure reference models are registered before create_all().
    from everytrack.models import reference as _reference  # noqa: F401

    Base.metadata.create_all(bind=target_engine, checkfirst=True)
