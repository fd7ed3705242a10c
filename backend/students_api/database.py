"""
Database engine and session management.

Uses SQLAlchemy for ORM operations. Supports PostgreSQL (production) and
SQLite (local development and tests). The engine is built when the
application starts, kept on `app.state`, and disposed at shutdown; routes
get a per-request session through the `get_db` dependency.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool
from fastapi import Request

from students_api.logging_config import get_logger, log_event

logger = get_logger("db")

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def build_engine(database_url: str) -> Engine:
    """
    Create an engine configured for the database type behind `database_url`.

    SQLite does not support pool_size, max_overflow, or pool_pre_ping.
    An in-memory SQLite database lives only as long as its connection, so it
    is pinned to a single shared connection.
    """
    engine_kwargs = {"echo": False}

    if database_url.startswith("postgresql"):
        engine_kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        })
    elif database_url.startswith("sqlite"):
        # Route functions run in FastAPI's threadpool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in IN_MEMORY_SQLITE_URLS:
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite"):
        in_memory = database_url in IN_MEMORY_SQLITE_URLS

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    log_event(logger, "INFO", "Database engine created",
              extra_data={"dialect": engine.dialect.name})
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine: Engine):
    """Create all tables registered on Base.metadata that do not exist yet."""
    # Models must be imported so they are registered with Base.metadata
    import students_api.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    """
    FastAPI dependency that provides a database session.

    Yields a session from the factory opened at startup and closes it after
    the request, returning the connection to the pool.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
