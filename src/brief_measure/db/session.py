"""Database engine and session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from brief_measure.core.settings import Settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def _is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> Engine:
    """Create an engine with pool size and timeouts taken from ``settings``.

    Pool acquisition and connection attempts are bounded by
    ``database_connect_timeout_secs``; on PostgreSQL each statement is also
    bounded by ``database_statement_timeout_secs``.
    """
    url = make_url(settings.database_url)
    timeout = settings.database_connect_timeout_secs
    kwargs: dict[str, Any] = {"echo": settings.sql_debug}

    backend = url.get_backend_name()
    if backend == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": timeout}
        if _is_memory_sqlite(url):
            # One shared connection, otherwise each checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_size"] = settings.database_max_connections
            kwargs["max_overflow"] = 0
            kwargs["pool_timeout"] = timeout
    else:
        kwargs["pool_size"] = settings.database_max_connections
        kwargs["max_overflow"] = 0
        kwargs["pool_timeout"] = timeout
        kwargs["pool_pre_ping"] = True
        if backend == "postgresql":
            statement_ms = settings.database_statement_timeout_secs * 1000
            kwargs["connect_args"] = {
                "connect_timeout": timeout,
                "options": f"-c statement_timeout={statement_ms}",
            }

    engine = create_engine(url, **kwargs)
    if backend == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a request-scoped session from the application's session factory."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine) -> None:
    """Create all database tables."""
    import brief_measure.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_tables(engine: Engine) -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
