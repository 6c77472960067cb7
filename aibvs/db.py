"""Database configuration and session management."""
from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from aibvs.models.base import Base
from aibvs.utils.errors import InternalError

logger = logging.getLogger(__name__)


def _engine_kwargs(database_url: str) -> dict[str, object]:
    if database_url.startswith("sqlite"):
        kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") in {"sqlite:", "sqlite+pysqlite:"}:
            # One shared connection, otherwise each checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {}


def _install_sqlite_hooks(engine: Engine) -> None:
    """Enforce foreign keys and let SQLAlchemy own BEGIN so SAVEPOINTs behave."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``."""

    engine = create_engine(database_url, future=True, echo=echo, **_engine_kwargs(database_url))
    if engine.dialect.name == "sqlite":
        _install_sqlite_hooks(engine)
    return engine


def build_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``engine``."""

    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def create_all(engine: Engine) -> None:
    """Create all database tables using the shared declarative metadata."""

    import aibvs.models  # noqa: F401  enregistre les tables

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Provide a database session for FastAPI dependencies."""

    session = request.app.state.sessionmaker()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run a unit of work: commit on success, roll everything back on any error.

    Store failures are re-raised as ``InternalError``; domain errors propagate
    unchanged.
    """

    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database transaction failed")
        raise InternalError() from exc
    except Exception:
        db.rollback()
        raise


__all__ = [
    "Base",
    "build_engine",
    "build_sessionmaker",
    "create_all",
    "get_db",
    "transaction",
]
