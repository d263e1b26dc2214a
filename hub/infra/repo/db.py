"""DB utilities for SQLAlchemy sessions/engine.

Uses `DATABASE_URL` or falls back to `sqlite+pysqlite:///:memory:` (dev/tests).
An in-memory SQLite database is shared across sessions through `StaticPool`.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hub.domain.errors import PersistenceFailure

from .models import Base

MEMORY_URL = "sqlite+pysqlite:///:memory:"


def get_engine(url: str | None = None) -> Engine:
    """Crée un moteur SQLAlchemy à partir de l'URL de base de données."""
    db_url = url or os.getenv("DATABASE_URL") or MEMORY_URL
    if not db_url.startswith("sqlite"):
        return create_engine(db_url, future=True, echo=False, pool_pre_ping=True)
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in db_url:
        kwargs["poolclass"] = StaticPool
    engine = create_engine(db_url, future=True, echo=False, **kwargs)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, _record) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def create_schema(engine: Engine) -> None:
    """Crée les tables manquantes (dev/tests; Alembic en production)."""
    Base.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Crée une factory de sessions SQLAlchemy."""
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Contexte de session avec gestion automatique des transactions.

    Commit en sortie normale, rollback sur exception (aucune écriture partielle
    n'est conservée), fermeture dans tous les cas.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def flush_or_fail(session: Session) -> None:
    """Flush la session; convertit les erreurs SQL en PersistenceFailure."""
    try:
        session.flush()
    except SQLAlchemyError as err:
        session.rollback()
        raise PersistenceFailure(details={"error": type(err).__name__}) from err
