"""
SQLAlchemy base configuration and session management.

Uses SQLAlchemy 2.0 style with type hints and declarative base.
Portable between SQLite (dev, single-site deployments) and PostgreSQL.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from airwatch.config import config


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def _is_sqlite_memory(url: str) -> bool:
    return url in ('sqlite://', 'sqlite:///:memory:') or 'mode=memory' in url


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Configure SQLite for concurrent ingestion and queries.

    WAL mode lets dashboard reads proceed while the sync pipeline writes.
    In-memory databases ignore it and stay in 'memory' journal mode.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA journal_mode=WAL')
    cursor.execute('PRAGMA synchronous=NORMAL')
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine with the options the database type needs.

    SQLite is shared between the ingestion thread and request threads,
    and an in-memory SQLite database must live on a single connection or
    every checkout sees an empty schema.
    """
    kwargs = {'echo': echo}

    sqlite = url.startswith('sqlite')
    if sqlite:
        kwargs['connect_args'] = {'check_same_thread': False}
        if _is_sqlite_memory(url):
            kwargs['poolclass'] = StaticPool

    new_engine = create_engine(url, **kwargs)
    if sqlite:
        event.listen(new_engine, 'connect', _set_sqlite_pragma)
    return new_engine


engine = build_engine(config.database.url, echo=config.debug)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Records are read after the session closes
)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_session() as session:
            session.add(...)

    Commits on success, rolls back on error, always closes.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create all tables if they don't exist."""
    Base.metadata.create_all(bind=engine)


def drop_db() -> None:
    """Drop every table. Used to reset throwaway databases."""
    Base.metadata.drop_all(bind=engine)
