"""Database configuration and session management utilities."""
from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Iterator

from sqlalchemy import MetaData, create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from school_records.config import DATABASE_URL, SQLALCHEMY_ECHO
from school_records.errors import StoreUnavailable

LOGGER = logging.getLogger(__name__)

DATABASE_PRAGMA = "PRAGMA foreign_keys = ON"
JOURNAL_PRAGMA = "PRAGMA journal_mode = WAL"

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))

_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError)


def _file_database(url: str) -> str | None:
    database = make_url(url).database
    if not database or database == ":memory:" or database.startswith("file:"):
        return None
    return database


def _ensure_sqlite_directory(url: str) -> None:
    database = _file_database(url)
    if database is None:
        return
    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def _configure_sqlite(engine: Engine, *, wal: bool = False) -> None:
    # Writers take the database lock at BEGIN; read-only sessions begin deferred.
    # In WAL mode an open reader never blocks a writer on another connection.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute(DATABASE_PRAGMA)
        if wal:
            cursor.execute(JOURNAL_PRAGMA)
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # pragma: no cover - driver hook
        if conn.get_execution_options().get("read_only"):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``url`` with common configuration applied."""

    connect_args: dict[str, object] = {}
    if url.startswith("sqlite"):
        _ensure_sqlite_directory(url)
        connect_args["check_same_thread"] = False
    engine = create_engine(url, echo=echo, future=True, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine, wal=_file_database(url) is not None)
    return engine


class RecordStore:
    """Handle over one database, opened at startup and closed at shutdown."""

    def __init__(self, url: str | None = None, *, echo: bool = SQLALCHEMY_ECHO) -> None:
        self.url = url or DATABASE_URL
        self.echo = echo
        self._engine: Engine | None = None
        self._writer: sessionmaker[Session] | None = None
        self._reader: sessionmaker[Session] | None = None

    def __repr__(self) -> str:  # pragma: no cover - repr not critical
        return f"RecordStore(url={self.url!r}, open={self.is_open})"

    def __enter__(self) -> "RecordStore":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StoreUnavailable("record store is not open")
        return self._engine

    def open(self) -> "RecordStore":
        if self._engine is not None:
            return self
        engine = build_engine(self.url, echo=self.echo)
        self._writer = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False, future=True
        )
        self._reader = sessionmaker(
            bind=engine.execution_options(read_only=True),
            autoflush=False,
            expire_on_commit=False,
            future=True,
        )
        self._engine = engine
        LOGGER.info("Opened record store %s", engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._writer = None
        self._reader = None
        LOGGER.info("Closed record store")

    def init_db(self) -> None:
        """Create database tables for all registered models."""
        from school_records.db import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    @contextlib.contextmanager
    def transaction(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        if self._writer is None:
            raise StoreUnavailable("record store is not open")
        session = self._writer()
        try:
            yield session
            session.commit()
        except _UNAVAILABLE_ERRORS as exc:
            session.rollback()
            LOGGER.exception("Record store transaction failed")
            raise StoreUnavailable(str(exc.orig or exc)) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextlib.contextmanager
    def read_session(self) -> Iterator[Session]:
        """Provide a session for queries; nothing is committed."""
        if self._reader is None:
            raise StoreUnavailable("record store is not open")
        session = self._reader()
        try:
            yield session
        except _UNAVAILABLE_ERRORS as exc:
            LOGGER.exception("Record store query failed")
            raise StoreUnavailable(str(exc.orig or exc)) from exc
        finally:
            session.close()

    def ping(self) -> bool:
        """Issue a trivial round trip; raises :class:`StoreUnavailable` on failure."""
        try:
            with self.engine.execution_options(read_only=True).connect() as conn:
                conn.execute(text("SELECT 1"))
        except _UNAVAILABLE_ERRORS as exc:
            raise StoreUnavailable(str(exc.orig or exc)) from exc
        return True


__all__ = [
    "Base",
    "DATABASE_PRAGMA",
    "NAMING_CONVENTION",
    "RecordStore",
    "build_engine",
]
