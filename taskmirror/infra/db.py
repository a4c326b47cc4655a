from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            database_url, connect_args={"check_same_thread": False}
        )
    else:
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class Database:
    """One shared database handle guarded by a single lock.

    Each ``session()`` block is one transaction: it commits on success and
    rolls back on error, and the lock is always released so a failed
    operation never leaves the handle unusable.
    """

    def __init__(self, database_url: str) -> None:
        self.engine = create_db_engine(database_url)
        self._sessions = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self._lock = threading.Lock()

    @contextmanager
    def session(self) -> Iterator[Session]:
        with self._lock:
            session = self._sessions()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def create_schema(self) -> None:
        # models must be imported so their tables register on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(self.engine)
        with self.session() as session:
            models.ensure_singleton_rows(session)

    def dispose(self) -> None:
        self.engine.dispose()


def init_db(database_url: str) -> Database:
    database = Database(database_url)
    with database.engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    database.create_schema()
    logger.info("Database ready url=%s", database.engine.url.render_as_string(hide_password=True))
    return database
