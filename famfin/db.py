from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

from famfin.config import get_settings

settings = get_settings()

# SQLite needs a special connect arg; others (e.g., Postgres) don't.
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    echo=False,  # set True to see SQL in console
    connect_args=connect_args,
)

logger = logging.getLogger("famfin.db")
logger.info("DB URL in use: %s", engine.url)


def enable_sqlite_foreign_keys(target_engine) -> None:
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _set_pragma(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency: yields a database session and closes it afterwards."""
    with Session(engine) as session:
        yield session


def create_db_and_tables(target_engine=None) -> None:
    """
    Create every table straight from the models (tests, throwaway databases).
    Real databases are migrated with Alembic.
    """
    SQLModel.metadata.create_all(target_engine or engine)
