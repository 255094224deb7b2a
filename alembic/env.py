# alembic/env.py
"""
Migrations run against the same database the service uses.

Online mode borrows famfin.db.engine, so DATABASE_URL from the environment
(or .env) decides the target and SQLite connections get the foreign-key
pragma. Offline mode renders SQL for that same URL. alembic.ini puts the
repo root on sys.path (prepend_sys_path), so famfin imports without an
install.

  alembic revision --autogenerate -m "..."
  alembic upgrade head
"""

from logging.config import fileConfig

from alembic import context
from sqlmodel import SQLModel

import famfin.models  # noqa: F401  # table definitions for autogenerate
from famfin.config import get_settings

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata
database_url = get_settings().database_url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,  # Numeric(12, 2) precision changes on money columns
        # SQLite cannot ALTER constraints in place; batch mode copies the table
        render_as_batch=database_url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(url=database_url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    from famfin.db import engine

    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
