"""Alembic environment for the taskmirror schema.

The database URL comes from ``taskmirror.config`` (``DATABASE_URL`` in the
environment or ``.env``) unless ``sqlalchemy.url`` is set in alembic.ini.
"""

from __future__ import annotations

from alembic import context

from taskmirror.config import SETTINGS
from taskmirror.infra import models  # noqa: F401
from taskmirror.infra.db import Base, create_db_engine

target_metadata = Base.metadata


def get_url() -> str:
    url = context.config.get_main_option("sqlalchemy.url")
    return url or SETTINGS.database_url


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_db_engine(get_url())
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
