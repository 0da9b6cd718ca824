"""
Alembic Migration Environment
===============================

What:  Runs the memories schema migrations against DATABASE_URL.
How:   The URL comes from spacetime.config unless the caller already set
       `sqlalchemy.url` on the Alembic Config (tests do). Online runs go
       through an async engine, SQLite in batch mode since it cannot
       ALTER most columns in place.
Who:   `alembic upgrade head` / `alembic downgrade -1`, and the migration test.
"""

import asyncio
import logging
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from spacetime.config import settings
from spacetime.database import Base

# Registers the memories table on Base.metadata for --autogenerate
from spacetime.models.memory import Memory  # noqa: F401

config = context.config

# Programmatic callers keep their own logging setup
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or settings.database_url


def _configure(**kwargs) -> None:
    url = _database_url()
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit migration SQL to stdout without connecting to the database."""
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    logger.info("Migrating %s", engine.url.render_as_string(hide_password=True))

    try:
        async with engine.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
