"""Alembic environment running migrations on the async engine.

The database URL comes from ``Settings`` rather than ``alembic.ini`` so
migrations and the application always target the same database.
"""

import asyncio
import logging
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from src.core.config import get_settings
from src.infrastructure.database.base import Base

# Registers every table on Base.metadata
from src.infrastructure.database import models  # noqa: F401

config = context.config
logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without connecting to the database."""
    logger.info("Running migrations in offline mode")
    context.configure(
        url=get_settings().database_config.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Apply the migrations through a throwaway async engine."""
    logger.info("Running migrations in online mode with async engine")
    db_config = get_settings().database_config

    # NullPool: migrations open a single connection and exit
    configuration: dict[str, Any] = {
        "sqlalchemy.url": db_config.database_url,
        "sqlalchemy.echo": db_config.echo,
    }
    connectable = async_engine_from_config(
        configuration, prefix="sqlalchemy.", poolclass=pool.NullPool
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
