"""Alembic environment for the documents table.

Migrations are raw SQL (op.execute); there is no ORM metadata to
autogenerate from. The URL always comes from config.settings so the API and
the migrations can never point at different databases.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import settings

VERSION_TABLE = "mt_alembic_version"

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

if settings.STORE_BACKEND.lower() != "sql":
    raise RuntimeError(
        f"STORE_BACKEND={settings.STORE_BACKEND!r} keeps no schema; migrations need 'sql'"
    )


def run_migrations_offline() -> None:
    """Emit the SQL script instead of running it (alembic upgrade --sql)."""
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        version_table=VERSION_TABLE,
    )
    with context.begin_transaction():
        context.run_migrations()


def _apply(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=None,
        version_table=VERSION_TABLE,
        transaction_per_migration=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    # one-shot process: no pooling
    engine = create_async_engine(settings.DATABASE_URL, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_apply)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
