"""Alembic environment for the offset exchange schema.

Migrations are raw SQL (op.execute); the ORM metadata is only used to diff
the models against the migrated schema.
The target database defaults to settings.DATABASE_URL and can be pointed
elsewhere per run with ``alembic -x db_url=postgresql+asyncpg://... upgrade head``.
"""
import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import settings
from src.cx_common.database import Base

# Register every ORM table on Base.metadata so `alembic check` can diff the
# models against the migrated schema.
import src.cx_holdings.infrastructure.db_models  # noqa: E402,F401
import src.cx_inventory.infrastructure.db_models  # noqa: E402,F401
import src.cx_ledger.infrastructure.db_models  # noqa: E402,F401
import src.cx_notification.infrastructure.db_models  # noqa: E402,F401
import src.cx_registry.infrastructure.db_models  # noqa: E402,F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("db_url", settings.DATABASE_URL)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):  # type: ignore[no-untyped-def]
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = create_async_engine(_database_url())
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
