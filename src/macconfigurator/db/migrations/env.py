"""Alembic async migration environment."""

import asyncio
from logging.config import fileConfig

from alembic import context

import macconfigurator.db.models  # noqa: F401 - register ORM models
from macconfigurator.config import settings
from macconfigurator.db.base import Base
from macconfigurator.db.engine import create_db_engine

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline():
    """Run migrations in offline mode."""
    context.configure(url=settings.database_url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    """Run migrations against a live database through the service engine settings."""
    connectable = create_db_engine(settings)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
