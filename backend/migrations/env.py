from __future__ import annotations
import asyncio
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context
from app.config import settings
from app.db import Base
from app.logging_setup import configure_logging
from app.models import challenge, game, mail, review, submission, user  # noqa: F401  register tables

config = context.config
configure_logging(settings.log_level)

target_metadata = Base.metadata

# `alembic -x url=...` wins over DATABASE_URL
DB_URL = context.get_x_argument(as_dictionary=True).get("url") or settings.database_url
# sqlite can't ALTER most things in place
BATCH = DB_URL.startswith("sqlite")


def run_migrations_offline():
    context.configure(
        url=DB_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=BATCH,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection):
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True,
                      render_as_batch=BATCH)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    connectable = create_async_engine(DB_URL, poolclass=pool.NullPool)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
