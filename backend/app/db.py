from __future__ import annotations
from typing import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from app.config import settings

class Base(DeclarativeBase):
    pass


def _serialize_sqlite_writers(engine: AsyncEngine) -> None:
    """
    sqlite ignores ``FOR UPDATE`` and the driver defers BEGIN until the first
    write, so two transactions can read the same row and both write it back.
    Taking the database write lock at BEGIN makes them queue instead.
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _no_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


if settings.database_url.startswith("sqlite"):
    # fresh connection per session so event loops never share one; waiters block up to 30s on the lock
    engine = create_async_engine(settings.database_url, echo=False, poolclass=NullPool,
                                 connect_args={"timeout": 30})
    _serialize_sqlite_writers(engine)
else:
    engine = create_async_engine(settings.database_url, future=True, echo=False)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session

def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory for work that must run outside the request's transaction."""
    return SessionLocal
