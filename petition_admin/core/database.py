"""Async SQLAlchemy engine and unit-of-work helpers."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from petition_admin.core.config import settings


def build_engine(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an async engine.

    On SQLite the driver's implicit transaction handling is switched off and
    BEGIN is emitted explicitly, so SAVEPOINT works inside a session.
    """
    engine = create_async_engine(url, echo=echo, **kwargs)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _disable_driver_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(
    settings.database_url,
    # Only echo SQL when debug is explicitly enabled
    echo=settings.debug and settings.log_level == "DEBUG",
)
async_session_maker = build_session_maker(engine)


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """One unit of work: commit on success, roll back on any error.

    Services that must keep a write even when they go on to raise (failed
    login counting) commit it themselves before raising.
    """
    async with (session_maker or async_session_maker)() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            # Includes asyncio.CancelledError
            await session.rollback()
            raise


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create all tables known to the model metadata."""
    from petition_admin.models.base import BaseModel

    async with (bind or engine).begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)
