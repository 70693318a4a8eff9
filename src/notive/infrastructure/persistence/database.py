"""Async engine and transactional sessions for the account database."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from notive.config import DatabaseSettings
from notive.infrastructure.persistence.models import Base

logger = logging.getLogger(__name__)

# Seconds a SQLite connection waits on a locked file before giving up
SQLITE_BUSY_TIMEOUT = 30


def engine_options(settings: DatabaseSettings) -> dict[str, Any]:
    """Build create_async_engine() keyword arguments for the configured backend.

    Pool sizing only means something for PostgreSQL; aiosqlite runs one connection per
    thread and rejects the pool arguments.
    """
    options: dict[str, Any] = {
        "echo": settings.echo,
        "pool_pre_ping": settings.pool_pre_ping,
    }
    if settings.is_sqlite:
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT,
        }
    else:
        options.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.pool_recycle,
        )
    return options


class Database:
    """Owns the engine and hands out one transaction per unit of work."""

    def __init__(self, settings: DatabaseSettings) -> None:
        self.settings = settings
        self._engine = create_async_engine(settings.url, **engine_options(settings))

        # Hey future me - SQLite ships with foreign keys OFF. Without this pragma deleting a
        # user leaves its subscription and folders behind, because ON DELETE CASCADE is
        # silently ignored. It has to run on every new DBAPI connection, not once.
        if settings.is_sqlite:
            event.listen(self._engine.sync_engine, "connect", _enable_foreign_keys)

        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session that commits on success and rolls back on any error."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create missing tables. Existing tables are left untouched."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables are ready")

    async def ping(self) -> bool:
        """Run ``SELECT 1``. False if the database can't be reached."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("Database ping failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        await self._engine.dispose()


def _enable_foreign_keys(dbapi_conn: Any, _connection_record: Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
