import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from portfolio.exceptions import DatabaseError
from portfolio.logging import logger
from portfolio.settings import Settings, app_settings


class Database:
    """
    Process-wide database handle.

    Created once at application startup and passed explicitly to the
    services that need it. Sessions are acquired per unit of work with
    ``async with database.session() as session``.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.engine: AsyncEngine = create_async_engine(
            url, echo=False, **engine_kwargs
        )
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, class_=AsyncSession
        )

    @classmethod
    def from_settings(cls, settings: Settings = app_settings) -> "Database":
        """Build a database handle with pool options from settings."""
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session, rolling back if the unit of work fails.

        Yields:
            AsyncSession: An asynchronous SQLModel session.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as ex:
                await session.rollback()
                logger.error(f"Database error: {ex}")
                raise

    async def wait_until_ready(
        self,
        retry_interval: int | None = None,
        max_retries: int | None = None,
    ) -> None:
        """
        Wait until the database accepts connections.

        Args:
            retry_interval: Seconds between retries.
                Defaults to app_settings.DB_INIT_RETRY_INTERVAL
            max_retries: Maximum number of attempts.
                Defaults to app_settings.DB_INIT_MAX_RETRIES

        Raises:
            DatabaseError: If the database is still unreachable after
                ``max_retries`` attempts.
        """
        if retry_interval is None:
            retry_interval = app_settings.DB_INIT_RETRY_INTERVAL
        if max_retries is None:
            max_retries = app_settings.DB_INIT_MAX_RETRIES

        for attempt in range(max_retries):
            if await self.ping(log_failure=False):
                logger.info("Database is now ready.")
                return
            logger.warning(
                f"Database not ready, retrying in {retry_interval} seconds... (Attempt {attempt + 1}/{max_retries})"
            )
            await asyncio.sleep(retry_interval)

        logger.error("Failed to connect to the database after multiple attempts.")
        raise DatabaseError("Database connection could not be established.")

    async def create_tables(self) -> None:
        """Create the tables for all registered models if missing."""
        # Register table metadata
        import portfolio.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Initialized database tables")

    async def ping(self, log_failure: bool = True) -> bool:
        """Check connectivity with a lightweight query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (OperationalError, SQLAlchemyError, OSError) as e:
            if log_failure:
                logger.error(f"Database health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
