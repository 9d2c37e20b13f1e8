"""Database management for feedbase executors."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from . import config
from .transaction import FeedTransaction, active_transaction

logger = logging.getLogger(__name__)

DBSession = AsyncSession

__all__ = ["DBSession", "DatabaseManager", "get_default_database", "reset_default_database"]


class DatabaseManager:
    """
    Manages asynchronous database connections and sessions for one database.

    Storage descriptors reference a DatabaseManager; every executor statement
    runs in a session obtained from it unless a transaction is supplied.
    """

    def __init__(self, database_url: str | None = None, echo: bool | None = None):
        """
        Initialize the DatabaseManager.

        Args:
            database_url: The database connection URL. Defaults to `FEEDBASE_DATABASE_URL`.
            echo: Whether the engine logs every statement. Defaults to `FEEDBASE_ECHO_SQL`.

        """
        self.database_url = database_url or config.settings.DATABASE_URL
        self.echo = config.settings.ECHO_SQL if echo is None else echo
        self._engine: AsyncEngine | None = None
        self._session_local: async_sessionmaker[AsyncSession] | None = None
        self._initialize_engine()

    def _initialize_engine(self) -> None:
        """Initialize the async engine and session maker."""
        if not self.database_url:
            raise ValueError("DATABASE_URL not set. Cannot initialize database.")

        # SQLite URLs are expected to use the aiosqlite driver (sqlite+aiosqlite://).
        self._engine = create_async_engine(self.database_url, echo=self.echo)
        self._session_local = async_sessionmaker(bind=self._engine, expire_on_commit=False)
        logger.info("Initialized async database engine for (%s)", self.database_url)

    @property
    def engine(self) -> AsyncEngine:
        """Return the SQLAlchemy AsyncEngine."""
        if self._engine is None:
            raise RuntimeError("Async Database engine has not been initialized.")
        return self._engine

    @property
    def session_local(self) -> async_sessionmaker[AsyncSession]:
        """Return the AsyncSessionLocal factory."""
        if self._session_local is None:
            raise RuntimeError("AsyncSessionLocal has not been initialized.")
        return self._session_local

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @property
    def supports_insert_returning(self) -> bool:
        """Whether INSERT .. RETURNING is available on this engine's dialect."""
        return bool(self.engine.dialect.insert_returning)

    def get_db_session(self) -> AsyncSession:
        """
        Provide a new asynchronous database session.

        The caller is responsible for closing the session, typically using `async with`.
        """
        return self.session_local()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[FeedTransaction]:
        """
        Open a transaction that several model operations can share.

        The transaction commits when the block exits normally and rolls back
        when it raises. While the block runs the transaction is also published
        through `active_transaction`, so calls that are not handed a
        transaction explicitly still join it.
        """
        async with self.get_db_session() as session, session.begin():
            feed_transaction = FeedTransaction(session)
            token = active_transaction.set(feed_transaction)
            try:
                yield feed_transaction
            finally:
                active_transaction.reset(token)

    async def create_tables(self, metadata: MetaData) -> None:
        """Create the tables of `metadata` that do not exist yet."""
        logger.info("Attempting to create database tables...")
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
            logger.info("Database tables created (or verified existing) for (%s)", self.database_url)
        except Exception:
            logger.exception("Error creating tables.")
            raise

    async def dispose(self) -> None:
        """Close every pooled connection of the engine."""
        await self.engine.dispose()


_default_database: DatabaseManager | None = None


def get_default_database() -> DatabaseManager:
    """Return the process-wide DatabaseManager built from the current settings."""
    global _default_database
    if _default_database is None:
        _default_database = DatabaseManager()
    return _default_database


def reset_default_database() -> None:
    """Forget the process-wide DatabaseManager so the next lookup rebuilds it."""
    global _default_database
    _default_database = None
