"""Transaction handles shared by model operations."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Optional

from sqlalchemy.ext.asyncio import AsyncSession

if TYPE_CHECKING:
    from .database import DatabaseManager


class FeedTransaction:
    """
    A wrapper around an SQLAlchemy session that is already inside a transaction.

    The mapping layer never commits or rolls back a FeedTransaction; it only
    forwards it to the executor so several model operations land in the same
    unit of work. Whoever opened it decides its outcome.
    """

    def __init__(self, session: AsyncSession):
        """Initialize the transaction with an active session."""
        self.session = session

    async def flush(self) -> None:
        """Flush the underlying session to persist changes within the current transaction."""
        await self.session.flush()


# Context variable to hold the current FeedTransaction for a given async context.
active_transaction: ContextVar[Optional["FeedTransaction"]] = ContextVar("active_transaction", default=None)


@asynccontextmanager
async def session_scope(
    database: "DatabaseManager", transaction: FeedTransaction | None = None
) -> AsyncIterator[AsyncSession]:
    """
    Yield the session an executor statement should run in.

    An explicit transaction wins over the active one; without either, a
    fresh session is opened and committed when the block exits.
    """
    transaction = transaction or active_transaction.get()
    if transaction is not None:
        yield transaction.session
        return

    async with database.get_db_session() as session, session.begin():
        yield session
