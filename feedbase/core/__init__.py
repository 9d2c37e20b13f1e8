"""Ambient building blocks: settings, database access, transactions, errors and logging."""

from .database import DatabaseManager, DBSession, get_default_database, reset_default_database
from .exceptions import FeedBaseException, FeedContractError, FeedNotFoundError, UnsupportedDialectError
from .transaction import FeedTransaction, active_transaction, session_scope

__all__ = [
    "DBSession",
    "DatabaseManager",
    "FeedBaseException",
    "FeedContractError",
    "FeedNotFoundError",
    "FeedTransaction",
    "UnsupportedDialectError",
    "active_transaction",
    "get_default_database",
    "reset_default_database",
    "session_scope",
]
