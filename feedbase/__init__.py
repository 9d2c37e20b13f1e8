"""Active-record mapping of Python objects onto relational table rows."""

from feedbase.core import (
    DatabaseManager,
    FeedBaseException,
    FeedContractError,
    FeedNotFoundError,
    FeedTransaction,
    UnsupportedDialectError,
)
from feedbase.core.logging_config import setup_logging
from feedbase.models import DBObserver, FCModel, FeedBase, FeedSearcher, PropertyMapping
from feedbase.sql import DBProtocol, DBProtocolV2, DBSpec, DBTools, SQLSearcher

__version__ = "0.1.0"

__all__ = [
    "DBObserver",
    "DBProtocol",
    "DBProtocolV2",
    "DBSpec",
    "DBTools",
    "DatabaseManager",
    "FCModel",
    "FeedBase",
    "FeedBaseException",
    "FeedContractError",
    "FeedNotFoundError",
    "FeedSearcher",
    "FeedTransaction",
    "PropertyMapping",
    "SQLSearcher",
    "UnsupportedDialectError",
    "setup_logging",
]
