"""SQLAlchemy-backed query executor used by feedbase models."""

from .db_spec import DBProtocol, DBProtocolV2, DBSpec
from .performers import Performer, SQLAdder, SQLInsertIgnorer, SQLModifier, SQLRemover, SQLUpserter
from .searcher import SQLSearcher
from .tools import DBTools

__all__ = [
    "DBProtocol",
    "DBProtocolV2",
    "DBSpec",
    "DBTools",
    "Performer",
    "SQLAdder",
    "SQLInsertIgnorer",
    "SQLModifier",
    "SQLRemover",
    "SQLSearcher",
    "SQLUpserter",
]
