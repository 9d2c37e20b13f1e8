"""Entry point of the query executor: builds performers and searchers for one descriptor."""

from collections.abc import Mapping
from typing import Any

from feedbase.core.transaction import FeedTransaction

from .db_spec import DBSpec
from .performers import SQLAdder, SQLInsertIgnorer, SQLModifier, SQLRemover, SQLUpserter
from .searcher import SQLSearcher


class DBTools:
    """
    Executor capability set for one table.

    The optional transaction is handed to every performer and searcher built
    here; without one each statement runs in its own committed session (or
    in the transaction published through `active_transaction`).
    """

    def __init__(self, spec: DBSpec, transaction: FeedTransaction | None = None):
        self.spec = spec
        self.transaction = transaction

    def make_adder(self, record: Mapping[str, Any]) -> SQLAdder:
        return SQLAdder(self.spec, dict(record), self.transaction)

    def make_modifier(self, record: Mapping[str, Any]) -> SQLModifier:
        return SQLModifier(self.spec, dict(record), self.transaction)

    def make_remover(self, record: Mapping[str, Any]) -> SQLRemover:
        return SQLRemover(self.spec, dict(record), self.transaction)

    def make_searcher(self, filter_map: Mapping[str, Any] | None = None) -> SQLSearcher:
        """Return a searcher over the whole table, restricted by `column == value` for each entry."""
        searcher = SQLSearcher(self.spec.database, self.transaction)
        searcher.set_table(self.spec.table)
        searcher.set_columns(self.spec.columns())
        for key, value in (filter_map or {}).items():
            searcher.add_condition_kv(key, value)
        return searcher

    async def strong_add(self, record: Mapping[str, Any]) -> Any:
        """Insert the record, replacing the row that already holds its primary key."""
        return await SQLUpserter(self.spec, dict(record), self.transaction).execute()

    async def weak_add(self, record: Mapping[str, Any]) -> Any:
        """Insert the record unless a row with its primary key already exists."""
        return await SQLInsertIgnorer(self.spec, dict(record), self.transaction).execute()
