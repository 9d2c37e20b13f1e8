"""A mutable SELECT builder bound to one table."""

import logging
from typing import Any

from sqlalchemy import ColumnElement, Select, TableClause, column, func, literal_column, select, table

from feedbase.core.database import DatabaseManager
from feedbase.core.transaction import FeedTransaction, session_scope

logger = logging.getLogger(__name__)

SORT_DIRECTIONS = ("ASC", "DESC")


class SQLSearcher:
    """
    Query handle for one table: conditions, order rules and pagination.

    Configure it, then run `query_list`, `query_single` or `query_count`. The
    handle is not safe to share between concurrent executions because every
    setter mutates it in place.
    """

    def __init__(self, database: DatabaseManager, transaction: FeedTransaction | None = None):
        self._database = database
        self._transaction = transaction
        self._table = ""
        self._columns: list[str] = []
        self._conditions: list[tuple[str, Any]] = []
        self._order_rules: list[tuple[str, str]] = []
        self._offset = -1
        self._length = -1

    def set_table(self, table_name: str) -> "SQLSearcher":
        self._table = table_name
        return self

    def set_columns(self, columns: list[str]) -> "SQLSearcher":
        self._columns = list(columns)
        return self

    def add_condition_kv(self, key: str, value: Any) -> "SQLSearcher":
        """Restrict results to rows whose `key` column equals `value`."""
        self._conditions.append((key, value))
        return self

    def add_order_rule(self, sort_key: str, direction: str = "ASC") -> "SQLSearcher":
        direction = direction.upper()
        if direction not in SORT_DIRECTIONS:
            raise ValueError(f"Sort direction must be one of {SORT_DIRECTIONS}, got '{direction}'")
        self._order_rules.append((sort_key, direction))
        return self

    def set_page_info(self, page: int, length_per_page: int) -> "SQLSearcher":
        """Paginate by 0-indexed page; a negative page or non-positive length removes pagination."""
        if page >= 0 and length_per_page > 0:
            return self.set_limit_info(page * length_per_page, length_per_page)
        return self.set_limit_info(-1, -1)

    def set_limit_info(self, offset: int, length: int) -> "SQLSearcher":
        """Paginate by offset; a negative offset or non-positive length removes pagination."""
        if offset >= 0 and length > 0:
            self._offset, self._length = offset, length
        else:
            self._offset, self._length = -1, -1
        return self

    @property
    def conditions(self) -> list[tuple[str, Any]]:
        return list(self._conditions)

    @property
    def order_rules(self) -> list[tuple[str, str]]:
        return list(self._order_rules)

    @property
    def limit_info(self) -> tuple[int, int] | None:
        if self._length > 0:
            return self._offset, self._length
        return None

    def _table_clause(self) -> TableClause:
        if not self._table:
            raise ValueError("SQLSearcher has no table; call set_table() first.")
        names = dict.fromkeys(
            [*self._columns, *(key for key, _ in self._conditions), *(key for key, _ in self._order_rules)]
        )
        return table(self._table, *(column(name) for name in names))

    def _where_clauses(self, sa_table: TableClause) -> list[ColumnElement[bool]]:
        return [sa_table.c[key] == value for key, value in self._conditions]

    def build_select(self) -> Select[Any]:
        sa_table = self._table_clause()
        if self._columns:
            stmt = select(*(sa_table.c[name] for name in self._columns))
        else:
            stmt = select(literal_column("*")).select_from(sa_table)
        stmt = stmt.where(*self._where_clauses(sa_table))
        for sort_key, direction in self._order_rules:
            order_column = sa_table.c[sort_key]
            stmt = stmt.order_by(order_column.desc() if direction == "DESC" else order_column.asc())
        if self._length > 0:
            stmt = stmt.offset(self._offset).limit(self._length)
        return stmt

    def build_count(self) -> Select[Any]:
        sa_table = self._table_clause()
        return select(func.count()).select_from(sa_table).where(*self._where_clauses(sa_table))

    async def query_list(self) -> list[dict[str, Any]]:
        """Return every matching row as a dict keyed by column name."""
        stmt = self.build_select()
        async with session_scope(self._database, self._transaction) as session:
            result = await session.execute(stmt)
            rows = [dict(row._mapping) for row in result]
        logger.debug("Queried %d row(s) from '%s'", len(rows), self._table)
        return rows

    async def query_single(self) -> dict[str, Any] | None:
        """Return the first matching row, ignoring any configured pagination."""
        offset, length = self._offset, self._length
        self.set_limit_info(0, 1)
        try:
            rows = await self.query_list()
        finally:
            self._offset, self._length = offset, length
        return rows[0] if rows else None

    async def query_count(self) -> int:
        """Return the number of matching rows, ignoring pagination."""
        stmt = self.build_count()
        async with session_scope(self._database, self._transaction) as session:
            count = (await session.execute(stmt)).scalar_one()
        return int(count)
