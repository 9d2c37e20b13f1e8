"""
Write statements for one table.

Each performer captures a column-keyed record when built and issues exactly
one statement when `execute()` is awaited. Executor errors such as
`sqlalchemy.exc.IntegrityError` propagate unchanged.
"""

import logging
from typing import Any

from sqlalchemy import Delete, Insert, TableClause, Update, column, delete, insert, table, update
from sqlalchemy.dialects import mysql, postgresql, sqlite

from feedbase.core.exceptions import FeedContractError, UnsupportedDialectError
from feedbase.core.transaction import FeedTransaction, session_scope

from .db_spec import DBSpec

logger = logging.getLogger(__name__)


class Performer:
    """Base for statements built from a descriptor and a column-keyed record."""

    def __init__(self, spec: DBSpec, record: dict[str, Any], transaction: FeedTransaction | None = None):
        self.spec = spec
        self.record = dict(record)
        self.transaction = transaction

    def _table_clause(self, names: list[str]) -> TableClause:
        columns = dict.fromkeys([*self.spec.columns(), *names])
        return table(self.spec.table, *(column(name) for name in columns))

    def _key_values(self) -> dict[str, Any]:
        """Primary-key values of the record; every key column must be set."""
        keys = self.spec.primary_keys()
        missing = [key for key in keys if self.record.get(key) is None]
        if missing:
            raise FeedContractError(f"primary key value(s) {missing} missing for table '{self.spec.table}'")
        return {key: self.record[key] for key in keys}

    async def execute(self) -> int:
        raise NotImplementedError


class SQLAdder(Performer):
    """INSERT of the insertable columns that hold a value."""

    def values(self) -> dict[str, Any]:
        # None leaves the column to its server default.
        return {
            col: self.record[col]
            for col in self.spec.insertable_columns()
            if col in self.record and self.record[col] is not None
        }

    def _returning_key(self) -> str | None:
        """Key column to read back with RETURNING, when the table has a single key and the dialect allows it."""
        if not self.spec.is_single_key() or not self.spec.database.supports_insert_returning:
            return None
        return self.spec.primary_key

    def build(self) -> Insert:
        values = self.values()
        sa_table = self._table_clause(list(values))
        stmt = insert(sa_table).values(values)
        key = self._returning_key()
        if key is not None:
            stmt = stmt.returning(sa_table.c[key])
        return stmt

    async def execute(self) -> Any:
        """
        Insert the row and return its generated key, or 0 if none was reported.

        The key comes from RETURNING where the dialect supports it and from
        the cursor's `lastrowid` otherwise.
        """
        stmt = self.build()
        async with session_scope(self.spec.database, self.transaction) as session:
            result = await session.execute(stmt)
            if result.returns_rows:
                last_insert_id = result.scalar()
            else:
                last_insert_id = getattr(result, "lastrowid", None)
        logger.debug("Inserted into '%s' (last insert id %s)", self.spec.table, last_insert_id)
        return last_insert_id or 0


class SQLModifier(Performer):
    """UPDATE of the modifiable columns in the record, located by the full primary key."""

    def values(self) -> dict[str, Any]:
        keys = self.spec.primary_keys()
        return {
            col: self.record[col]
            for col in self.spec.modifiable_columns()
            if col in self.record and col not in keys
        }

    def build(self) -> Update | None:
        values = self.values()
        if not values:
            return None
        key_values = self._key_values()
        sa_table = self._table_clause([*values, *key_values])
        return (
            update(sa_table)
            .where(*(sa_table.c[key] == value for key, value in key_values.items()))
            .values(values)
        )

    async def execute(self) -> int:
        """Run the UPDATE and return the affected row count; nothing is sent when no column is modifiable."""
        stmt = self.build()
        if stmt is None:
            logger.info("No modifiable columns to update in '%s'; skipping statement.", self.spec.table)
            return 0
        async with session_scope(self.spec.database, self.transaction) as session:
            result = await session.execute(stmt)
            rowcount = result.rowcount
        logger.debug("Updated %s row(s) in '%s'", rowcount, self.spec.table)
        return rowcount


class SQLRemover(Performer):
    """DELETE of the row located by the full primary key."""

    def build(self) -> Delete:
        key_values = self._key_values()
        sa_table = self._table_clause(list(key_values))
        return delete(sa_table).where(*(sa_table.c[key] == value for key, value in key_values.items()))

    async def execute(self) -> int:
        stmt = self.build()
        async with session_scope(self.spec.database, self.transaction) as session:
            result = await session.execute(stmt)
            rowcount = result.rowcount
        logger.debug("Deleted %s row(s) from '%s'", rowcount, self.spec.table)
        return rowcount


_DIALECT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
    "mysql": mysql.insert,
    "mariadb": mysql.insert,
}


class SQLUpserter(SQLAdder):
    """INSERT that overwrites the existing row when the primary key already exists."""

    def build(self) -> Insert:
        dialect_name = self.spec.database.dialect_name
        dialect_insert = _DIALECT_INSERTS.get(dialect_name)
        if dialect_insert is None:
            raise UnsupportedDialectError("strong add", dialect_name)

        values = self.values()
        stmt = dialect_insert(self._table_clause(list(values))).values(values)
        keys = self.spec.primary_keys()
        updates = [col for col in values if col not in keys]

        if dialect_insert is mysql.insert:
            if not updates:
                return stmt.prefix_with("IGNORE")
            return stmt.on_duplicate_key_update({col: stmt.inserted[col] for col in updates})
        if not updates:
            return stmt.on_conflict_do_nothing(index_elements=keys)
        return stmt.on_conflict_do_update(
            index_elements=keys,
            set_={col: stmt.excluded[col] for col in updates},
        )


class SQLInsertIgnorer(SQLAdder):
    """INSERT that leaves the existing row untouched when the primary key already exists."""

    def build(self) -> Insert:
        dialect_name = self.spec.database.dialect_name
        dialect_insert = _DIALECT_INSERTS.get(dialect_name)
        if dialect_insert is None:
            raise UnsupportedDialectError("weak add", dialect_name)

        values = self.values()
        stmt = dialect_insert(self._table_clause(list(values))).values(values)
        if dialect_insert is mysql.insert:
            return stmt.prefix_with("IGNORE")
        return stmt.on_conflict_do_nothing()
