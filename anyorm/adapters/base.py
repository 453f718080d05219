"""Dialect-abstracting database adapter.

DBAdapter builds INSERT/UPDATE/DELETE/SELECT statements with ``?``
placeholders, quotes values and identifiers for its dialect, and runs
everything through a Driver over a lazily created connection pool.
Dialect subclasses only override the parts that differ: the identifier
quote symbol, how generated ids are read back, and the lookup statement
for the last generated id.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from anyorm.core.connection import AsyncConnectionManager, ConnectionConfig
from anyorm.core.exceptions import StatementError, UnsupportedReturningError
from anyorm.core.params import coerce_params, replace_placeholders
from anyorm.core.statement import Expr, InsertResult, QueryResult, Statement
from anyorm.core.transaction import Transaction

logger = logging.getLogger(__name__)


def _as_list(returning: str | Sequence[str] | None) -> list[str]:
    if returning is None:
        return []
    if isinstance(returning, str):
        return [returning]
    return list(returning)


class DBAdapter:
    """Base adapter. Generated ids are read from the driver's last-insert-id.

    Args:
        config: Connection settings for the pool.
        driver: Driver instance; defaults to the dialect's own driver.
    """

    dialect = "generic"
    identifier_symbol = '"'
    default_values_clause = "DEFAULT VALUES"

    def __init__(self, config: ConnectionConfig, driver: Any | None = None) -> None:
        self.config = config
        self._connection_manager = AsyncConnectionManager(
            config, driver if driver is not None else self.create_driver()
        )

    def create_driver(self) -> Any:
        raise NotImplementedError(f"{type(self).__name__} has no default driver")

    @property
    def driver(self) -> Any:
        return self._connection_manager.driver

    @property
    def connection_manager(self) -> AsyncConnectionManager:
        return self._connection_manager

    @property
    def paramstyle(self) -> str:
        return self.driver.paramstyle

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.config.driver}:{self.config.database}>"

    # --- Quoting ---

    def quote(self, value: Any) -> str:
        """Render *value* as an SQL literal."""
        if isinstance(value, Expr):
            return str(value)
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        return "'" + self._escape_string(str(value)) + "'"

    def _escape_string(self, value: str) -> str:
        return value.replace("'", "''")

    def quote_identifier(self, identifier: str | Expr) -> str:
        """Quote each dot-separated segment of *identifier*.

        ``schema.table`` becomes ``"schema"."table"`` for PostgreSQL. A name
        that already starts with the quote symbol is returned unchanged.
        """
        if isinstance(identifier, Expr):
            return str(identifier)

        symbol = self.identifier_symbol
        if identifier.startswith(symbol):
            return identifier

        segments = identifier.replace(symbol, "").split(".")
        return ".".join(s if s == "*" else f"{symbol}{s}{symbol}" for s in segments)

    # --- Statement building ---

    def build_insert(
        self,
        table: str,
        values: Mapping[str, Any],
        returning: list[str],
    ) -> tuple[str, list[Any]]:
        columns: list[str] = []
        placeholders: list[str] = []
        params: list[Any] = []

        for key, value in values.items():
            columns.append(self.quote_identifier(key))
            if isinstance(value, Expr):
                placeholders.append(str(value))
            else:
                placeholders.append("?")
                params.append(value)

        if columns:
            sql = (
                f"INSERT INTO {self.quote_identifier(table)} "
                f"({', '.join(columns)}) VALUES ({', '.join(placeholders)})"
            )
        else:
            sql = f"INSERT INTO {self.quote_identifier(table)} {self.default_values_clause}"
        return sql, params

    def build_update(
        self,
        table: str,
        values: Mapping[str, Any],
        where: str | None = None,
        where_params: Sequence[Any] | Any | None = None,
    ) -> tuple[str, list[Any]]:
        if not values:
            raise ValueError(f"UPDATE of {table} needs at least one value")

        assignments: list[str] = []
        params: list[Any] = []
        for key, value in values.items():
            column = self.quote_identifier(key)
            if isinstance(value, Expr):
                assignments.append(f"{column} = {value}")
            else:
                assignments.append(f"{column} = ?")
                params.append(value)

        sql = f"UPDATE {self.quote_identifier(table)} SET {', '.join(assignments)}"
        if where:
            sql += f" WHERE {where}"
            params.extend(coerce_params(where_params))
        return sql, params

    def build_delete(
        self,
        table: str,
        where: str | None = None,
        where_params: Sequence[Any] | Any | None = None,
    ) -> tuple[str, list[Any]]:
        sql = f"DELETE FROM {self.quote_identifier(table)}"
        params: list[Any] = []
        if where:
            sql += f" WHERE {where}"
            params = coerce_params(where_params)
        return sql, params

    def build_select(
        self,
        table: str,
        columns: Sequence[str] | None = None,
        where: str | None = None,
        where_params: Sequence[Any] | Any | None = None,
        limit: int | None = None,
    ) -> tuple[str, list[Any]]:
        selected = ", ".join(self.quote_identifier(c) for c in columns) if columns else "*"
        sql = f"SELECT {selected} FROM {self.quote_identifier(table)}"
        params: list[Any] = []
        if where:
            sql += f" WHERE {where}"
            params = coerce_params(where_params)
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        return sql, params

    def last_id_statement(self, table: str | None = None, column: str | None = None) -> str:
        """SQL that reads the id generated by the last insert on this session."""
        raise NotImplementedError

    # --- Execution ---

    async def execute(
        self,
        statement: str | Statement,
        params: Sequence[Any] | Any | None = None,
        transaction: Transaction | None = None,
    ) -> QueryResult:
        """Run arbitrary SQL, or a pre-built Statement, optionally in a transaction."""
        if isinstance(statement, Statement):
            return await self._run(statement.text, list(statement.params), transaction)
        return await self._run(statement, coerce_params(params), transaction)

    async def insert(
        self,
        table: str,
        values: Mapping[str, Any],
        returning: str | Sequence[str] | None = None,
        transaction: Transaction | None = None,
    ) -> InsertResult:
        """Insert one row and read back the *returning* columns."""
        columns = _as_list(returning)
        self._check_returning(columns)
        sql, params = self.build_insert(table, values, columns)
        result = await self._run(sql, params, transaction)
        return InsertResult(
            affected_row_count=result.row_count,
            returning_values=self._read_returning(result, columns),
            raw_result=result,
        )

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        where: str | None = None,
        where_params: Sequence[Any] | Any | None = None,
        transaction: Transaction | None = None,
    ) -> int:
        """Update rows matching the raw *where* predicate. Returns the affected row count."""
        sql, params = self.build_update(table, values, where, where_params)
        result = await self._run(sql, params, transaction)
        return result.row_count

    async def delete(
        self,
        table: str,
        where: str | None = None,
        where_params: Sequence[Any] | Any | None = None,
        transaction: Transaction | None = None,
    ) -> int:
        """Delete rows matching the raw *where* predicate. Returns the affected row count."""
        sql, params = self.build_delete(table, where, where_params)
        result = await self._run(sql, params, transaction)
        return result.row_count

    async def select(
        self,
        table: str,
        columns: Sequence[str] | None = None,
        where: str | None = None,
        where_params: Sequence[Any] | Any | None = None,
        limit: int | None = None,
        transaction: Transaction | None = None,
    ) -> list[dict[str, Any]]:
        sql, params = self.build_select(table, columns, where, where_params, limit)
        result = await self._run(sql, params, transaction)
        return result.rows

    async def last_insert_id(
        self,
        table: str | None = None,
        column: str | None = None,
        transaction: Transaction | None = None,
    ) -> Any:
        """Look up the last generated id.

        The value is session-scoped, so pass the transaction the insert ran in.
        """
        if transaction is None:
            logger.warning(
                "last_insert_id() outside a transaction reads an arbitrary pooled session"
            )
        result = await self.execute(self.last_id_statement(table, column), transaction=transaction)
        return result.rows[0]["last_id"] if result.rows else None

    def transaction(self) -> Transaction:
        """Create a transaction handle: ``async with adapter.transaction() as trx:``."""
        return Transaction(self._connection_manager)

    def connect(self) -> Any:
        """Create the connection pool if needed; connections open on first acquire."""
        return self._connection_manager.initialize_pool()

    async def disconnect(self) -> None:
        await self._connection_manager.close_pool()

    # --- Dialect hooks ---

    def _check_returning(self, columns: list[str]) -> None:
        if len(columns) > 1:
            raise UnsupportedReturningError(self.dialect, columns)

    def _read_returning(self, result: QueryResult, columns: list[str]) -> dict[str, Any]:
        if not columns:
            return {}
        return {columns[0]: result.last_row_id}

    async def _run(
        self,
        sql: str,
        params: list[Any],
        transaction: Transaction | None,
    ) -> QueryResult:
        sql = replace_placeholders(sql, self.paramstyle)
        logger.debug(f"Executing with {len(params)} parameters: {sql[:80]}")

        if transaction is not None:
            return await self._execute_on(transaction.connection, sql, params)

        async with self._connection_manager.get_connection() as conn:
            return await self._execute_on(conn, sql, params)

    async def _execute_on(self, connection: Any, sql: str, params: list[Any]) -> QueryResult:
        try:
            return await self.driver.execute_async(connection, sql, params)
        except Exception as e:
            raise StatementError(sql, e) from e
