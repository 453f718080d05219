"""MySQL adapter - dialect rules plus an async driver (aiomysql)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from anyorm.adapters.base import DBAdapter
from anyorm.core.connection import ConnectionConfig
from anyorm.core.statement import QueryResult
from anyorm.core.transaction import Transaction

logger = logging.getLogger(__name__)


class MysqlDriver:
    """Asynchronous MySQL driver using aiomysql."""

    @property
    def paramstyle(self) -> str:
        return "format"

    async def connect_async(self, config: ConnectionConfig) -> Any:
        """Open an autocommit aiomysql connection."""
        import aiomysql

        return await aiomysql.connect(
            host=config.host or "localhost",
            port=config.port or 3306,
            user=config.user,
            password=config.password or "",
            db=config.database,
            autocommit=True,
            **config.extra,
        )

    async def close_async(self, connection: Any) -> None:
        await connection.ensure_closed()

    def terminate(self, connection: Any) -> None:
        connection.close()

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: Sequence[Any] = (),
    ) -> QueryResult:
        """Execute SQL with a DictCursor and fetch rows before closing it."""
        import aiomysql

        cursor = await connection.cursor(aiomysql.DictCursor)
        try:
            # always pass a tuple so aiomysql unescapes the doubled %
            await cursor.execute(sql, tuple(params))
            rows = await cursor.fetchall() if cursor.description is not None else []
            return QueryResult(
                rows=[dict(row) for row in rows],
                row_count=cursor.rowcount,
                last_row_id=cursor.lastrowid,
            )
        finally:
            await cursor.close()

    async def begin_async(self, connection: Any) -> None:
        await connection.begin()

    async def commit_async(self, connection: Any) -> None:
        await connection.commit()

    async def rollback_async(self, connection: Any) -> None:
        await connection.rollback()

    def last_insert_id(self, connection: Any) -> Any:
        """Insert id recorded on the connection by its last statement."""
        return connection.insert_id()


class MysqlAdapter(DBAdapter):
    """MySQL-family adapter.

    Identifiers are quoted with backticks. At most one returning column is
    supported; its value comes from the driver's insert-id metadata.
    """

    dialect = "mysql"
    identifier_symbol = "`"
    default_values_clause = "() VALUES ()"

    def create_driver(self) -> MysqlDriver:
        return MysqlDriver()

    def _escape_string(self, value: str) -> str:
        return value.replace("\\", "\\\\").replace("'", "\\'")

    def last_id_statement(self, table: str | None = None, column: str | None = None) -> str:
        return "SELECT last_insert_id() AS last_id"

    async def last_insert_id(
        self,
        table: str | None = None,
        column: str | None = None,
        transaction: Transaction | None = None,
    ) -> Any:
        """Read the last insert id from connection state instead of querying."""
        read = getattr(self.driver, "last_insert_id", None)
        if read is None:
            return await super().last_insert_id(table, column, transaction)
        if transaction is not None:
            return read(transaction.connection)
        logger.warning(
            "last_insert_id() outside a transaction reads an arbitrary pooled session"
        )
        async with self.connection_manager.get_connection() as conn:
            return read(conn)
