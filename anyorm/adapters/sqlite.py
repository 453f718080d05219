"""SQLite adapter - dialect rules plus an async driver (aiosqlite)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from anyorm.adapters.base import DBAdapter
from anyorm.core.connection import ConnectionConfig
from anyorm.core.statement import QueryResult


class SqliteDriver:
    """Asynchronous SQLite driver using aiosqlite."""

    @property
    def paramstyle(self) -> str:
        return "qmark"

    async def connect_async(self, config: ConnectionConfig) -> Any:
        """Open an aiosqlite connection in autocommit mode."""
        import aiosqlite

        conn = await aiosqlite.connect(config.database, isolation_level=None, **config.extra)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        return conn

    async def close_async(self, connection: Any) -> None:
        await connection.close()

    def terminate(self, connection: Any) -> None:
        # aiosqlite closes from its worker thread, which needs the event loop;
        # autocommit leaves nothing pending, so the thread is left to exit
        return None

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: Sequence[Any] = (),
    ) -> QueryResult:
        cursor = await connection.execute(sql, tuple(params))
        try:
            rows = await cursor.fetchall() if cursor.description is not None else []
            return QueryResult(
                rows=[dict(row) for row in rows],
                row_count=cursor.rowcount,
                last_row_id=cursor.lastrowid,
            )
        finally:
            await cursor.close()

    async def begin_async(self, connection: Any) -> None:
        await connection.execute("BEGIN")

    async def commit_async(self, connection: Any) -> None:
        await connection.commit()

    async def rollback_async(self, connection: Any) -> None:
        await connection.rollback()


class SqliteAdapter(DBAdapter):
    """SQLite adapter; one returning column, read from the cursor's lastrowid."""

    dialect = "sqlite"
    identifier_symbol = '"'

    def create_driver(self) -> SqliteDriver:
        return SqliteDriver()

    def last_id_statement(self, table: str | None = None, column: str | None = None) -> str:
        return "SELECT last_insert_rowid() AS last_id"
