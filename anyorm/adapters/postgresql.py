"""PostgreSQL adapter - dialect rules plus an async driver (psycopg v3+).

The driver uses psycopg's raw cursor, which binds PostgreSQL's native
``$1, $2`` placeholders; the adapter rewrites ``?`` into that form.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from anyorm.adapters.base import DBAdapter
from anyorm.core.connection import ConnectionConfig
from anyorm.core.statement import QueryResult


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlDriver:
    """Asynchronous PostgreSQL driver using psycopg (v3+) async support."""

    @property
    def paramstyle(self) -> str:
        return "numeric_dollar"

    async def connect_async(self, config: ConnectionConfig) -> Any:
        import psycopg
        import psycopg.rows

        return await psycopg.AsyncConnection.connect(
            _build_conninfo(config),
            autocommit=True,
            row_factory=psycopg.rows.dict_row,
            cursor_factory=psycopg.AsyncRawCursor,
            **config.extra,
        )

    async def close_async(self, connection: Any) -> None:
        await connection.close()

    def terminate(self, connection: Any) -> None:
        connection.pgconn.finish()

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: Sequence[Any] = (),
    ) -> QueryResult:
        async with connection.cursor() as cursor:
            await cursor.execute(sql, list(params) if params else None)
            rows = await cursor.fetchall() if cursor.description is not None else []
            return QueryResult(rows=[dict(row) for row in rows], row_count=cursor.rowcount)

    async def begin_async(self, connection: Any) -> None:
        await connection.execute("BEGIN")

    async def commit_async(self, connection: Any) -> None:
        await connection.commit()

    async def rollback_async(self, connection: Any) -> None:
        await connection.rollback()


class PostgresqlAdapter(DBAdapter):
    """PostgreSQL-family adapter.

    Returning columns are requested with a ``RETURNING`` clause and read from
    the result row, so any number of them is supported.
    """

    dialect = "postgresql"
    identifier_symbol = '"'

    def create_driver(self) -> PostgresqlDriver:
        return PostgresqlDriver()

    def build_insert(
        self,
        table: str,
        values: Mapping[str, Any],
        returning: list[str],
    ) -> tuple[str, list[Any]]:
        sql, params = super().build_insert(table, values, returning)
        if returning:
            sql += " RETURNING " + ", ".join(self.quote_identifier(c) for c in returning)
        return sql, params

    def last_id_statement(self, table: str | None = None, column: str | None = None) -> str:
        """LASTVAL() without a target, else CURRVAL() of the implicit serial sequence.

        ``schema.table`` + ``id`` reads ``schema.table_id_seq``.
        """
        if not table or not column:
            return "SELECT LASTVAL() AS last_id"

        segments = table.replace(self.identifier_symbol, "").split(".")
        sequence = f"{segments[-1]}_{column}_seq"
        if len(segments) == 2:
            sequence = f"{segments[0]}.{sequence}"

        return f"SELECT CURRVAL('{self.quote_identifier(sequence)}') AS last_id"

    def _check_returning(self, columns: list[str]) -> None:
        return None

    def _read_returning(self, result: QueryResult, columns: list[str]) -> dict[str, Any]:
        if not columns or not result.rows:
            return {}
        row = result.rows[0]
        return {column: row.get(column) for column in columns}
