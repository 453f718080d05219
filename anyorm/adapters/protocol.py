"""Database driver protocol.

A Driver wraps one async DB-API library. Every driver module MUST
implement this protocol; the dialect adapters above it never touch the
library directly. Connections are opened in autocommit mode and
transactions are started explicitly with begin_async().
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from anyorm.core.connection import ConnectionConfig
from anyorm.core.statement import QueryResult


@runtime_checkable
class Driver(Protocol):
    """Asynchronous database driver protocol."""

    @property
    def paramstyle(self) -> str:
        """Placeholder style: 'qmark' (?), 'numeric_dollar' ($1) or 'format' (%s)."""
        ...

    async def connect_async(self, config: ConnectionConfig) -> Any:
        """Open one autocommit connection."""
        ...

    async def close_async(self, connection: Any) -> None:
        """Close a connection."""
        ...

    def terminate(self, connection: Any) -> None:
        """Drop a connection without awaiting (interpreter shutdown)."""
        ...

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: Sequence[Any] = (),
    ) -> QueryResult:
        """Execute SQL in the driver's paramstyle and fetch any rows."""
        ...

    async def begin_async(self, connection: Any) -> None:
        """Start a transaction on the connection."""
        ...

    async def commit_async(self, connection: Any) -> None:
        """Commit the connection's transaction."""
        ...

    async def rollback_async(self, connection: Any) -> None:
        """Roll back the connection's transaction."""
        ...
