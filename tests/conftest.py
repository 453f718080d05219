"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest

from anyorm.adapters.mysql import MysqlAdapter
from anyorm.adapters.postgresql import PostgresqlAdapter
from anyorm.core.connection import ConnectionConfig
from anyorm.core.statement import QueryResult


class FakeConnection:
    def __init__(self, number: int) -> None:
        self.number = number

    def __repr__(self) -> str:
        return f"<FakeConnection {self.number}>"


class RecordingDriver:
    """In-memory Driver that records statements and replays queued results."""

    def __init__(self, paramstyle: str = "qmark") -> None:
        self._paramstyle = paramstyle
        self.statements: list[tuple[str, list[Any]]] = []
        self.events: list[str] = []
        self.results: list[QueryResult | Exception] = []
        self.opened = 0

    @property
    def paramstyle(self) -> str:
        return self._paramstyle

    def queue(self, *results: QueryResult | Exception) -> RecordingDriver:
        self.results.extend(results)
        return self

    async def connect_async(self, config: ConnectionConfig) -> FakeConnection:
        self.opened += 1
        return FakeConnection(self.opened)

    async def close_async(self, connection: Any) -> None:
        self.events.append(f"close {connection.number}")

    def terminate(self, connection: Any) -> None:
        self.events.append(f"terminate {connection.number}")

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: Sequence[Any] = (),
    ) -> QueryResult:
        self.statements.append((sql, list(params)))
        if not self.results:
            return QueryResult()
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def begin_async(self, connection: Any) -> None:
        self.events.append("begin")

    async def commit_async(self, connection: Any) -> None:
        self.events.append("commit")

    async def rollback_async(self, connection: Any) -> None:
        self.events.append("rollback")

    @property
    def last_sql(self) -> str:
        return self.statements[-1][0]

    @property
    def last_params(self) -> list[Any]:
        return self.statements[-1][1]


@pytest.fixture
def mysql_config() -> ConnectionConfig:
    return ConnectionConfig(driver="mysql", database="app", pool_size=2, pool_timeout=0.1)


@pytest.fixture
def pg_config() -> ConnectionConfig:
    return ConnectionConfig(driver="postgresql", database="app", pool_size=2, pool_timeout=0.1)


@pytest.fixture
def mysql_driver() -> RecordingDriver:
    return RecordingDriver(paramstyle="format")


@pytest.fixture
def pg_driver() -> RecordingDriver:
    return RecordingDriver(paramstyle="numeric_dollar")


@pytest.fixture
def mysql_adapter(mysql_config: ConnectionConfig, mysql_driver: RecordingDriver) -> MysqlAdapter:
    """MySQL dialect over a recording driver."""
    return MysqlAdapter(mysql_config, driver=mysql_driver)


@pytest.fixture
def pg_adapter(pg_config: ConnectionConfig, pg_driver: RecordingDriver) -> PostgresqlAdapter:
    """PostgreSQL dialect over a recording driver."""
    return PostgresqlAdapter(pg_config, driver=pg_driver)


@pytest.fixture
def driver_factory() -> type[RecordingDriver]:
    """The RecordingDriver class, for tests that build or subclass their own."""
    return RecordingDriver
