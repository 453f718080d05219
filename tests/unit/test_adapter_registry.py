"""Unit tests for AdapterRegistry and driver resolution."""

from __future__ import annotations

import pytest

from anyorm.adapters.mysql import MysqlAdapter
from anyorm.adapters.postgresql import PostgresqlAdapter
from anyorm.adapters.sqlite import SqliteAdapter
from anyorm.core.connection import ConnectionConfig
from anyorm.core.enums import DatabaseBackend
from anyorm.core.exceptions import UnknownAdapterError, UnsupportedClientError
from anyorm.core.registry import AdapterRegistry, create_adapter


class TestDatabaseBackend:
    @pytest.mark.parametrize(
        ("driver", "backend"),
        [
            ("mysql", DatabaseBackend.MYSQL),
            ("mysql2", DatabaseBackend.MYSQL),
            ("aiomysql", DatabaseBackend.MYSQL),
            ("postgresql", DatabaseBackend.POSTGRESQL),
            ("PG", DatabaseBackend.POSTGRESQL),
            ("psycopg", DatabaseBackend.POSTGRESQL),
            ("sqlite3", DatabaseBackend.SQLITE),
        ],
    )
    def test_aliases(self, driver: str, backend: DatabaseBackend) -> None:
        assert DatabaseBackend.from_driver(driver) is backend

    def test_unknown_driver(self) -> None:
        with pytest.raises(UnsupportedClientError, match="oracle"):
            DatabaseBackend.from_driver("oracle")


class TestCreateAdapter:
    def test_from_config(self, pg_config: ConnectionConfig) -> None:
        adapter = create_adapter(pg_config)
        assert isinstance(adapter, PostgresqlAdapter)
        assert adapter.config is pg_config

    def test_from_mapping(self) -> None:
        adapter = create_adapter({"driver": "mysql2", "database": "app", "host": "db"})
        assert isinstance(adapter, MysqlAdapter)
        assert adapter.config.host == "db"

    def test_from_url(self) -> None:
        adapter = create_adapter("sqlite:///app.db")
        assert isinstance(adapter, SqliteAdapter)
        assert adapter.config.database == "app.db"

    def test_custom_driver(self, pg_config: ConnectionConfig, pg_driver) -> None:
        assert create_adapter(pg_config, driver=pg_driver).driver is pg_driver

    def test_unknown_driver(self) -> None:
        with pytest.raises(UnsupportedClientError):
            create_adapter({"driver": "mssql", "database": "app"})


class TestAdapterRegistry:
    def test_register_and_get(self) -> None:
        registry = AdapterRegistry()
        adapter = registry.register("default", "postgresql://app@localhost/app")
        assert registry.get("default") is adapter
        assert registry.has("default")
        assert registry.names == ["default"]
        assert len(registry) == 1

    def test_unknown_name(self) -> None:
        with pytest.raises(UnknownAdapterError, match="missing"):
            AdapterRegistry().get("missing")

    def test_last_registration_wins(self, mysql_adapter: MysqlAdapter, pg_adapter: PostgresqlAdapter) -> None:
        registry = AdapterRegistry()
        registry.register_adapter("default", mysql_adapter)
        registry.register_adapter("default", pg_adapter)
        assert registry.get("default") is pg_adapter

    def test_dispatcher(self, mysql_adapter: MysqlAdapter, pg_adapter: PostgresqlAdapter) -> None:
        registry = AdapterRegistry()
        registry.register_adapter("shard0", mysql_adapter)
        registry.register_adapter("shard1", pg_adapter)
        registry.register_dispatcher("shard", lambda user_id: f"shard{user_id % 2}")

        assert registry.get("shard", 10) is mysql_adapter
        assert registry.get("shard", 7) is pg_adapter

    def test_dispatcher_to_unknown_name(self) -> None:
        registry = AdapterRegistry()
        registry.register_dispatcher("shard", lambda: "shard9")
        with pytest.raises(UnknownAdapterError, match="shard9"):
            registry.get("shard")

    async def test_close_all(
        self, mysql_adapter: MysqlAdapter, pg_adapter: PostgresqlAdapter, mysql_driver, pg_driver
    ) -> None:
        registry = AdapterRegistry()
        registry.register_adapter("a", mysql_adapter)
        registry.register_adapter("b", pg_adapter)
        await mysql_adapter.execute("SELECT 1")
        await pg_adapter.execute("SELECT 1")

        await registry.close_all()

        assert mysql_driver.events == ["close 1"]
        assert pg_driver.events == ["close 1"]
