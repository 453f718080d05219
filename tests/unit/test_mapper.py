"""Unit tests for Mapper and MapperRegistry against recording drivers."""

from __future__ import annotations

import re

import pytest

from anyorm.adapters.mysql import MysqlAdapter
from anyorm.adapters.postgresql import PostgresqlAdapter
from anyorm.core.exceptions import (
    FreshEntityError,
    MapperConfigurationError,
    ReadonlyMapperError,
    UndefinedPropertyError,
    UnknownAdapterError,
    UnsupportedReturningError,
)
from anyorm.core.registry import AdapterRegistry
from anyorm.core.statement import QueryResult
from anyorm.mapping import Entity, MapperOptions, MapperRegistry


class User(Entity):
    attributes = {
        "id": {"type": "integer", "primary": True, "auto_increment": True},
        "name": "text",
        "score": {"type": "numeric", "nullable": True},
    }
    mapper_options = {"service": "default", "collection": "users"}


class Token(Entity):
    attributes = {
        "token": {"type": "uuid", "primary": True},
        "seq": "sequence",
        "label": "text",
    }
    mapper_options = MapperOptions(service="default", collection="auth.tokens")


class Country(Entity):
    attributes = {"code": {"type": "text", "primary": True}, "name": "text"}
    mapper_options = {"service": "default", "collection": "countries", "readonly": True}


def _registry(adapter: object) -> MapperRegistry:
    adapters = AdapterRegistry()
    adapters.register_adapter("default", adapter)
    registry = MapperRegistry(adapters=adapters)
    for entity_class in (User, Token, Country):
        registry.register(entity_class)
    return registry


@pytest.fixture
def mysql_registry(mysql_adapter: MysqlAdapter) -> MapperRegistry:
    return _registry(mysql_adapter)


@pytest.fixture
def pg_registry(pg_adapter: PostgresqlAdapter) -> MapperRegistry:
    return _registry(pg_adapter)


class TestMapperRegistry:
    def test_register_binds_mapper(self, mysql_registry: MapperRegistry) -> None:
        mapper = mysql_registry.get(User)
        assert User.get_mapper() is mapper
        assert User in mysql_registry
        assert mapper.primary_key == "id"
        assert mapper.collection == "users"
        assert mapper.readonly is False

    def test_register_as_decorator(self) -> None:
        registry = MapperRegistry()

        @registry.register
        class Tag(Entity):
            attributes = {"id": {"type": "integer", "primary": True}}
            mapper_options = {"collection": "tags"}

        assert registry.get(Tag).options.service == "default"

    def test_missing_primary_key(self) -> None:
        class Log(Entity):
            attributes = {"message": "text"}
            mapper_options = {"collection": "logs"}

        with pytest.raises(MapperConfigurationError, match="primary"):
            MapperRegistry().register(Log)

    def test_missing_collection(self) -> None:
        class Nowhere(Entity):
            attributes = {"id": {"type": "integer", "primary": True}}

        with pytest.raises(MapperConfigurationError, match="Nowhere"):
            MapperRegistry().register(Nowhere)

    def test_column_cached(self, mysql_registry: MapperRegistry) -> None:
        mapper = mysql_registry.get(User)
        assert mapper.get_column("name") is mapper.get_column("name")

    def test_get_attribute_undefined(self, mysql_registry: MapperRegistry) -> None:
        with pytest.raises(UndefinedPropertyError):
            mysql_registry.get(User).get_attribute("email")

    def test_unknown_service(self) -> None:
        registry = MapperRegistry()
        registry.register(User)
        with pytest.raises(UnknownAdapterError, match="default"):
            _ = User.get_mapper().adapter

    def test_adapter_memoized(self, mysql_registry: MapperRegistry, mysql_adapter: MysqlAdapter) -> None:
        mapper = mysql_registry.get(User)
        assert mapper.adapter is mysql_adapter
        assert mapper.adapter is mapper.adapter


class TestMysqlMapper:
    async def test_insert_reads_generated_id(self, mysql_registry, mysql_driver) -> None:
        mysql_driver.queue(QueryResult(row_count=1, last_row_id=7))
        user = User(name="Alice")

        assert await user.save() is user

        assert mysql_driver.last_sql == "INSERT INTO `users` (`name`) VALUES (%s)"
        assert mysql_driver.last_params == ["Alice"]
        assert user.get("id") == 7
        assert user.is_fresh() is False
        assert user.is_dirty() is False

    async def test_insert_explicit_id(self, mysql_registry, mysql_driver) -> None:
        mysql_driver.queue(QueryResult(row_count=1, last_row_id=0))
        await User(id=5, name="Bob", score="1.5").save()

        assert mysql_driver.last_sql == (
            "INSERT INTO `users` (`id`, `name`, `score`) VALUES (%s, %s, %s)"
        )
        assert mysql_driver.last_params == [5, "Bob", 1.5]

    async def test_update_sends_only_changes(self, mysql_registry, mysql_driver) -> None:
        mysql_driver.queue(QueryResult(row_count=1, last_row_id=3), QueryResult(row_count=1))
        user = await User(name="Alice", score=1).save()

        user.set("score", 2)
        await user.save()

        assert mysql_driver.last_sql == "UPDATE `users` SET `score` = %s WHERE `id` = %s"
        assert mysql_driver.last_params == [2.0, 3]
        assert user.is_dirty() is False

    async def test_save_without_changes_is_noop(self, mysql_registry, mysql_driver) -> None:
        mysql_driver.queue(QueryResult(row_count=1, last_row_id=3))
        user = await User(name="Alice").save()
        await user.save()
        await user.save()
        assert len(mysql_driver.statements) == 1
        assert user.get("id") == 3

    async def test_destroy(self, mysql_registry, mysql_driver) -> None:
        mysql_driver.queue(QueryResult(row_count=1, last_row_id=3), QueryResult(row_count=1))
        user = await User(name="Alice").save()

        assert await user.destroy() is True
        assert mysql_driver.last_sql == "DELETE FROM `users` WHERE `id` = %s"
        assert mysql_driver.last_params == [3]

    async def test_destroy_fresh(self, mysql_registry) -> None:
        with pytest.raises(FreshEntityError):
            await User(name="Alice").destroy()

    async def test_find(self, mysql_registry, mysql_driver) -> None:
        mysql_driver.queue(
            QueryResult(rows=[{"id": 9, "name": "Carol", "score": "2.50", "extra": "x"}])
        )
        user = await User.find("9")

        assert mysql_driver.last_sql == "SELECT * FROM `users` WHERE `id` = %s LIMIT 1"
        assert mysql_driver.last_params == [9]
        assert isinstance(user, User)
        assert user.values == {"id": 9, "name": "Carol", "score": 2.5}
        assert user.is_fresh() is False
        assert user.is_dirty() is False

    async def test_find_bigint_id_keeps_precision(self, mysql_registry, mysql_driver) -> None:
        mysql_driver.queue(QueryResult(rows=[{"id": 9007199254740993, "name": "Big"}]))
        user = await User.find("9007199254740993")

        assert mysql_driver.last_params == [9007199254740993]
        assert user.get("id") == 9007199254740993

    async def test_find_no_match(self, mysql_registry, mysql_driver) -> None:
        mysql_driver.queue(QueryResult(rows=[]))
        assert await User.find(404) is None

    async def test_find_none_id(self, mysql_registry, mysql_driver) -> None:
        assert await User.find(None) is None
        assert mysql_driver.statements == []

    async def test_readonly(self, mysql_registry, mysql_driver) -> None:
        with pytest.raises(ReadonlyMapperError, match="countries"):
            await Country(code="NL", name="Netherlands").save()

        mysql_driver.queue(QueryResult(rows=[{"code": "NL", "name": "Netherlands"}]))
        country = await Country.find("NL")
        with pytest.raises(ReadonlyMapperError):
            await country.destroy()

    async def test_generated_defaults_are_materialized(self, mysql_registry, mysql_driver) -> None:
        token = Token(label="api")
        await token.save()

        sql, params = mysql_driver.statements[-1]
        assert sql == "INSERT INTO `auth`.`tokens` (`token`, `seq`, `label`) VALUES (%s, %s, %s)"
        assert re.match(r"^[0-9a-f-]{36}$", params[0])
        assert token.get("token") == params[0]
        assert token.get("seq") == params[1]

    async def test_reading_unset_sequence_does_not_consume_numbers(
        self, mysql_registry, mysql_driver
    ) -> None:
        token = Token(label="api")
        assert token.get("seq") == 1
        assert token.get("seq") == 1
        assert token.to_dict()["seq"] == 1

        await token.save()

        _, params = mysql_driver.statements[-1]
        assert params[1] == 1
        assert token.get("seq") == 1
        assert Token(label="next").get("seq") == 2

    async def test_two_auto_increment_columns_unsupported(self, mysql_registry, mysql_driver) -> None:
        class Pair(Entity):
            attributes = {
                "id": {"type": "integer", "primary": True, "auto_increment": True},
                "counter": {"type": "integer", "auto_increment": True},
            }
            mapper_options = {"collection": "pairs"}

        mysql_registry.register(Pair)
        pair = Pair()
        with pytest.raises(UnsupportedReturningError):
            await pair.save()
        assert pair.is_fresh() is True
        assert mysql_driver.statements == []


class TestPostgresqlMapper:
    async def test_insert_uses_returning(self, pg_registry, pg_driver) -> None:
        pg_driver.queue(QueryResult(rows=[{"id": 11}], row_count=1))
        user = await User(name="Alice").save()

        assert pg_driver.last_sql == 'INSERT INTO "users" ("name") VALUES ($1) RETURNING "id"'
        assert user.get("id") == 11

    async def test_update_keyed_by_persisted_primary(self, pg_registry, pg_driver) -> None:
        pg_driver.queue(QueryResult(rows=[{"code": "NL", "name": "Holland"}]))
        country = await Country.find("NL")
        assert country.get("name") == "Holland"

        pg_driver.queue(QueryResult(rows=[{"id": 4}], row_count=1), QueryResult(row_count=1))
        user = await User(name="Alice").save()
        user.set("name", "Alicia").set("score", None)
        await user.save()

        assert pg_driver.last_sql == 'UPDATE "users" SET "name" = $1, "score" = $2 WHERE "id" = $3'
        assert pg_driver.last_params == ["Alicia", None, 4]

    async def test_transaction_passed_through(self, pg_registry, pg_driver, pg_adapter) -> None:
        pg_driver.queue(QueryResult(rows=[{"id": 1}], row_count=1))
        async with pg_adapter.transaction() as trx:
            await User(name="Alice").save(transaction=trx)

        assert pg_driver.events == ["begin", "commit"]
        assert pg_driver.opened == 1
