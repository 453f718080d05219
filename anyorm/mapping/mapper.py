"""Mapper - persists entities of one class through a named adapter.

The mapper owns the attribute → column type bindings of its entity
class. Column instances are built on first access and cached for the
mapper's lifetime; the adapter is resolved by service name on first use.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from anyorm.columns.base import Column
from anyorm.columns.registry import ColumnRegistry
from anyorm.core.exceptions import (
    FreshEntityError,
    MapperConfigurationError,
    ReadonlyMapperError,
    UndefinedPropertyError,
)
from anyorm.core.registry import AdapterRegistry
from anyorm.core.transaction import Transaction
from anyorm.mapping.attribute import Attribute, MapperOptions

if TYPE_CHECKING:
    from anyorm.mapping.entity import Entity

logger = logging.getLogger(__name__)


class Mapper:
    """Find, save and destroy entities of *entity_class*.

    Args:
        entity_class: The Entity subclass this mapper persists.
        options: Service, collection and readonly flag.
        attributes: Attribute declarations by name.
        columns: Registry used to build column types.
        adapters: Registry used to resolve the service adapter.

    Raises:
        MapperConfigurationError: If the class does not declare exactly one
            primary attribute.
    """

    def __init__(
        self,
        entity_class: type[Entity],
        options: MapperOptions,
        attributes: Mapping[str, Attribute],
        columns: ColumnRegistry,
        adapters: AdapterRegistry,
    ) -> None:
        self.entity_class = entity_class
        self.options = options
        self._attributes = dict(attributes)
        self._columns = columns
        self._adapters = adapters
        self._column_cache: dict[str, Column] = {}
        self._adapter: Any = None

        primary = [a.name for a in self._attributes.values() if a.primary]
        if len(primary) != 1:
            raise MapperConfigurationError(
                f"{entity_class.__name__} must declare exactly one primary attribute, "
                f"found {primary}"
            )
        self.primary_key: str = primary[0]

    def __repr__(self) -> str:
        return f"<Mapper {self.entity_class.__name__} -> {self.options.service}:{self.collection}>"

    @property
    def collection(self) -> str:
        return self.options.collection

    @property
    def readonly(self) -> bool:
        return self.options.readonly

    @property
    def attributes(self) -> dict[str, Attribute]:
        return dict(self._attributes)

    @property
    def adapter(self) -> Any:
        """The service adapter, looked up once and then memoized."""
        if self._adapter is None:
            self._adapter = self._adapters.get(self.options.service)
        return self._adapter

    # --- Attributes ---

    def has_attribute(self, key: str) -> bool:
        return key in self._attributes

    def get_attribute(self, key: str) -> Attribute:
        try:
            return self._attributes[key]
        except KeyError:
            raise UndefinedPropertyError(self.entity_class.__name__, key) from None

    def get_column(self, key: str) -> Column:
        """Column type instance for *key*, built on first access."""
        column = self._column_cache.get(key)
        if column is None:
            attribute = self.get_attribute(key)
            column = self._columns.create(attribute.type, attribute.options)
            self._column_cache[key] = column
        return column

    # --- Persistence ---

    async def find(self, id: Any, transaction: Transaction | None = None) -> Entity | None:
        """Load the entity whose primary key equals *id*, or None."""
        if id is None:
            return None

        rows = await self.adapter.select(
            self.collection,
            where=self._primary_predicate(),
            where_params=[self.get_column(self.primary_key).store(id)],
            limit=1,
            transaction=transaction,
        )
        if not rows:
            return None
        return self.hydrate(rows[0])

    def hydrate(self, row: Mapping[str, Any]) -> Entity:
        """Build a persisted entity from a storage row; undeclared columns are ignored."""
        values = {
            key: self.get_column(key).retrieve(value)
            for key, value in row.items()
            if self.has_attribute(key)
        }
        entity = self.entity_class()
        return entity.mark_persisted(values)

    async def save(self, entity: Entity, transaction: Transaction | None = None) -> Entity:
        """Insert a fresh entity or update the dirty attributes of a persisted one."""
        if self.readonly:
            raise ReadonlyMapperError(self.collection, "save")

        if entity.is_fresh():
            await self._insert(entity, transaction)
        else:
            await self._update(entity, transaction)
        return entity

    async def destroy(self, entity: Entity, transaction: Transaction | None = None) -> bool:
        """Delete the entity's row. Returns True when a row was removed."""
        if self.readonly:
            raise ReadonlyMapperError(self.collection, "destroy")
        if entity.is_fresh():
            raise FreshEntityError(self.entity_class.__name__, "destroy")

        key = self.get_column(self.primary_key).store(entity.persisted_value(self.primary_key))
        affected = await self.adapter.delete(
            self.collection, self._primary_predicate(), [key], transaction=transaction
        )
        logger.debug(f"Deleted {affected} row(s) from {self.collection} where {self.primary_key}={key!r}")
        return affected > 0

    async def _insert(self, entity: Entity, transaction: Transaction | None) -> None:
        current = entity.values
        values: dict[str, Any] = {}
        returning: list[str] = []

        for name in self._attributes:
            column = self.get_column(name)
            if column.options.auto_increment and current.get(name) is None:
                returning.append(name)
                continue
            if name in current:
                values[name] = column.store(current[name])
                continue

            default = column.get_default_value()
            if default is not None:
                entity.set(name, default)
                values[name] = column.store(entity.values[name])

        result = await self.adapter.insert(
            self.collection, values, returning=returning or None, transaction=transaction
        )
        generated = {
            key: self.get_column(key).retrieve(value)
            for key, value in result.returning_values.items()
        }
        entity.mark_persisted(generated)
        logger.debug(f"Inserted into {self.collection}, generated {generated}")

    async def _update(self, entity: Entity, transaction: Transaction | None) -> None:
        changes = entity.changes()
        if not changes:
            logger.debug(f"Nothing to update in {self.collection}")
            return

        values = {key: self.get_column(key).store(value) for key, value in changes.items()}
        key = self.get_column(self.primary_key).store(entity.persisted_value(self.primary_key))
        await self.adapter.update(
            self.collection, values, self._primary_predicate(), [key], transaction=transaction
        )
        entity.mark_persisted()
        logger.debug(f"Updated {sorted(values)} in {self.collection} where {self.primary_key}={key!r}")

    def _primary_predicate(self) -> str:
        return f"{self.adapter.quote_identifier(self.primary_key)} = ?"
