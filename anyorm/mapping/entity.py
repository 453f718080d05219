"""Entity data model.

An Entity keeps its working values next to a staged copy taken at the
last snapshot. The entity is dirty whenever the two differ structurally.
Values are normalized by the attribute's column type on ``set``, and
persistence is delegated to the mapper bound to the class by
``MapperRegistry.register``.

    class User(Entity):
        attributes = {
            "id": {"type": "integer", "primary": True, "auto_increment": True},
            "name": "text",
        }
        mapper_options = {"service": "default", "collection": "users"}

    registry.register(User)
    user = await User(name="Alice").save()
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from anyorm.core.exceptions import (
    EntityNotRegisteredError,
    RefuseUpdateError,
    UndefinedPropertyError,
)
from anyorm.core.transaction import Transaction

if TYPE_CHECKING:
    from anyorm.mapping.attribute import MapperOptions
    from anyorm.mapping.mapper import Mapper

_MISSING = object()


class Entity:
    """Base class for mapped entities."""

    attributes: ClassVar[Mapping[str, Any]] = {}
    mapper_options: ClassVar[MapperOptions | Mapping[str, Any]] = {}

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._fresh = True
        self._values: dict[str, Any] = {}
        self._staged: dict[str, Any] = {}
        self.snapshot()

        for key, value in {**(values or {}), **kwargs}.items():
            self.set(key, value)

    def __repr__(self) -> str:
        state = "fresh" if self._fresh else "persisted"
        return f"<{type(self).__name__} {state} {self._values!r}>"

    @classmethod
    def get_mapper(cls) -> Mapper:
        """The mapper bound to this exact class at registration."""
        mapper = cls.__dict__.get("_mapper")
        if mapper is None:
            raise EntityNotRegisteredError(cls.__name__)
        return mapper

    # --- State ---

    @property
    def values(self) -> dict[str, Any]:
        """Shallow copy of the working values."""
        return dict(self._values)

    def is_fresh(self) -> bool:
        return self._fresh

    def is_dirty(self) -> bool:
        return self._values != self._staged["values"]

    def changes(self) -> dict[str, Any]:
        """Working values that differ from the last snapshot."""
        staged = self._staged["values"]
        return {
            key: value
            for key, value in self._values.items()
            if staged.get(key, _MISSING) != value
        }

    def persisted_value(self, key: str) -> Any:
        """Value of *key* as of the last snapshot."""
        return self._staged["values"].get(key)

    def rollback(self) -> Entity:
        """Restore values and freshness from the last snapshot."""
        self._values = copy.deepcopy(self._staged["values"])
        self._fresh = self._staged["fresh"]
        return self

    def snapshot(self) -> Entity:
        """Make the current state the new dirty-check baseline."""
        self._staged = {"fresh": self._fresh, "values": copy.deepcopy(self._values)}
        return self

    def mark_persisted(self, values: Mapping[str, Any] | None = None) -> Entity:
        """Record a successful write: apply storage-side values, clear fresh, snapshot.

        Called by the mapper; *values* are already in external form.
        """
        if values:
            self._values.update(values)
        self._fresh = False
        return self.snapshot()

    # --- Attribute access ---

    def has(self, key: str) -> bool:
        return self.get_mapper().has_attribute(key)

    def get(self, key: str) -> Any:
        """Copy of the value of *key*, or the column default when unset.

        Reading a default never consumes generator state; an unset sequence
        shows the number the next insert will take.

        Raises:
            UndefinedPropertyError: If *key* is not a declared attribute.
        """
        column = self.get_mapper().get_column(key)
        if key not in self._values:
            return column.peek_default_value()
        return column.clone(self._values[key])

    def set(self, key: str, value: Any) -> Entity:
        """Normalize *value* through the column type of *key* and store it.

        Raises:
            UndefinedPropertyError: If *key* is not a declared attribute.
            UnexpectColumnValueError: If the column type rejects *value*.
            RefuseUpdateError: If *key* refuses updates and the entity is persisted.
        """
        column = self.get_mapper().get_column(key)
        value = None if column.is_null(value) else column.normalize(value)

        if not self._fresh and column.options.refuse_update:
            persisted = self._staged["values"].get(key, _MISSING)
            if persisted is not _MISSING and persisted != value:
                raise RefuseUpdateError(type(self).__name__, key)

        self._values[key] = value
        return self

    def merge(self, values: Mapping[str, Any]) -> Entity:
        """Set every key of *values*, skipping keys the entity does not declare.

        Other errors stop the merge; keys set before the failing one stay set.
        """
        for key, value in values.items():
            try:
                self.set(key, value)
            except UndefinedPropertyError:
                continue
        return self

    def to_dict(self) -> dict[str, Any]:
        """Attribute values for serialization, without protected attributes."""
        mapper = self.get_mapper()
        return {
            key: self.get(key)
            for key in mapper.attributes
            if not mapper.get_column(key).options.protected
        }

    # --- Persistence ---

    async def save(self, transaction: Transaction | None = None) -> Entity:
        return await self.get_mapper().save(self, transaction=transaction)

    async def destroy(self, transaction: Transaction | None = None) -> bool:
        return await self.get_mapper().destroy(self, transaction=transaction)

    @classmethod
    async def find(cls, id: Any, transaction: Transaction | None = None) -> Entity | None:
        return await cls.get_mapper().find(id, transaction=transaction)
