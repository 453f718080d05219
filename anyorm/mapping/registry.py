"""Mapper registry - binds entity classes to mappers once, at startup."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import ValidationError

from anyorm.columns.registry import ColumnRegistry
from anyorm.core.exceptions import EntityNotRegisteredError, MapperConfigurationError
from anyorm.core.registry import AdapterRegistry
from anyorm.mapping.attribute import Attribute, MapperOptions
from anyorm.mapping.entity import Entity
from anyorm.mapping.mapper import Mapper

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=type[Entity])


class MapperRegistry:
    """Builds and owns one Mapper per registered entity class.

    Args:
        columns: Column type registry; defaults to the built-in types.
        adapters: Adapter registry used to resolve each mapper's service.
    """

    def __init__(
        self,
        columns: ColumnRegistry | None = None,
        adapters: AdapterRegistry | None = None,
    ) -> None:
        self.columns = columns if columns is not None else ColumnRegistry.with_builtins()
        self.adapters = adapters if adapters is not None else AdapterRegistry()
        self._mappers: dict[type[Entity], Mapper] = {}

    def register(self, entity_class: E) -> E:
        """Build the mapper for *entity_class* and bind it. Usable as a decorator.

        Raises:
            MapperConfigurationError: If the mapper options or attributes are invalid.
        """
        options = self._mapper_options(entity_class)
        attributes = {
            name: Attribute.from_declaration(name, declaration)
            for name, declaration in entity_class.attributes.items()
        }
        mapper = Mapper(entity_class, options, attributes, self.columns, self.adapters)

        entity_class._mapper = mapper  # type: ignore[attr-defined]
        self._mappers[entity_class] = mapper
        logger.debug(f"Registered {mapper!r}")
        return entity_class

    def get(self, entity_class: type[Entity]) -> Mapper:
        try:
            return self._mappers[entity_class]
        except KeyError:
            raise EntityNotRegisteredError(entity_class.__name__) from None

    def __contains__(self, entity_class: Any) -> bool:
        return entity_class in self._mappers

    def __len__(self) -> int:
        return len(self._mappers)

    @staticmethod
    def _mapper_options(entity_class: type[Entity]) -> MapperOptions:
        declared = entity_class.mapper_options
        if isinstance(declared, MapperOptions):
            return declared
        try:
            return MapperOptions.model_validate(dict(declared))
        except ValidationError as e:
            raise MapperConfigurationError(
                f"Invalid mapper_options on {entity_class.__name__}: {e}"
            ) from e
