"""Column type registry - maps type names to column classes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from anyorm.columns.base import AnyColumn, Column
from anyorm.columns.types import (
    IntegerColumn,
    NumericColumn,
    SequenceColumn,
    TextColumn,
    UUIDColumn,
)
from anyorm.core.exceptions import UnknownColumnTypeError

logger = logging.getLogger(__name__)

BUILTIN_COLUMN_TYPES: dict[str, type[Column]] = {
    "any": AnyColumn,
    "numeric": NumericColumn,
    "integer": IntegerColumn,
    "text": TextColumn,
    "uuid": UUIDColumn,
    "sequence": SequenceColumn,
}


class ColumnRegistry:
    """Registry of column types by name.

    Registering an existing name replaces it, so built-ins can be
    overridden.

    Args:
        types: Initial name → column class mapping.
    """

    def __init__(self, types: Mapping[str, type[Column]] | None = None) -> None:
        self._types: dict[str, type[Column]] = dict(types or {})

    @classmethod
    def with_builtins(cls) -> ColumnRegistry:
        """A registry preloaded with any, numeric, integer, text, uuid and sequence."""
        return cls(BUILTIN_COLUMN_TYPES)

    def register(self, name: str, column_class: type[Column]) -> type[Column]:
        self._types[name] = column_class
        logger.debug(f"Registered column type '{name}': {column_class.__name__}")
        return column_class

    def get_class(self, name: str) -> type[Column]:
        """Look up the column class registered as *name*.

        Raises:
            UnknownColumnTypeError: If *name* is not registered.
        """
        try:
            return self._types[name]
        except KeyError:
            raise UnknownColumnTypeError(name) from None

    def create(
        self,
        name: str,
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Column:
        """Construct a column of type *name* with *options* over the type defaults.

        Raises:
            UnknownColumnTypeError: If *name* is not registered.
        """
        column_class = self.get_class(name)
        return column_class(**{**(options or {}), **kwargs})

    def has(self, name: str) -> bool:
        return name in self._types

    @property
    def names(self) -> list[str]:
        """Registered type names, sorted alphabetically."""
        return sorted(self._types)

    def __len__(self) -> int:
        return len(self._types)
