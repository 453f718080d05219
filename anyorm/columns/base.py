"""Column options and the base column type.

A column type converts one attribute's value between three forms: what
callers pass in (normalized on ``set``), what is written to the database
(``store``) and what comes back from it (``retrieve``). Options are
immutable, and one instance is shared by every entity of a class.
"""

from __future__ import annotations

import copy
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator


class ColumnOptions(BaseModel):
    """Per-attribute column options.

    Unknown keys are kept as extras so column types can read their own
    settings (``auto_generate``, ``upper_case``...). A primary column is
    always strict and refuses updates.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    nullable: bool = False
    primary: bool = False
    default: Any = None
    protected: bool = False
    strict: bool = False
    refuse_update: bool = False
    auto_increment: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize_primary(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("primary"):
            data = {**data, "strict": True, "refuse_update": True}
        return data


class Column:
    """Base column type; passes values through unchanged."""

    type_name: ClassVar[str] = "any"
    default_options: ClassVar[dict[str, Any]] = {}

    def __init__(self, **options: Any) -> None:
        self._options = ColumnOptions(**{**self.default_options, **options})

    @property
    def options(self) -> ColumnOptions:
        return self._options

    def get_options(self) -> ColumnOptions:
        return self._options

    def option(self, name: str, default: Any = None) -> Any:
        """Read a declared or extra option."""
        value = getattr(self._options, name, None)
        return default if value is None else value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._options.model_dump()}>"

    def normalize(self, value: Any) -> Any:
        return value

    def is_null(self, value: Any) -> bool:
        return value is None

    def store(self, value: Any) -> Any:
        """External value → storage representation."""
        return None if self.is_null(value) else self.normalize(value)

    def retrieve(self, value: Any) -> Any:
        """Storage representation → external value."""
        return None if self.is_null(value) else self.normalize(value)

    def clone(self, value: Any) -> Any:
        return copy.deepcopy(value)

    def get_default_value(self) -> Any:
        return copy.deepcopy(self._options.default)

    def peek_default_value(self) -> Any:
        """Default for reading an unset attribute; must not consume generator state."""
        return self.get_default_value()


class AnyColumn(Column):
    """Pass-through column for values of any type."""

    type_name = "any"
