"""Attribute declarations and mapper options.

Frozen value objects built from an entity class's ``attributes`` and
``mapper_options`` declarations when the class is registered.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class Attribute:
    """Binding of an attribute name to a column type name and its options."""

    name: str
    type: str = "any"
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def primary(self) -> bool:
        return bool(self.options.get("primary", False))

    @classmethod
    def from_declaration(cls, name: str, declaration: Any) -> Attribute:
        """Accept ``"text"``, ``{"type": "text", "nullable": True}`` or an Attribute."""
        if isinstance(declaration, Attribute):
            return declaration
        if isinstance(declaration, str):
            return cls(name=name, type=declaration)
        if declaration is None:
            return cls(name=name)

        options = dict(declaration)
        type_name = options.pop("type", "any")
        return cls(name=name, type=type_name, options=options)


class MapperOptions(BaseModel):
    """Where an entity class is stored.

    ``service`` names an adapter in the AdapterRegistry and ``collection``
    the table, optionally schema-qualified (``schema.table``).
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    service: str = "default"
    collection: str
    readonly: bool = False
