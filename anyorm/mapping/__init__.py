"""Mapping layer - entities, attributes and mappers."""

from __future__ import annotations

from anyorm.mapping.attribute import Attribute, MapperOptions
from anyorm.mapping.entity import Entity
from anyorm.mapping.mapper import Mapper
from anyorm.mapping.registry import MapperRegistry

__all__ = [
    "Entity",
    "Attribute",
    "MapperOptions",
    "Mapper",
    "MapperRegistry",
]
