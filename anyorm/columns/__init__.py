"""Column types - value coercion, validation and defaults per attribute."""

from __future__ import annotations

from anyorm.columns.base import AnyColumn, Column, ColumnOptions
from anyorm.columns.registry import BUILTIN_COLUMN_TYPES, ColumnRegistry
from anyorm.columns.types import (
    IntegerColumn,
    NumericColumn,
    SequenceColumn,
    TextColumn,
    UUIDColumn,
)

__all__ = [
    "Column",
    "ColumnOptions",
    "ColumnRegistry",
    "BUILTIN_COLUMN_TYPES",
    "AnyColumn",
    "NumericColumn",
    "IntegerColumn",
    "TextColumn",
    "UUIDColumn",
    "SequenceColumn",
]
