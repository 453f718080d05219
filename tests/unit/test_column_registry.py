"""Unit tests for ColumnRegistry."""

from __future__ import annotations

import pytest

from anyorm.columns import BUILTIN_COLUMN_TYPES, AnyColumn, ColumnRegistry, TextColumn
from anyorm.core.exceptions import UnknownColumnTypeError


class UpperText(TextColumn):
    type_name = "text"

    def normalize(self, value: object) -> object:
        return str(super().normalize(value)).upper()


class TestColumnRegistry:
    def test_builtins(self) -> None:
        registry = ColumnRegistry.with_builtins()
        assert registry.names == sorted(BUILTIN_COLUMN_TYPES)
        assert len(registry) == len(BUILTIN_COLUMN_TYPES)

    def test_empty_registry(self) -> None:
        registry = ColumnRegistry()
        assert len(registry) == 0
        assert registry.has("any") is False

    def test_unknown_type(self) -> None:
        registry = ColumnRegistry.with_builtins()
        with pytest.raises(UnknownColumnTypeError, match="foobar"):
            registry.create("foobar")

    def test_register_new_name(self) -> None:
        registry = ColumnRegistry.with_builtins()
        registry.register("json", AnyColumn)
        assert registry.has("json")
        assert isinstance(registry.create("json"), AnyColumn)

    def test_last_registration_wins(self) -> None:
        registry = ColumnRegistry.with_builtins()
        registry.register("text", UpperText)
        column = registry.create("text")
        assert isinstance(column, UpperText)
        assert column.normalize("abc") == "ABC"

    def test_registries_are_independent(self) -> None:
        first = ColumnRegistry.with_builtins()
        second = ColumnRegistry.with_builtins()
        first.register("text", UpperText)
        assert not isinstance(second.create("text"), UpperText)

    def test_create_merges_mapping_and_keywords(self) -> None:
        registry = ColumnRegistry.with_builtins()
        column = registry.create("text", {"nullable": True, "default": "a"}, default="b")
        assert column.options.nullable is True
        assert column.options.default == "b"

    def test_type_default_options(self) -> None:
        class Flag(AnyColumn):
            default_options = {"default": False, "nullable": True}

        registry = ColumnRegistry()
        registry.register("flag", Flag)
        assert registry.create("flag").get_default_value() is False
        assert registry.create("flag", nullable=False).options.nullable is False
