"""anyorm exception hierarchy.

Driver exceptions are wrapped in StatementError; the original error stays
reachable through ``.original`` and the exception chain.
"""

from __future__ import annotations

from typing import Any


class AnyORMError(Exception):
    """Base exception for all anyorm errors."""


# --- Columns ---


class ColumnError(AnyORMError):
    """Base for column type errors."""


class UnknownColumnTypeError(ColumnError):
    """Raised when a column type name is not registered."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unknown column type: '{type_name}'")


class UnexpectColumnValueError(ColumnError):
    """Raised when a value cannot be coerced by its column type."""

    def __init__(self, column: str, value: Any, detail: str | None = None) -> None:
        self.column = column
        self.value = value
        message = f"Unexpected value {value!r} for {column} column"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


# --- Entities ---


class EntityError(AnyORMError):
    """Base for entity data model errors."""


class UndefinedPropertyError(EntityError):
    """Raised on access to an attribute the entity does not declare."""

    def __init__(self, entity: str, key: str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"Undefined property '{key}' on {entity}")


class RefuseUpdateError(EntityError):
    """Raised when a persisted refuse_update attribute is changed."""

    def __init__(self, entity: str, key: str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"Property '{key}' of {entity} refuses update after persistence")


# --- Mappers ---


class MapperError(AnyORMError):
    """Base for mapper errors."""


class MapperConfigurationError(MapperError):
    """Raised when an entity class declares an unusable mapping."""


class EntityNotRegisteredError(MapperError):
    """Raised when an entity class has no mapper bound to it."""

    def __init__(self, entity: str) -> None:
        self.entity = entity
        super().__init__(f"Entity class {entity} is not registered with a MapperRegistry")


class ReadonlyMapperError(MapperError):
    """Raised when a readonly mapper is asked to write."""

    def __init__(self, collection: str, action: str) -> None:
        self.collection = collection
        self.action = action
        super().__init__(f"Cannot {action} on readonly mapper for '{collection}'")


class FreshEntityError(MapperError):
    """Raised when an operation needs a persisted entity but got a fresh one."""

    def __init__(self, entity: str, action: str) -> None:
        self.entity = entity
        self.action = action
        super().__init__(f"Cannot {action} fresh {entity}: it was never persisted")


# --- Adapters ---


class AdapterError(AnyORMError):
    """Base for adapter errors."""


class UnknownAdapterError(AdapterError):
    """Raised when a named adapter lookup misses."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Adapter not registered: '{name}'")


class UnsupportedClientError(AdapterError):
    """Raised when a connection config names an unrecognized driver."""

    def __init__(self, driver: str) -> None:
        self.driver = driver
        super().__init__(f"Unsupported database driver: {driver}")


class UnsupportedReturningError(AdapterError):
    """Raised when more returning columns are requested than the dialect can read."""

    def __init__(self, dialect: str, columns: list[str]) -> None:
        self.dialect = dialect
        self.columns = columns
        super().__init__(
            f"{dialect} adapter can return at most one generated column, got {columns}"
        )


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""


class StatementError(AdapterError):
    """Raised when the driver rejects or fails a statement."""

    def __init__(self, sql: str, original: BaseException) -> None:
        self.sql = sql
        self.original = original
        super().__init__(f"Statement failed: {original} [{sql[:120]}]")


# --- Transaction ---


class TransactionError(AnyORMError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")
