"""anyorm - typed column model, entity data mapper and dialect-abstracting adapters."""

from __future__ import annotations

from anyorm.adapters.base import DBAdapter
from anyorm.columns import (
    AnyColumn,
    Column,
    ColumnOptions,
    ColumnRegistry,
    IntegerColumn,
    NumericColumn,
    SequenceColumn,
    TextColumn,
    UUIDColumn,
)
from anyorm.core.connection import AsyncConnectionManager, ConnectionConfig, ConnectionPool
from anyorm.core.enums import DatabaseBackend
from anyorm.core.exceptions import (
    AdapterError,
    AnyORMError,
    ColumnError,
    ConnectionError,  # noqa: A004
    EntityError,
    EntityNotRegisteredError,
    FreshEntityError,
    MapperConfigurationError,
    MapperError,
    PoolError,
    ReadonlyMapperError,
    RefuseUpdateError,
    StatementError,
    TransactionError,
    TransactionStateError,
    UndefinedPropertyError,
    UnexpectColumnValueError,
    UnknownAdapterError,
    UnknownColumnTypeError,
    UnsupportedClientError,
    UnsupportedReturningError,
)
from anyorm.core.params import replace_placeholders
from anyorm.core.registry import AdapterRegistry, create_adapter
from anyorm.core.statement import Expr, InsertResult, QueryResult, Statement
from anyorm.core.transaction import Transaction
from anyorm.mapping import Attribute, Entity, Mapper, MapperOptions, MapperRegistry

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionPool",
    "AsyncConnectionManager",
    # Adapters
    "DBAdapter",
    "AdapterRegistry",
    "create_adapter",
    "DatabaseBackend",
    "replace_placeholders",
    # Statements
    "Expr",
    "Statement",
    "QueryResult",
    "InsertResult",
    # Transaction
    "Transaction",
    # Columns
    "Column",
    "ColumnOptions",
    "ColumnRegistry",
    "AnyColumn",
    "NumericColumn",
    "IntegerColumn",
    "TextColumn",
    "UUIDColumn",
    "SequenceColumn",
    # Mapping
    "Entity",
    "Attribute",
    "MapperOptions",
    "Mapper",
    "MapperRegistry",
    # Exceptions
    "AnyORMError",
    "ColumnError",
    "UnknownColumnTypeError",
    "UnexpectColumnValueError",
    "EntityError",
    "UndefinedPropertyError",
    "RefuseUpdateError",
    "MapperError",
    "MapperConfigurationError",
    "EntityNotRegisteredError",
    "ReadonlyMapperError",
    "FreshEntityError",
    "AdapterError",
    "UnknownAdapterError",
    "UnsupportedClientError",
    "UnsupportedReturningError",
    "ConnectionError",
    "PoolError",
    "StatementError",
    "TransactionError",
    "TransactionStateError",
]
