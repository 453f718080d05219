"""Adapter registry - named database adapters and dispatchers.

Build one AdapterRegistry at startup, register every service on it, then
hand it to the MapperRegistry. Lookups are read-only afterwards.

    adapters = AdapterRegistry()
    adapters.register("default", "postgresql://app@localhost/app")
    adapters.register_dispatcher("shard", lambda user_id: f"shard{user_id % 2}")
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Mapping
from typing import Any

from anyorm.core.connection import ConnectionConfig
from anyorm.core.enums import DatabaseBackend
from anyorm.core.exceptions import AdapterError, UnknownAdapterError

logger = logging.getLogger(__name__)

DispatcherFunction = Callable[..., str]

# Backend → (module_path, adapter_class)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str]] = {
    DatabaseBackend.MYSQL: ("anyorm.adapters.mysql", "MysqlAdapter"),
    DatabaseBackend.POSTGRESQL: ("anyorm.adapters.postgresql", "PostgresqlAdapter"),
    DatabaseBackend.SQLITE: ("anyorm.adapters.sqlite", "SqliteAdapter"),
}


def _to_config(config: ConnectionConfig | Mapping[str, Any] | str) -> ConnectionConfig:
    if isinstance(config, ConnectionConfig):
        return config
    if isinstance(config, str):
        return ConnectionConfig.from_url(config)
    return ConnectionConfig.model_validate(dict(config))


def create_adapter(
    config: ConnectionConfig | Mapping[str, Any] | str,
    driver: Any | None = None,
) -> Any:
    """Construct the dialect adapter for *config*.

    Raises:
        UnsupportedClientError: If the driver name is not recognized.
    """
    config = _to_config(config)
    backend = DatabaseBackend.from_driver(config.driver)
    module_path, cls_name = _ADAPTER_MAP[backend]

    try:
        module = importlib.import_module(module_path)
        adapter_cls = getattr(module, cls_name)
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{config.driver}': {e}") from e

    return adapter_cls(config, driver=driver)


class AdapterRegistry:
    """Named adapters plus optional per-name dispatchers."""

    def __init__(self) -> None:
        self._adapters: dict[str, Any] = {}
        self._dispatchers: dict[str, DispatcherFunction] = {}

    def register(
        self,
        name: str,
        config: ConnectionConfig | Mapping[str, Any] | str,
        driver: Any | None = None,
    ) -> Any:
        """Build and register an adapter for *config*. Returns the adapter.

        Raises:
            UnsupportedClientError: If the configured driver is unknown.
        """
        adapter = create_adapter(config, driver=driver)
        return self.register_adapter(name, adapter)

    def register_adapter(self, name: str, adapter: Any) -> Any:
        """Register a pre-built adapter under *name* (last registration wins)."""
        self._adapters[name] = adapter
        logger.debug(f"Registered adapter '{name}': {adapter!r}")
        return adapter

    def register_dispatcher(self, name: str, dispatcher: DispatcherFunction) -> None:
        """Route lookups of *name* through ``dispatcher(*args)`` to a concrete name."""
        self._dispatchers[name] = dispatcher

    def get(self, name: str, *args: Any) -> Any:
        """Look up an adapter, applying the dispatcher registered for *name*.

        Raises:
            UnknownAdapterError: If no adapter matches the resolved name.
        """
        dispatcher = self._dispatchers.get(name)
        if dispatcher is not None:
            name = dispatcher(*args)

        try:
            return self._adapters[name]
        except KeyError:
            raise UnknownAdapterError(name) from None

    def has(self, name: str) -> bool:
        return name in self._adapters

    @property
    def names(self) -> list[str]:
        return sorted(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)

    async def close_all(self) -> None:
        """Disconnect every registered adapter."""
        for adapter in self._adapters.values():
            await adapter.disconnect()
