"""Database backend enumeration."""

from __future__ import annotations

from enum import Enum

from anyorm.core.exceptions import UnsupportedClientError


class DatabaseBackend(Enum):
    """Supported database backends."""

    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"

    @classmethod
    def from_driver(cls, driver: str) -> DatabaseBackend:
        """Resolve a driver name or alias (``pg``, ``mysql2``...) to a backend."""
        try:
            return _DRIVER_ALIASES[driver.lower()]
        except KeyError:
            raise UnsupportedClientError(driver) from None


_DRIVER_ALIASES: dict[str, DatabaseBackend] = {
    "mysql": DatabaseBackend.MYSQL,
    "mysql2": DatabaseBackend.MYSQL,
    "aiomysql": DatabaseBackend.MYSQL,
    "postgresql": DatabaseBackend.POSTGRESQL,
    "postgres": DatabaseBackend.POSTGRESQL,
    "pg": DatabaseBackend.POSTGRESQL,
    "psycopg": DatabaseBackend.POSTGRESQL,
    "sqlite": DatabaseBackend.SQLITE,
    "sqlite3": DatabaseBackend.SQLITE,
    "aiosqlite": DatabaseBackend.SQLITE,
}
