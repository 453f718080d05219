"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
AsyncConnectionManager owns a lazily created ConnectionPool and hands out
connections through the Driver protocol.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import parse_qsl, unquote, urlsplit

from pydantic import BaseModel

from anyorm.core.exceptions import ConnectionError, PoolError  # noqa: A004

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    pool_size: int = 5
    pool_timeout: float = 30
    extra: dict[str, Any] = {}

    @classmethod
    def from_url(cls, url: str) -> ConnectionConfig:
        """Build a config from a URL such as ``postgresql://u:p@host:5432/db``.

        SQLite follows the usual convention: ``sqlite:///relative.db`` and
        ``sqlite:////absolute/path.db``. Query arguments ``pool_size`` and
        ``pool_timeout`` set the pool; any other argument lands in ``extra``.
        """
        parts = urlsplit(url)
        if not parts.scheme:
            raise ValueError(f"Connection URL has no scheme: {url!r}")

        options: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in parse_qsl(parts.query):
            if key in ("pool_size", "pool_timeout"):
                options[key] = value
            else:
                extra[key] = value

        return cls(
            driver=parts.scheme,
            host=parts.hostname,
            port=parts.port,
            user=unquote(parts.username) if parts.username else None,
            password=unquote(parts.password) if parts.password else None,
            database=unquote(parts.path[1:]),
            extra=extra,
            **options,
        )


class ConnectionPool:
    """Bounded async pool; connections are opened on demand up to ``pool_size``.

    Acquiring suspends until a connection is idle. Waiting longer than
    ``pool_timeout`` seconds raises PoolError.
    """

    def __init__(self, driver: Any, config: ConnectionConfig) -> None:
        self._driver = driver
        self._config = config
        self._idle: asyncio.Queue[Any] = asyncio.Queue()
        self._connections: list[Any] = []
        self._lock = asyncio.Lock()
        self._closed = False

    def __len__(self) -> int:
        """Number of open connections, idle or in use."""
        return len(self._connections)

    @property
    def idle_count(self) -> int:
        return self._idle.qsize()

    async def acquire(self) -> Any:
        if self._closed:
            raise PoolError("Connection pool is closed")

        try:
            return self._idle.get_nowait()
        except asyncio.QueueEmpty:
            pass

        async with self._lock:
            if len(self._connections) < self._config.pool_size:
                return await self._open()

        try:
            return await asyncio.wait_for(self._idle.get(), timeout=self._config.pool_timeout)
        except asyncio.TimeoutError:
            raise PoolError(
                f"No connection available after {self._config.pool_timeout}s "
                f"(pool_size={self._config.pool_size})"
            ) from None

    async def release(self, connection: Any) -> None:
        if self._closed or connection not in self._connections:
            return
        self._idle.put_nowait(connection)

    async def close(self) -> None:
        """Close every open connection."""
        self._closed = True
        connections, self._connections = self._connections, []
        while not self._idle.empty():
            self._idle.get_nowait()
        for conn in connections:
            await self._driver.close_async(conn)

    def terminate(self) -> None:
        """Synchronously drop every open connection (used at interpreter exit)."""
        self._closed = True
        connections, self._connections = self._connections, []
        for conn in connections:
            self._driver.terminate(conn)

    async def _open(self) -> Any:
        try:
            conn = await self._driver.connect_async(self._config)
        except Exception as e:
            raise ConnectionError(
                f"Failed to connect to {self._config.driver} database "
                f"'{self._config.database}': {e}"
            ) from e
        self._connections.append(conn)
        logger.debug(
            f"Opened {self._config.driver} connection "
            f"{len(self._connections)}/{self._config.pool_size}"
        )
        return conn


def _terminate_at_exit(ref: weakref.WeakMethod) -> None:
    terminate = ref()
    if terminate is not None:
        terminate()


class AsyncConnectionManager:
    """Asynchronous connection manager using the Driver protocol."""

    def __init__(self, config: ConnectionConfig, driver: Any) -> None:
        self.config = config
        self._driver = driver
        self._pool: ConnectionPool | None = None
        self._exit_hook_registered = False

    @property
    def driver(self) -> Any:
        return self._driver

    @property
    def pool(self) -> ConnectionPool | None:
        return self._pool

    def initialize_pool(self) -> ConnectionPool:
        """Initialize the connection pool."""
        if self._pool is None:
            self._pool = ConnectionPool(self._driver, self.config)
            logger.debug(f"Created connection pool for {self.config.driver}")
            if not self._exit_hook_registered:
                # weak so discarded managers can still be collected
                atexit.register(_terminate_at_exit, weakref.WeakMethod(self._terminate_pool))
                self._exit_hook_registered = True
        return self._pool

    async def acquire(self) -> Any:
        return await self.initialize_pool().acquire()

    async def release(self, connection: Any) -> None:
        if self._pool is not None:
            await self._pool.release(connection)

    @asynccontextmanager
    async def get_connection(self):  # type: ignore[no-untyped-def]
        """Get an async connection from the pool as an async context manager."""
        connection = await self.acquire()
        try:
            yield connection
        finally:
            await self.release(connection)

    async def close_pool(self) -> None:
        """Close the async connection pool."""
        if self._pool is not None:
            pool, self._pool = self._pool, None
            await pool.close()
            logger.debug(f"Closed connection pool for {self.config.driver}")

    def _terminate_pool(self) -> None:
        if self._pool is not None:
            pool, self._pool = self._pool, None
            pool.terminate()
