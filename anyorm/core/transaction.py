"""Transaction handle.

A Transaction pins one pooled connection. Pass it explicitly through
``transaction=`` to every adapter, mapper or entity call that belongs to
the group; there is no ambient transaction. Used as an async context
manager it commits on success and rolls back on exception.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from anyorm.core.exceptions import TransactionStateError

logger = logging.getLogger(__name__)


class _TxState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """Async transaction context manager over a single pooled connection."""

    def __init__(self, connection_manager: Any) -> None:
        self._connection_manager = connection_manager
        self._driver = connection_manager.driver
        self._connection: Any = None
        self._state = _TxState.IDLE

    @property
    def connection(self) -> Any:
        """The pinned connection; only valid while the transaction is active."""
        self._check_active()
        return self._connection

    @property
    def state(self) -> str:
        return self._state.value

    @property
    def is_active(self) -> bool:
        return self._state == _TxState.ACTIVE

    async def begin(self) -> Transaction:
        if self._state != _TxState.IDLE:
            raise TransactionStateError(self._state.value, "begin")
        self._connection = await self._connection_manager.acquire()
        try:
            await self._driver.begin_async(self._connection)
        except BaseException:
            await self._release()
            raise
        self._state = _TxState.ACTIVE
        logger.debug("Transaction started")
        return self

    async def __aenter__(self) -> Transaction:
        return await self.begin()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state != _TxState.ACTIVE:
            await self._release()
            return
        if exc_type is not None:
            await self.rollback()
        else:
            await self.commit()

    async def commit(self) -> None:
        """Explicitly commit the transaction and release its connection."""
        if self._state != _TxState.ACTIVE:
            raise TransactionStateError(self._state.value, "commit")
        try:
            await self._driver.commit_async(self._connection)
            self._state = _TxState.COMMITTED
            logger.debug("Transaction committed")
        finally:
            await self._release()

    async def rollback(self) -> None:
        """Explicitly roll back the transaction and release its connection."""
        if self._state != _TxState.ACTIVE:
            raise TransactionStateError(self._state.value, "rollback")
        try:
            await self._driver.rollback_async(self._connection)
            self._state = _TxState.ROLLED_BACK
            logger.debug("Transaction rolled back")
        finally:
            await self._release()

    def _check_active(self) -> None:
        if self._state != _TxState.ACTIVE:
            raise TransactionStateError(self._state.value, "execute")

    async def _release(self) -> None:
        if self._connection is not None:
            connection, self._connection = self._connection, None
            await self._connection_manager.release(connection)
