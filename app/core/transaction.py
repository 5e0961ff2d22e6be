"""Unit-of-work coordination for multi-table cascading writes.

The coordinator opens a real database transaction when the backing store
supports one and otherwise degrades to executing every statement immediately.
Support is probed once per coordinator and cached for its lifetime.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, nullcontext
from enum import Enum
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import Executable

logger = structlog.get_logger(__name__)


class TransactionCapability(str, Enum):
    """Whether the data store supports multi-statement transactions."""

    UNKNOWN = "unknown"
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"


class UnitOfWork:
    """
    Atomic write scope shared by every step of a cascade.

    In transactional mode statements run inside one open transaction and only
    become visible on commit. In non-transactional mode each statement is
    committed as soon as it runs and cannot be rolled back.
    """

    def __init__(self, session: AsyncSession, transactional: bool):
        """Initialize unit of work over an open session."""
        self.session = session
        self.transactional = transactional
        self.closed = False

    async def execute(self, statement: Executable) -> Result[Any]:
        """Execute a statement within this unit of work."""
        result = await self.session.execute(statement)
        if not self.transactional:
            await self.session.commit()
        return result

    def savepoint(self) -> Any:
        """
        Scope a group of statements whose failure must not poison the transaction.

        Returns an async context manager: a nested transaction when running
        transactionally, a no-op otherwise.
        """
        if self.transactional:
            return self.session.begin_nested()
        return nullcontext()


class TransactionCoordinator:
    """Acquires units of work and caches whether transactions are supported."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize coordinator with the session factory it opens sessions from."""
        self._session_factory = session_factory
        self.capability = TransactionCapability.UNKNOWN

    async def begin(self) -> UnitOfWork:
        """
        Start a unit of work.

        The first call probes transaction support with a no-op statement.
        A failing probe, transient or not, downgrades to non-transactional mode
        instead of failing the caller.

        Returns:
            Active unit of work
        """
        if self.capability is TransactionCapability.UNSUPPORTED:
            logger.debug("transaction_not_supported_proceeding_without")
            return UnitOfWork(self._session_factory(), transactional=False)

        session = self._session_factory()
        try:
            await session.begin()
            if self.capability is TransactionCapability.UNKNOWN:
                await session.execute(text("SELECT 1"))
                self.capability = TransactionCapability.SUPPORTED
                logger.info("transaction_support_detected", capability=self.capability.value)
        except Exception as e:
            await self._discard(session)
            self.capability = TransactionCapability.UNSUPPORTED
            logger.warning(
                "transaction_support_unavailable",
                capability=self.capability.value,
                error=str(e),
            )
            return UnitOfWork(self._session_factory(), transactional=False)

        return UnitOfWork(session, transactional=True)

    async def commit(self, uow: UnitOfWork) -> None:
        """Commit the unit of work if it is transactional."""
        if uow.transactional:
            await uow.session.commit()

    async def abort(self, uow: UnitOfWork) -> None:
        """Roll back the unit of work if it is transactional."""
        if uow.transactional:
            await uow.session.rollback()

    async def end(self, uow: UnitOfWork) -> None:
        """Release the unit of work's session."""
        if not uow.closed:
            await uow.session.close()
            uow.closed = True

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[UnitOfWork]:
        """
        Run a block inside a unit of work.

        Commits when the block completes, aborts and re-raises unchanged when
        it fails, and always releases the session.
        """
        uow = await self.begin()
        try:
            yield uow
            await self.commit(uow)
        except Exception:
            await self.abort(uow)
            raise
        finally:
            await self.end(uow)

    @staticmethod
    async def _discard(session: AsyncSession) -> None:
        """Roll back and close a probe session, ignoring errors from a broken connection."""
        try:
            await session.rollback()
            await session.close()
        except Exception as e:
            logger.debug("probe_session_cleanup_failed", error=str(e))
