"""
UnitOfWork - one database transaction per mutation workflow.

Every write of a workflow (order rows, line rows, payment rows, stock and
the ledger balance) goes through the same session. On success the
transaction commits; on any exception it rolls back, which undoes the
ledger adjustments together with the rows that caused them.

Account locks taken through ``lock_accounts`` are held until the
transaction has been committed or rolled back.

Usage:
    async with UnitOfWork(conn_db, "create_order_line") as uow:
        await uow.lock_accounts(order.account_id)
        ...
"""

import logging
import time
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.connection import ConnDB
from app.domain.models.ledger_adjustment import AppliedAdjustment
from app.utils.account_lock import AccountLock
from app.utils.error_handler import CompensationFailureException, DatabaseException

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Transaction scope for a single orchestrated workflow."""

    def __init__(self, conn_db: ConnDB, operation: str):
        """
        Args:
            conn_db: Database connection providing the session
            operation: Workflow name used in logs and error details
        """
        self.conn_db = conn_db
        self.operation = operation
        self.session: Optional[AsyncSession] = None
        self.applied: List[AppliedAdjustment] = []
        self._locks: List[AccountLock] = []
        self._start_time: Optional[float] = None

    async def __aenter__(self) -> "UnitOfWork":
        self.session = self.conn_db.get_session()
        self._start_time = time.time()
        logger.debug(f"Unit of work started: {self.operation}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                await self._commit()
            else:
                await self._rollback(exc_val)
        finally:
            await self._release_locks()
            await self.session.close()
        return False

    async def lock_accounts(self, *account_ids: Optional[int]) -> None:
        """
        Lock the given accounts until the unit of work ends.

        Raises:
            LedgerConcurrencyException: If an account stays busy
        """
        lock = AccountLock(account_ids)
        if not lock.account_ids:
            return
        await lock.acquire()
        self._locks.append(lock)

    def record(self, applied: AppliedAdjustment) -> AppliedAdjustment:
        """Track an applied adjustment so a rollback can be reported."""
        self.applied.append(applied)
        return applied

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed for {self.operation}: {e}")
            await self._rollback(e)
            raise DatabaseException(
                message=f"Failed to commit {self.operation}",
                operation=self.operation,
            ) from e

        elapsed = time.time() - (self._start_time or time.time())
        logger.info(
            f"✅ {self.operation} committed ({len(self.applied)} ledger adjustments, {elapsed * 1000:.1f}ms)"
        )

    async def _rollback(self, original_error: Optional[BaseException]) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError as rollback_error:
            logger.critical(
                f"🚨 Rollback failed for {self.operation}; "
                f"{len(self.applied)} ledger adjustments may be persisted. "
                f"Original error: {original_error!r}. Rollback error: {rollback_error!r}. "
                f"Adjustments: {[(a.account_id, str(a.adjustment.delta)) for a in self.applied]}"
            )
            raise CompensationFailureException(
                operation=self.operation,
                original_error=original_error,
            ) from rollback_error

        if self.applied:
            logger.info(
                f"↩️ {self.operation} rolled back; undid {len(self.applied)} ledger adjustments "
                f"({type(original_error).__name__ if original_error else 'no error'})"
            )
        else:
            logger.debug(f"{self.operation} rolled back")

    async def _release_locks(self) -> None:
        while self._locks:
            await self._locks.pop().release()
