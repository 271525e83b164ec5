"""
Base Repository for back-office database operations.

This module provides an abstract base class for all repository classes,
implementing common functionality: access to the shared connection,
table access verification, row conversion and translation of
SQLAlchemy errors into application exceptions.

Repository methods receive the AsyncSession of the caller's unit of work
as their first argument; they never commit.
"""

import functools
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from sqlalchemy import Table, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.connection import ConnDB, get_db_connection
from app.domain.value_objects.money import Money
from app.utils.error_handler import (
    AppException,
    ConflictException,
    DatabaseConnectionException,
    DatabaseException,
)

logger = logging.getLogger(__name__)


def log_operation(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator for logging database operations.

    IntegrityError becomes ConflictException and any other SQLAlchemyError
    becomes DatabaseException; application exceptions pass through.

    Args:
        operation_name: Optional custom name for the operation

    Returns:
        Decorated function with logging
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
            except AppException:
                raise
            except IntegrityError as e:
                logger.warning(f"Integrity violation in {op_name}: {e.orig}")
                raise ConflictException(
                    message=f"Operation {op_name} violates a data integrity constraint",
                ) from e
            except SQLAlchemyError as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise DatabaseException(
                    message=f"Database operation failed: {op_name}",
                    operation=op_name,
                ) from e

            logger.debug(f"Operation successful: {op_name}")
            return result

        return wrapper

    return decorator


class BaseRepository(ABC):
    """
    Abstract base repository.

    All derived repositories inherit from this class and implement
    their specific domain operations.
    """

    def __init__(self, conn_db: Optional[ConnDB] = None, currency: Optional[str] = None):
        """
        Initialize the base repository.

        Args:
            conn_db: Optional database connection. If not provided, uses global connection.
            currency: Currency of every monetary column; defaults to CURRENCY.
        """
        self.conn_db: ConnDB = conn_db or get_db_connection()
        self.currency: str = currency or get_settings().CURRENCY
        self._initialized: bool = False
        self._repository_name: str = self.__class__.__name__

    async def initialize(self) -> None:
        """
        Ensure the connection is available and the repository tables are readable.

        Raises:
            DatabaseConnectionException: If initialization fails
        """
        if not self.conn_db.is_initialized():
            await self.conn_db.initialize()

        try:
            async with self.conn_db.get_session() as session:
                await self._verify_table_access(session)
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize {self._repository_name}: {e}")
            raise DatabaseConnectionException(
                message=f"Failed to initialize {self._repository_name}: {str(e)}",
                database_url=self.conn_db.safe_url,
            ) from e

        self._initialized = True
        logger.info(f"{self._repository_name} initialized successfully")

    @abstractmethod
    async def _verify_table_access(self, session: AsyncSession) -> None:
        """
        Verify access to the tables required by this repository.

        Raises:
            SQLAlchemyError: If a table cannot be read
        """

    async def _count_rows(self, session: AsyncSession, *tables: Table) -> Dict[str, int]:
        counts = {}
        for table in tables:
            result = await session.execute(select(func.count()).select_from(table))
            counts[table.name] = result.scalar_one()
        return counts

    def is_initialized(self) -> bool:
        return self._initialized and self.conn_db.is_initialized()

    @staticmethod
    def _cents(amount: Optional[Money]) -> Optional[int]:
        if amount is None:
            return None
        return amount.cents

    def __repr__(self) -> str:
        return f"<{self._repository_name}(initialized={self._initialized})>"
