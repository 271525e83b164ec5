"""
AccountRepository: account rows and the guarded balance write.

``compare_and_set_balance`` is the only statement in the code base that
writes ``account.current_balance_cents``; it is called exclusively by the
ledger adjustment protocol.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.base import BaseRepository, log_operation
from app.db.schema import account, order_header, payment
from app.domain.models.account import AccountDomain, AccountStatus
from app.domain.value_objects.money import Money

logger = logging.getLogger(__name__)


class AccountRepository(BaseRepository):
    """Repository for customer accounts."""

    # API field -> column
    UPDATABLE_COLUMNS = {
        "account_number": "account_number",
        "credit_limit": "credit_limit_cents",
        "status": "status",
    }

    async def _verify_table_access(self, session: AsyncSession) -> None:
        await self._count_rows(session, account)

    def _to_domain(self, row: Any) -> AccountDomain:
        return AccountDomain.from_row(row, self.currency)

    @log_operation()
    async def get(self, session: AsyncSession, account_id: int, for_update: bool = False) -> Optional[AccountDomain]:
        """
        Read one account.

        Args:
            session: Active session
            account_id: Account to read
            for_update: Lock the row where the dialect supports it
        """
        stmt = select(account).where(account.c.account_id == account_id)
        if for_update:
            stmt = stmt.with_for_update()
        row = (await session.execute(stmt)).mappings().first()
        return self._to_domain(row) if row else None

    @log_operation()
    async def list(self, session: AsyncSession) -> List[AccountDomain]:
        result = await session.execute(select(account).order_by(account.c.account_id))
        return [self._to_domain(row) for row in result.mappings()]

    @log_operation()
    async def account_number_exists(
        self, session: AsyncSession, account_number: str, exclude_account_id: Optional[int] = None
    ) -> bool:
        stmt = select(func.count()).select_from(account).where(account.c.account_number == account_number)
        if exclude_account_id is not None:
            stmt = stmt.where(account.c.account_id != exclude_account_id)
        return (await session.execute(stmt)).scalar_one() > 0

    @log_operation()
    async def create(
        self,
        session: AsyncSession,
        customer_id: int,
        account_number: str,
        credit_limit: Optional[Money] = None,
        opened_date: Optional[date] = None,
        status: AccountStatus = AccountStatus.ACTIVE,
    ) -> int:
        """Insert an account with a zero balance and return its id."""
        result = await session.execute(
            insert(account).values(
                customer_id=customer_id,
                account_number=account_number,
                credit_limit_cents=self._cents(credit_limit),
                current_balance_cents=0,
                opened_date=opened_date,
                status=status.value,
            )
        )
        return result.inserted_primary_key[0]

    @log_operation()
    async def update_fields(self, session: AsyncSession, account_id: int, values: Dict[str, Any]) -> int:
        """
        Update maintenance fields (never the balance).

        Args:
            values: API field names mapped to domain values
        """
        column_values = {}
        for field, value in values.items():
            column = self.UPDATABLE_COLUMNS[field]
            if isinstance(value, Money):
                value = value.cents
            elif isinstance(value, AccountStatus):
                value = value.value
            column_values[column] = value

        if not column_values:
            return 0

        result = await session.execute(
            update(account).where(account.c.account_id == account_id).values(**column_values)
        )
        return result.rowcount

    @log_operation()
    async def compare_and_set_balance(
        self, session: AsyncSession, account_id: int, expected_cents: int, new_cents: int
    ) -> bool:
        """
        Write a new balance only if the stored one still equals expected_cents.

        Returns:
            bool: False when another writer changed the balance first
        """
        result = await session.execute(
            update(account)
            .where(account.c.account_id == account_id)
            .where(account.c.current_balance_cents == expected_cents)
            .values(current_balance_cents=new_cents)
        )
        return result.rowcount == 1

    @log_operation()
    async def count_references(self, session: AsyncSession, account_id: int) -> Dict[str, int]:
        """Orders and payments that point at the account."""
        orders = await session.execute(
            select(func.count()).select_from(order_header).where(order_header.c.account_id == account_id)
        )
        payments = await session.execute(
            select(func.count()).select_from(payment).where(payment.c.account_id == account_id)
        )
        return {"orders": orders.scalar_one(), "payments": payments.scalar_one()}

    @log_operation()
    async def delete(self, session: AsyncSession, account_id: int) -> int:
        result = await session.execute(delete(account).where(account.c.account_id == account_id))
        return result.rowcount
