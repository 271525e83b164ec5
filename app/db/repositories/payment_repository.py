"""
PaymentRepository: payment rows.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.base import BaseRepository, log_operation
from app.db.schema import payment
from app.domain.models.payment import PaymentDomain, PaymentMethod
from app.domain.value_objects.money import Money

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository):
    """Repository for payments."""

    async def _verify_table_access(self, session: AsyncSession) -> None:
        await self._count_rows(session, payment)

    def _to_domain(self, row: Any) -> PaymentDomain:
        return PaymentDomain.from_row(row, self.currency)

    @log_operation()
    async def get(self, session: AsyncSession, payment_id: int) -> Optional[PaymentDomain]:
        row = (await session.execute(select(payment).where(payment.c.payment_id == payment_id))).mappings().first()
        return self._to_domain(row) if row else None

    @log_operation()
    async def list(self, session: AsyncSession) -> List[PaymentDomain]:
        """All payments, newest first."""
        result = await session.execute(
            select(payment).order_by(payment.c.payment_date.desc(), payment.c.payment_id.desc())
        )
        return [self._to_domain(row) for row in result.mappings()]

    @log_operation()
    async def create(
        self,
        session: AsyncSession,
        payment_method: PaymentMethod,
        amount: Money,
        payment_date: datetime,
        order_id: Optional[int] = None,
        account_id: Optional[int] = None,
        card_id: Optional[int] = None,
    ) -> int:
        result = await session.execute(
            insert(payment).values(
                order_id=order_id,
                account_id=account_id,
                card_id=card_id,
                payment_method=payment_method.value,
                amount_cents=amount.cents,
                payment_date=payment_date,
            )
        )
        return result.inserted_primary_key[0]

    @log_operation()
    async def delete(self, session: AsyncSession, payment_id: int) -> int:
        result = await session.execute(delete(payment).where(payment.c.payment_id == payment_id))
        return result.rowcount

    @log_operation()
    async def sum_amounts_for_account(self, session: AsyncSession, account_id: int) -> Money:
        result = await session.execute(
            select(func.coalesce(func.sum(payment.c.amount_cents), 0)).where(payment.c.account_id == account_id)
        )
        return Money.from_cents(result.scalar_one(), self.currency)
