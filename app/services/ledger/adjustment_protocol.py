"""
Ledger adjustment protocol.

The single path through which an account balance changes:

1. Read the balance and credit limit.
2. Compute the proposed balance.
3. For charges, reject when a limit is set and the proposed balance
   exceeds it (a balance equal to the limit is allowed).
4. Write the new balance with a compare-and-set update.

Payments and reversals skip step 3, so they can always be applied,
including as compensation for an earlier charge.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.logging_config import log_ledger_adjustment
from app.db.repositories.account_repository import AccountRepository
from app.domain.models.ledger_adjustment import AppliedAdjustment, LedgerAdjustment
from app.utils.error_handler import (
    CreditLimitExceededException,
    LedgerConcurrencyException,
    NotFoundException,
)

logger = logging.getLogger(__name__)


class LedgerAdjustmentProtocol:
    """Applies ledger adjustments to accounts."""

    def __init__(self, account_repo: AccountRepository, max_attempts: int | None = None):
        self.account_repo = account_repo
        self.max_attempts = max_attempts or get_settings().LEDGER_MAX_CAS_ATTEMPTS

    async def apply(self, session: AsyncSession, account_id: int, adjustment: LedgerAdjustment) -> AppliedAdjustment:
        """
        Apply an adjustment to an account balance.

        Args:
            session: Session of the caller's unit of work
            account_id: Account to adjust
            adjustment: Charge, payment or reversal

        Returns:
            AppliedAdjustment: Previous and new balance

        Raises:
            NotFoundException: If the account does not exist
            CreditLimitExceededException: If a charge would exceed the credit limit
            LedgerConcurrencyException: If the balance kept changing under us
        """
        for attempt in range(1, self.max_attempts + 1):
            account = await self.account_repo.get(session, account_id, for_update=True)
            if account is None:
                raise NotFoundException("Account", account_id)

            previous = account.current_balance
            proposed = previous + adjustment.delta

            if adjustment.is_gated and account.would_exceed_limit(proposed):
                logger.info(
                    f"Charge rejected on account {account_id}: limit={account.credit_limit} "
                    f"balance={previous} proposed={proposed} ({adjustment.reason})"
                )
                raise CreditLimitExceededException(
                    credit_limit=account.credit_limit,
                    current_balance=previous,
                    proposed_balance=proposed,
                )

            if await self.account_repo.compare_and_set_balance(session, account_id, previous.cents, proposed.cents):
                log_ledger_adjustment(
                    account_id=account_id,
                    kind=adjustment.kind.value,
                    delta=str(adjustment.delta),
                    previous_balance=str(previous),
                    new_balance=str(proposed),
                    reason=adjustment.reason,
                )
                return AppliedAdjustment(
                    account_id=account_id,
                    adjustment=adjustment,
                    previous_balance=previous,
                    new_balance=proposed,
                )

            logger.warning(
                f"Balance of account {account_id} changed during adjustment "
                f"(attempt {attempt}/{self.max_attempts})"
            )

        raise LedgerConcurrencyException(
            message=f"Balance of account {account_id} changed concurrently, retry later",
            account_id=account_id,
        )

    async def compensate(self, session: AsyncSession, applied: AppliedAdjustment) -> AppliedAdjustment:
        """Apply the inverse of an earlier adjustment; never rejected by the credit limit."""
        return await self.apply(session, applied.account_id, applied.compensation())
