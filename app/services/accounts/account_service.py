"""
AccountService - account maintenance.

Accounts open with a zero balance; afterwards the balance moves only
through order, line and payment workflows. Maintenance can change the
account number, the credit limit and the status.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.db.repositories.reference_repository import EntityKind
from app.domain.models.account import AccountDomain, AccountStatus
from app.services.orders.workflow import LedgerWorkflow
from app.utils.error_handler import ConflictException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT_NUMBER_MESSAGE = "Account number already exists"
ACCOUNT_IN_USE_MESSAGE = "Cannot delete account with existing orders or payments"

UPDATABLE_FIELDS = ("account_number", "credit_limit", "status")


class AccountService(LedgerWorkflow):
    async def list_accounts(self) -> List[AccountDomain]:
        async with self.read_session() as session:
            return await self.deps.account_repo.list(session)

    async def get_account(self, account_id: int) -> AccountDomain:
        async with self.read_session() as session:
            account = await self.deps.account_repo.get(session, account_id)
        if account is None:
            raise NotFoundException("Account", account_id)
        return account

    async def create_account(
        self,
        customer_id: int,
        account_number: str,
        credit_limit: Optional[Decimal] = None,
        opened_date: Optional[date] = None,
        status: AccountStatus = AccountStatus.ACTIVE,
    ) -> AccountDomain:
        """
        Open an account with a zero balance.

        Raises:
            ValidationException: If the customer does not exist or the limit is negative
            ConflictException: If the account number is taken
        """
        limit = self.money(credit_limit)
        if limit is not None and limit.is_negative:
            raise ValidationException("credit_limit cannot be negative", field="credit_limit", invalid_value=credit_limit)

        async with self.unit_of_work("create_account") as uow:
            await self.deps.references.ensure(uow.session, "customer_id", EntityKind.CUSTOMER, customer_id)
            if await self.deps.account_repo.account_number_exists(uow.session, account_number):
                raise ConflictException(DUPLICATE_ACCOUNT_NUMBER_MESSAGE, constraint="account_number")

            account_id = await self.deps.account_repo.create(
                uow.session,
                customer_id=customer_id,
                account_number=account_number,
                credit_limit=limit,
                opened_date=opened_date or date.today(),
                status=status,
            )
            account = await self.deps.account_repo.get(uow.session, account_id)

        logger.info(f"Account {account_id} opened for customer {customer_id} (limit={limit})")
        return account

    async def update_account(self, account_id: int, changes: Dict[str, Any]) -> AccountDomain:
        """
        Update account number, credit limit or status.

        Raises:
            NotFoundException: If the account does not exist
            ValidationException: If no field is given or the limit is below the current balance
            ConflictException: If the new account number is taken
        """
        values = {field: changes[field] for field in UPDATABLE_FIELDS if field in changes}
        if not values:
            raise ValidationException("No fields to update")
        for field in ("account_number", "status"):
            if field in values and values[field] is None:
                raise ValidationException(f"{field} cannot be null", field=field)
        if "credit_limit" in values:
            values["credit_limit"] = self.money(values["credit_limit"])

        async with self.unit_of_work("update_account") as uow:
            await uow.lock_accounts(account_id)
            account = await self.deps.account_repo.get(uow.session, account_id)
            if account is None:
                raise NotFoundException("Account", account_id)

            new_limit = values.get("credit_limit")
            if new_limit is not None and new_limit < account.current_balance:
                raise ValidationException(
                    f"credit_limit cannot be below the current balance ({account.current_balance})",
                    field="credit_limit",
                    invalid_value=new_limit.amount,
                )

            if "account_number" in values and await self.deps.account_repo.account_number_exists(
                uow.session, values["account_number"], exclude_account_id=account_id
            ):
                raise ConflictException(DUPLICATE_ACCOUNT_NUMBER_MESSAGE, constraint="account_number")

            await self.deps.account_repo.update_fields(uow.session, account_id, values)
            account = await self.deps.account_repo.get(uow.session, account_id)

        logger.info(f"Account {account_id} updated: {sorted(values)}")
        return account

    async def delete_account(self, account_id: int) -> AccountDomain:
        """
        Raises:
            NotFoundException: If the account does not exist
            ConflictException: If orders or payments reference it
        """
        async with self.unit_of_work("delete_account") as uow:
            await uow.lock_accounts(account_id)
            account = await self.deps.account_repo.get(uow.session, account_id)
            if account is None:
                raise NotFoundException("Account", account_id)

            references = await self.deps.account_repo.count_references(uow.session, account_id)
            if references["orders"] or references["payments"]:
                raise ConflictException(ACCOUNT_IN_USE_MESSAGE, constraint="account_references")

            await self.deps.account_repo.delete(uow.session, account_id)

        logger.info(f"Account {account_id} deleted")
        return account

    async def reconcile_account(self, account_id: int) -> Dict[str, Any]:
        async with self.read_session() as session:
            return await self.deps.reconciliation.reconcile(session, account_id)
