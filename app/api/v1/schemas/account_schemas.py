"""
Modelos Pydantic para cuentas.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.domain.models.account import AccountStatus

MONEY_DIGITS = 14


class AccountCreate(BaseModel):
    """Alta de cuenta; el saldo inicial siempre es 0."""

    customer_id: int
    account_number: str = Field(..., min_length=1, max_length=40)
    credit_limit: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2, description="Sin límite si se omite"
    )
    opened_date: Optional[date] = None
    status: AccountStatus = AccountStatus.ACTIVE


class AccountUpdate(BaseModel):
    """El saldo no es modificable por esta vía."""

    account_number: Optional[str] = Field(default=None, min_length=1, max_length=40)
    credit_limit: Optional[Decimal] = Field(default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    status: Optional[AccountStatus] = None


class AccountResponse(BaseModel):
    account_id: int
    customer_id: int
    account_number: str
    current_balance: Decimal
    credit_limit: Optional[Decimal] = None
    opened_date: Optional[date] = None
    status: AccountStatus


class ReconciliationResponse(BaseModel):
    account_id: int
    stored_balance: Decimal
    expected_balance: Decimal
    order_totals: Decimal
    payments: Decimal
    difference: Decimal
    consistent: bool
