"""
Modelos Pydantic para pagos.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.domain.models.payment import PaymentMethod


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., max_digits=14, decimal_places=2, description="Importe, mayor que 0")
    payment_method: PaymentMethod
    payment_date: datetime
    order_id: Optional[int] = None
    account_id: Optional[int] = None
    card_id: Optional[int] = None


class PaymentResponse(BaseModel):
    payment_id: int
    order_id: Optional[int] = None
    account_id: Optional[int] = None
    card_id: Optional[int] = None
    payment_method: PaymentMethod
    amount: Decimal
    payment_date: datetime
