"""
Modelos Pydantic para ventas en punto de venta.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from app.api.v1.schemas.account_schemas import AccountResponse
from app.api.v1.schemas.order_schemas import OrderResponse


class TransactionCreate(BaseModel):
    customer_id: int
    account_id: int
    location_id: int
    product_id: int
    quantity: int


class InventoryResponse(BaseModel):
    location_id: int
    product_id: int
    quantity_on_hand: int
    reorder_level: Optional[int] = None
    reorder_quantity: Optional[int] = None
    needs_reorder: bool


class TransactionResponse(BaseModel):
    message: str
    total_cost: Decimal
    order: OrderResponse
    account: AccountResponse
    inventory: InventoryResponse
