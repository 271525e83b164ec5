"""
Modelos Pydantic para pedidos y líneas de pedido.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.domain.models.order import OrderChannel, OrderStatus

MONEY_DIGITS = 14


class OrderCreate(BaseModel):
    """Alta de pedido."""

    order_datetime: datetime = Field(..., description="Fecha y hora del pedido")
    channel: OrderChannel = Field(..., description="Canal de venta")
    customer_id: int = Field(..., description="Cliente que realiza el pedido")
    account_id: Optional[int] = Field(default=None, description="Cuenta a la que se carga el pedido")
    location_id: Optional[int] = Field(default=None, description="Tienda")
    total_amount: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2, description="Total del pedido sin líneas"
    )
    status: OrderStatus = Field(default=OrderStatus.PENDING)


class OrderUpdate(BaseModel):
    """Actualización parcial; solo se aplican los campos enviados."""

    order_datetime: Optional[datetime] = None
    channel: Optional[OrderChannel] = None
    customer_id: Optional[int] = None
    account_id: Optional[int] = None
    location_id: Optional[int] = None
    total_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    status: Optional[OrderStatus] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: int
    order_datetime: datetime
    channel: OrderChannel
    customer_id: int
    account_id: Optional[int] = None
    location_id: Optional[int] = None
    total_amount: Optional[Decimal] = None
    status: OrderStatus


class OrderLineCreate(BaseModel):
    """Alta de línea; unit_price y line_no son opcionales."""

    order_id: int
    product_id: int
    quantity: int = Field(..., description="Unidades, mayor que 0")
    line_no: Optional[int] = Field(default=None, gt=0, description="Por defecto, siguiente número libre")
    unit_price: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2, description="Por defecto, precio del producto"
    )
    discount_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)


class OrderLineUpdate(BaseModel):
    product_id: Optional[int] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    discount_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)


class OrderLineResponse(BaseModel):
    order_id: int
    line_no: int
    product_id: int
    quantity: int
    unit_price: Decimal
    discount_amount: Optional[Decimal] = None
    line_total: Decimal
    product_name: Optional[str] = None
    sku: Optional[str] = None
