"""
Endpoints de pedidos.

Cada alta, modificación o borrado con cuenta asociada mueve el saldo de la
cuenta dentro de la misma transacción.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from app.api.v1.schemas.common_schemas import DeleteResponse, ErrorResponse
from app.api.v1.schemas.order_schemas import OrderCreate, OrderResponse, OrderUpdate
from app.db.connection import ConnDB, get_db_connection
from app.services.orders.factories import create_order_service
from app.services.orders.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Datos inválidos o límite de crédito excedido"},
    404: {"model": ErrorResponse, "description": "Pedido no encontrado"},
    409: {"model": ErrorResponse, "description": "Conflicto de concurrencia en la cuenta"},
}


def get_order_service(conn_db: ConnDB = Depends(get_db_connection)) -> OrderService:
    return create_order_service(conn_db)


@router.get("", response_model=List[OrderResponse], summary="Listar pedidos")
async def list_orders(service: OrderService = Depends(get_order_service)):
    """Pedidos del más reciente al más antiguo."""
    orders = await service.list_orders()
    return [order.to_dict() for order in orders]


@router.get("/{order_id}", response_model=OrderResponse, responses=ERROR_RESPONSES, summary="Obtener pedido")
async def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    order = await service.get_order(order_id)
    return order.to_dict()


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Crear pedido",
)
async def create_order(request: OrderCreate, service: OrderService = Depends(get_order_service)):
    """
    Crea un pedido.

    Si el pedido tiene cuenta y total, el total se carga a la cuenta
    respetando su límite de crédito.
    """
    order = await service.create_order(
        order_datetime=request.order_datetime,
        channel=request.channel,
        customer_id=request.customer_id,
        account_id=request.account_id,
        location_id=request.location_id,
        total_amount=request.total_amount,
        status=request.status,
    )
    return order.to_dict()


@router.put("/{order_id}", response_model=OrderResponse, responses=ERROR_RESPONSES, summary="Modificar pedido")
async def update_order(order_id: int, request: OrderUpdate, service: OrderService = Depends(get_order_service)):
    """Modificación parcial: solo se aplican los campos enviados."""
    order = await service.update_order(order_id, request.model_dump(exclude_unset=True))
    return order.to_dict()


@router.delete("/{order_id}", response_model=DeleteResponse, responses=ERROR_RESPONSES, summary="Borrar pedido")
async def delete_order(order_id: int, service: OrderService = Depends(get_order_service)):
    """Borra un pedido sin líneas ni pagos y revierte su importe en la cuenta."""
    await service.delete_order(order_id)
    return DeleteResponse(message=f"Order {order_id} deleted successfully")
