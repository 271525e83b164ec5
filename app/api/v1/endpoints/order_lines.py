"""
Endpoints de líneas de pedido.

Toda alta, modificación o borrado de una línea recalcula el total del
pedido y traslada la diferencia a la cuenta del pedido.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from app.api.v1.schemas.common_schemas import DeleteResponse, ErrorResponse
from app.api.v1.schemas.order_schemas import OrderLineCreate, OrderLineResponse, OrderLineUpdate
from app.db.connection import ConnDB, get_db_connection
from app.services.orders.factories import create_order_line_service
from app.services.orders.order_line_service import OrderLineService

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Datos inválidos, línea duplicada o límite de crédito excedido"},
    404: {"model": ErrorResponse, "description": "Línea no encontrada"},
    409: {"model": ErrorResponse, "description": "Conflicto de concurrencia en la cuenta"},
}


def get_order_line_service(conn_db: ConnDB = Depends(get_db_connection)) -> OrderLineService:
    return create_order_line_service(conn_db)


@router.get("", response_model=List[OrderLineResponse], summary="Listar líneas")
async def list_order_lines(service: OrderLineService = Depends(get_order_line_service)):
    lines = await service.list_lines()
    return [line.to_dict() for line in lines]


@router.get("/order/{order_id}", response_model=List[OrderLineResponse], summary="Líneas de un pedido")
async def list_lines_for_order(order_id: int, service: OrderLineService = Depends(get_order_line_service)):
    lines = await service.list_lines_for_order(order_id)
    return [line.to_dict() for line in lines]


@router.get(
    "/{order_id}/{line_no}", response_model=OrderLineResponse, responses=ERROR_RESPONSES, summary="Obtener línea"
)
async def get_order_line(order_id: int, line_no: int, service: OrderLineService = Depends(get_order_line_service)):
    line = await service.get_line(order_id, line_no)
    return line.to_dict()


@router.post(
    "",
    response_model=OrderLineResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Crear línea",
)
async def create_order_line(request: OrderLineCreate, service: OrderLineService = Depends(get_order_line_service)):
    """
    Añade una línea al pedido.

    Si no se indica unit_price se usa el precio del producto; si no se
    indica line_no se usa el siguiente libre.
    """
    line = await service.create_line(
        order_id=request.order_id,
        product_id=request.product_id,
        quantity=request.quantity,
        line_no=request.line_no,
        unit_price=request.unit_price,
        discount_amount=request.discount_amount,
    )
    return line.to_dict()


@router.put(
    "/{order_id}/{line_no}", response_model=OrderLineResponse, responses=ERROR_RESPONSES, summary="Modificar línea"
)
async def update_order_line(
    order_id: int,
    line_no: int,
    request: OrderLineUpdate,
    service: OrderLineService = Depends(get_order_line_service),
):
    line = await service.update_line(order_id, line_no, request.model_dump(exclude_unset=True))
    return line.to_dict()


@router.delete(
    "/{order_id}/{line_no}", response_model=DeleteResponse, responses=ERROR_RESPONSES, summary="Borrar línea"
)
async def delete_order_line(order_id: int, line_no: int, service: OrderLineService = Depends(get_order_line_service)):
    await service.delete_line(order_id, line_no)
    return DeleteResponse(message=f"Order line {order_id}/{line_no} deleted successfully")
