"""
Endpoint de venta en punto de venta.
"""

import logging

from fastapi import APIRouter, Depends, status

from app.api.v1.schemas.common_schemas import ErrorResponse
from app.api.v1.schemas.transaction_schemas import TransactionCreate, TransactionResponse
from app.db.connection import ConnDB, get_db_connection
from app.services.orders.factories import create_sale_service
from app.services.orders.sale_service import SaleService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_sale_service(conn_db: ConnDB = Depends(get_db_connection)) -> SaleService:
    return create_sale_service(conn_db)


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Stock insuficiente o límite de crédito excedido"},
        404: {"model": ErrorResponse, "description": "Cuenta, producto o inventario no encontrado"},
        409: {"model": ErrorResponse, "description": "Conflicto de concurrencia en la cuenta"},
    },
    summary="Registrar venta",
)
async def create_transaction(request: TransactionCreate, service: SaleService = Depends(get_sale_service)):
    """
    Venta a crédito en tienda.

    Crea un pedido INSTORE completado con una línea, lo carga a la cuenta y
    descuenta el stock de la tienda, todo en una única transacción.
    """
    result = await service.record_sale(
        customer_id=request.customer_id,
        account_id=request.account_id,
        location_id=request.location_id,
        product_id=request.product_id,
        quantity=request.quantity,
    )
    return result.to_dict()
