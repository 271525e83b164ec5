"""
Endpoints de pagos.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from app.api.v1.schemas.common_schemas import DeleteResponse, ErrorResponse
from app.api.v1.schemas.payment_schemas import PaymentCreate, PaymentResponse
from app.db.connection import ConnDB, get_db_connection
from app.services.orders.factories import create_payment_service
from app.services.orders.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Datos inválidos"},
    404: {"model": ErrorResponse, "description": "Pago no encontrado"},
}


def get_payment_service(conn_db: ConnDB = Depends(get_db_connection)) -> PaymentService:
    return create_payment_service(conn_db)


@router.get("", response_model=List[PaymentResponse], summary="Listar pagos")
async def list_payments(service: PaymentService = Depends(get_payment_service)):
    payments = await service.list_payments()
    return [payment.to_dict() for payment in payments]


@router.get("/{payment_id}", response_model=PaymentResponse, responses=ERROR_RESPONSES, summary="Obtener pago")
async def get_payment(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    payment = await service.get_payment(payment_id)
    return payment.to_dict()


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Registrar pago",
)
async def create_payment(request: PaymentCreate, service: PaymentService = Depends(get_payment_service)):
    """Registra un pago; reduce el saldo de la cuenta sin comprobar el límite."""
    payment = await service.create_payment(
        amount=request.amount,
        payment_method=request.payment_method,
        payment_date=request.payment_date,
        order_id=request.order_id,
        account_id=request.account_id,
        card_id=request.card_id,
    )
    return payment.to_dict()


@router.delete("/{payment_id}", response_model=DeleteResponse, responses=ERROR_RESPONSES, summary="Borrar pago")
async def delete_payment(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    """Borra un pago y devuelve su importe al saldo de la cuenta."""
    await service.delete_payment(payment_id)
    return DeleteResponse(message=f"Payment {payment_id} deleted successfully")
