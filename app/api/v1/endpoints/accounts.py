"""
Endpoints de mantenimiento de cuentas.

El saldo solo cambia a través de pedidos, líneas y pagos; aquí se gestionan
número de cuenta, límite de crédito y estado, y la conciliación.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from app.api.v1.schemas.account_schemas import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    ReconciliationResponse,
)
from app.api.v1.schemas.common_schemas import DeleteResponse, ErrorResponse
from app.db.connection import ConnDB, get_db_connection
from app.services.accounts.account_service import AccountService
from app.services.orders.factories import create_account_service

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Datos inválidos o cuenta en uso"},
    404: {"model": ErrorResponse, "description": "Cuenta no encontrada"},
}


def get_account_service(conn_db: ConnDB = Depends(get_db_connection)) -> AccountService:
    return create_account_service(conn_db)


@router.get("", response_model=List[AccountResponse], summary="Listar cuentas")
async def list_accounts(service: AccountService = Depends(get_account_service)):
    accounts = await service.list_accounts()
    return [account.to_dict() for account in accounts]


@router.get("/{account_id}", response_model=AccountResponse, responses=ERROR_RESPONSES, summary="Obtener cuenta")
async def get_account(account_id: int, service: AccountService = Depends(get_account_service)):
    account = await service.get_account(account_id)
    return account.to_dict()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Abrir cuenta",
)
async def create_account(request: AccountCreate, service: AccountService = Depends(get_account_service)):
    """Abre una cuenta con saldo 0."""
    account = await service.create_account(
        customer_id=request.customer_id,
        account_number=request.account_number,
        credit_limit=request.credit_limit,
        opened_date=request.opened_date,
        status=request.status,
    )
    return account.to_dict()


@router.put("/{account_id}", response_model=AccountResponse, responses=ERROR_RESPONSES, summary="Modificar cuenta")
async def update_account(
    account_id: int, request: AccountUpdate, service: AccountService = Depends(get_account_service)
):
    account = await service.update_account(account_id, request.model_dump(exclude_unset=True))
    return account.to_dict()


@router.delete("/{account_id}", response_model=DeleteResponse, responses=ERROR_RESPONSES, summary="Borrar cuenta")
async def delete_account(account_id: int, service: AccountService = Depends(get_account_service)):
    await service.delete_account(account_id)
    return DeleteResponse(message=f"Account {account_id} deleted successfully")


@router.get(
    "/{account_id}/reconciliation",
    response_model=ReconciliationResponse,
    responses=ERROR_RESPONSES,
    summary="Conciliar saldo",
)
async def reconcile_account(account_id: int, service: AccountService = Depends(get_account_service)):
    """
    Compara el saldo almacenado con pedidos menos pagos.

    No modifica nada; pensado para revisar una cuenta tras un fallo de
    compensación.
    """
    return await service.reconcile_account(account_id)
