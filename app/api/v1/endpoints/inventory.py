"""
Consulta de inventario por tienda.
"""

from fastapi import APIRouter, Depends

from app.api.v1.schemas.common_schemas import ErrorResponse
from app.api.v1.schemas.transaction_schemas import InventoryResponse
from app.db.connection import ConnDB, get_db_connection
from app.services.orders.factories import create_sale_service
from app.services.orders.sale_service import SaleService

router = APIRouter()


def get_sale_service(conn_db: ConnDB = Depends(get_db_connection)) -> SaleService:
    return create_sale_service(conn_db)


@router.get(
    "/{location_id}/{product_id}",
    response_model=InventoryResponse,
    responses={404: {"model": ErrorResponse, "description": "Registro de inventario no encontrado"}},
    summary="Stock de un producto en una tienda",
)
async def get_inventory(location_id: int, product_id: int, service: SaleService = Depends(get_sale_service)):
    stock = await service.get_inventory(location_id, product_id)
    return stock.to_dict()
