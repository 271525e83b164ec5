"""
Fixtures compartidos: base de datos SQLite temporal con datos de catálogo
y cliente HTTP contra la aplicación real.
"""

import os
from decimal import Decimal
from typing import Any, Dict, Optional

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.pop("REDIS_URL", None)

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert

from app.db.connection import ConnDB, get_db_connection
from app.db.schema import customer, inventory, location, payment_card, product
from app.main import app as application

API = "/api/v1"

PRODUCTS = [
    {"product_id": 1, "sku": "WID-001", "name": "Widget", "unit_price_cents": 1000},
    {"product_id": 2, "sku": "GAD-002", "name": "Gadget", "unit_price_cents": 2500},
    {"product_id": 3, "sku": "CAB-003", "name": "Cable", "unit_price_cents": 500},
]


async def seed_reference_data(conn_db: ConnDB) -> None:
    """Clientes, tiendas, productos, inventario y tarjetas de prueba."""
    async with conn_db.get_session() as session:
        await session.execute(
            insert(customer),
            [
                {"customer_id": 1, "first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"},
                {"customer_id": 2, "first_name": "Alan", "last_name": "Turing", "email": "alan@example.com"},
            ],
        )
        await session.execute(
            insert(location),
            [{"location_id": 1, "name": "Downtown"}, {"location_id": 2, "name": "Airport"}],
        )
        await session.execute(insert(product), PRODUCTS)
        await session.execute(
            insert(inventory),
            [
                {"location_id": 1, "product_id": 1, "quantity_on_hand": 10, "reorder_level": 2, "reorder_quantity": 20},
                {"location_id": 1, "product_id": 2, "quantity_on_hand": 1, "reorder_level": 1, "reorder_quantity": 5},
            ],
        )
        await session.execute(insert(payment_card), [{"card_id": 1, "customer_id": 1, "card_last4": "4242"}])
        await session.commit()


class LedgerApi:
    """Atajos sobre la API para preparar escenarios."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def create_account(
        self, credit_limit: Optional[str] = None, customer_id: int = 1, account_number: Optional[str] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "customer_id": customer_id,
            "account_number": account_number or f"ACC-{os.urandom(4).hex()}",
        }
        if credit_limit is not None:
            payload["credit_limit"] = credit_limit
        response = await self.client.post(f"{API}/accounts", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    async def create_order(
        self, account_id: Optional[int] = None, total_amount: Optional[str] = None, **extra: Any
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "order_datetime": "2024-05-01T10:00:00",
            "channel": "ONLINE",
            "customer_id": 1,
            "account_id": account_id,
            **extra,
        }
        if total_amount is not None:
            payload["total_amount"] = total_amount
        response = await self.client.post(f"{API}/orders", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    async def add_line(self, order_id: int, product_id: int = 1, quantity: int = 1, **extra: Any):
        payload = {"order_id": order_id, "product_id": product_id, "quantity": quantity, **extra}
        return await self.client.post(f"{API}/order-lines", json=payload)

    async def pay(self, account_id: int, amount: str, **extra: Any):
        payload = {
            "amount": amount,
            "payment_method": "CARD",
            "payment_date": "2024-05-02T12:00:00",
            "account_id": account_id,
            **extra,
        }
        return await self.client.post(f"{API}/payments", json=payload)

    async def balance(self, account_id: int) -> Decimal:
        response = await self.client.get(f"{API}/accounts/{account_id}")
        assert response.status_code == 200, response.text
        return Decimal(response.json()["current_balance"])

    async def order_total(self, order_id: int) -> Optional[Decimal]:
        response = await self.client.get(f"{API}/orders/{order_id}")
        assert response.status_code == 200, response.text
        total = response.json()["total_amount"]
        return Decimal(total) if total is not None else None


@pytest_asyncio.fixture
async def conn_db(tmp_path):
    db = ConnDB(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await db.initialize(create_schema=True)
    await seed_reference_data(db)
    yield db
    await db.close()


@pytest_asyncio.fixture
async def client(conn_db):
    application.dependency_overrides[get_db_connection] = lambda: conn_db
    async with AsyncClient(transport=ASGITransport(app=application), base_url="http://test") as http_client:
        yield http_client
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api(client):
    return LedgerApi(client)
