"""Tests de integración para ventas en punto de venta e inventario."""

from decimal import Decimal

import pytest

API = "/api/v1"


def _sale(account_id, location_id=1, product_id=1, quantity=3, customer_id=1):
    return {
        "customer_id": customer_id,
        "account_id": account_id,
        "location_id": location_id,
        "product_id": product_id,
        "quantity": quantity,
    }


class TestRecordSale:
    """Tests para la venta en punto de venta."""

    @pytest.mark.asyncio
    async def test_sale_creates_order_charges_account_and_moves_stock(self, api, client):
        """Debe crear el pedido, cargar la cuenta y descontar stock."""
        account = await api.create_account(credit_limit="100.00")

        response = await client.post(f"{API}/transactions", json=_sale(account["account_id"]))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Transaction completed successfully"
        assert Decimal(body["total_cost"]) == Decimal("30.00")
        assert body["order"]["channel"] == "INSTORE"
        assert body["order"]["status"] == "COMPLETED"
        assert body["order"]["location_id"] == 1
        assert Decimal(body["order"]["total_amount"]) == Decimal("30.00")
        assert Decimal(body["account"]["current_balance"]) == Decimal("30.00")
        assert body["inventory"]["quantity_on_hand"] == 7
        assert body["inventory"]["needs_reorder"] is False

        lines = (await client.get(f"{API}/order-lines/order/{body['order']['order_id']}")).json()
        assert len(lines) == 1
        assert lines[0]["line_no"] == 1
        assert lines[0]["quantity"] == 3
        assert await api.balance(account["account_id"]) == Decimal("30.00")

    @pytest.mark.asyncio
    async def test_sale_reaching_reorder_level(self, api, client):
        """Debe marcar reposición al llegar al nivel mínimo."""
        account = await api.create_account()

        response = await client.post(f"{API}/transactions", json=_sale(account["account_id"], quantity=8))

        assert response.status_code == 201
        assert response.json()["inventory"]["quantity_on_hand"] == 2
        assert response.json()["inventory"]["needs_reorder"] is True

    @pytest.mark.asyncio
    async def test_insufficient_stock(self, api, client):
        """Debe rechazar la venta sin stock suficiente."""
        account = await api.create_account()

        response = await client.post(
            f"{API}/transactions", json=_sale(account["account_id"], product_id=2, quantity=2)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Not enough quantity on hand"
        assert (await client.get(f"{API}/orders")).json() == []
        assert await api.balance(account["account_id"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_credit_limit_rolls_back_whole_sale(self, api, client):
        """Si el cargo se rechaza no queda pedido, línea ni movimiento de stock."""
        account = await api.create_account(credit_limit="20.00")

        response = await client.post(f"{API}/transactions", json=_sale(account["account_id"]))

        assert response.status_code == 400
        assert response.json()["error_code"] == "CREDIT_LIMIT_EXCEEDED"
        assert (await client.get(f"{API}/orders")).json() == []
        assert (await client.get(f"{API}/order-lines")).json() == []
        stock = (await client.get(f"{API}/inventory/1/1")).json()
        assert stock["quantity_on_hand"] == 10
        assert await api.balance(account["account_id"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_missing_inventory_record(self, api, client):
        """Debe responder 404 si la tienda no tiene el producto."""
        account = await api.create_account()

        response = await client.post(
            f"{API}/transactions", json=_sale(account["account_id"], location_id=2, product_id=3)
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Inventory record not found"

    @pytest.mark.asyncio
    async def test_missing_account(self, client):
        """Debe responder 404 si la cuenta no existe."""
        response = await client.post(f"{API}/transactions", json=_sale(999))

        assert response.status_code == 404
        assert response.json()["error"] == "Account not found"

    @pytest.mark.asyncio
    async def test_unknown_customer(self, api, client):
        """Debe rechazar un cliente inexistente."""
        account = await api.create_account()

        response = await client.post(f"{API}/transactions", json=_sale(account["account_id"], customer_id=999))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid customer_id: 999. Customer does not exist."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -1])
    async def test_non_positive_quantity(self, api, client, quantity):
        """Debe rechazar cantidades no positivas."""
        account = await api.create_account()

        response = await client.post(f"{API}/transactions", json=_sale(account["account_id"], quantity=quantity))

        assert response.status_code == 400
        assert response.json()["error"] == "quantity must be greater than 0"

    @pytest.mark.asyncio
    async def test_missing_field(self, client):
        """Debe nombrar el campo obligatorio ausente."""
        response = await client.post(f"{API}/transactions", json={"customer_id": 1, "account_id": 1})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Missing required field")


class TestInventory:
    """Tests para la consulta de inventario."""

    @pytest.mark.asyncio
    async def test_get_inventory(self, client):
        """Debe devolver el stock con el indicador de reposición."""
        response = await client.get(f"{API}/inventory/1/2")

        assert response.status_code == 200
        assert response.json() == {
            "location_id": 1,
            "product_id": 2,
            "quantity_on_hand": 1,
            "reorder_level": 1,
            "reorder_quantity": 5,
            "needs_reorder": True,
        }

    @pytest.mark.asyncio
    async def test_missing_inventory(self, client):
        """Debe responder 404 para un inventario inexistente."""
        response = await client.get(f"{API}/inventory/2/2")

        assert response.status_code == 404
