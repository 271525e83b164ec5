"""Tests de integración para los endpoints de pedidos."""

from decimal import Decimal

import pytest

API = "/api/v1"


class TestCreateOrder:
    """Tests para el alta de pedidos."""

    @pytest.mark.asyncio
    async def test_order_without_account_has_no_ledger_effect(self, api):
        """Debe crear un pedido sin cuenta con estado PENDING."""
        order = await api.create_order(total_amount="40.00")

        assert order["account_id"] is None
        assert order["status"] == "PENDING"
        assert order["channel"] == "ONLINE"
        assert Decimal(order["total_amount"]) == Decimal("40.00")

    @pytest.mark.asyncio
    async def test_order_total_is_charged_to_unlimited_account(self, api):
        """Un pedido de 150.00 en una cuenta sin límite deja el saldo en 150.00."""
        account = await api.create_account()

        order = await api.create_order(account_id=account["account_id"], total_amount="150.00")

        assert Decimal(order["total_amount"]) == Decimal("150.00")
        assert await api.balance(account["account_id"]) == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_rejected_charge_leaves_no_order(self, api, client):
        """Si el cargo se rechaza, el pedido no existe después."""
        account = await api.create_account(credit_limit="100.00")

        response = await client.post(
            f"{API}/orders",
            json={
                "order_datetime": "2024-05-01T10:00:00",
                "channel": "ONLINE",
                "customer_id": 1,
                "account_id": account["account_id"],
                "total_amount": "100.01",
            },
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "CREDIT_LIMIT_EXCEEDED"
        assert body["details"]["proposed_balance"] == "100.01"
        assert (await client.get(f"{API}/orders")).json() == []
        assert await api.balance(account["account_id"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_invalid_customer_is_rejected(self, client):
        """Debe rechazar un cliente inexistente."""
        response = await client.post(
            f"{API}/orders",
            json={"order_datetime": "2024-05-01T10:00:00", "channel": "ONLINE", "customer_id": 999},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid customer_id: 999. Customer does not exist."

    @pytest.mark.asyncio
    async def test_invalid_location_is_rejected(self, client):
        """Debe rechazar una tienda inexistente."""
        response = await client.post(
            f"{API}/orders",
            json={"order_datetime": "2024-05-01T10:00:00", "channel": "INSTORE", "customer_id": 1, "location_id": 42},
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "location_id"

    @pytest.mark.asyncio
    async def test_missing_required_field(self, client):
        """Debe nombrar el campo obligatorio ausente."""
        response = await client.post(f"{API}/orders", json={"order_datetime": "2024-05-01T10:00:00", "customer_id": 1})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required field: channel"

    @pytest.mark.asyncio
    async def test_total_with_more_than_two_decimals_is_rejected(self, client):
        """Debe rechazar totales con más de dos decimales."""
        response = await client.post(
            f"{API}/orders",
            json={
                "order_datetime": "2024-05-01T10:00:00",
                "channel": "ONLINE",
                "customer_id": 1,
                "total_amount": "10.005",
            },
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid total_amount")


class TestReadOrders:
    """Tests para la consulta de pedidos."""

    @pytest.mark.asyncio
    async def test_get_missing_order(self, client):
        """Debe responder 404 con el cuerpo de error común."""
        response = await client.get(f"{API}/orders/999")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Order not found"
        assert body["error_code"] == "NOT_FOUND"
        assert body["details"]["identifier"] == "999"

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, api, client):
        """Debe listar los pedidos del más reciente al más antiguo."""
        older = await api.create_order(order_datetime="2024-01-01T09:00:00")
        newer = await api.create_order(order_datetime="2024-06-01T09:00:00")

        orders = (await client.get(f"{API}/orders")).json()

        assert [order["order_id"] for order in orders] == [newer["order_id"], older["order_id"]]


class TestUpdateOrder:
    """Tests para la modificación de pedidos."""

    @pytest.mark.asyncio
    async def test_total_decrease_is_reversed(self, api, client):
        """Debe revertir la reducción del total."""
        account = await api.create_account(credit_limit="200.00")
        order = await api.create_order(account_id=account["account_id"], total_amount="150.00")

        response = await client.put(f"{API}/orders/{order['order_id']}", json={"total_amount": "120.00"})

        assert response.status_code == 200
        assert Decimal(response.json()["total_amount"]) == Decimal("120.00")
        assert await api.balance(account["account_id"]) == Decimal("120.00")

    @pytest.mark.asyncio
    async def test_total_increase_over_limit_keeps_previous_state(self, api, client):
        """Debe conservar total y saldo si el aumento excede el límite."""
        account = await api.create_account(credit_limit="200.00")
        order = await api.create_order(account_id=account["account_id"], total_amount="150.00")

        response = await client.put(f"{API}/orders/{order['order_id']}", json={"total_amount": "250.00"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "CREDIT_LIMIT_EXCEEDED"
        assert await api.order_total(order["order_id"]) == Decimal("150.00")
        assert await api.balance(account["account_id"]) == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_moving_order_between_accounts(self, api, client):
        """El total sale de la cuenta antigua y se carga a la nueva."""
        first = await api.create_account()
        second = await api.create_account()
        order = await api.create_order(account_id=first["account_id"], total_amount="50.00")

        response = await client.put(f"{API}/orders/{order['order_id']}", json={"account_id": second["account_id"]})

        assert response.status_code == 200
        assert await api.balance(first["account_id"]) == Decimal("0.00")
        assert await api.balance(second["account_id"]) == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_removing_account_reverses_total(self, api, client):
        """Debe revertir el total al quitar la cuenta."""
        account = await api.create_account()
        order = await api.create_order(account_id=account["account_id"], total_amount="75.00")

        response = await client.put(f"{API}/orders/{order['order_id']}", json={"account_id": None})

        assert response.status_code == 200
        assert response.json()["account_id"] is None
        assert await api.balance(account["account_id"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_total_cannot_be_set_on_order_with_lines(self, api, client):
        """Debe impedir fijar el total de un pedido con líneas."""
        order = await api.create_order()
        assert (await api.add_line(order["order_id"], product_id=1, quantity=1)).status_code == 201

        response = await client.put(f"{API}/orders/{order['order_id']}", json={"total_amount": "1.00"})

        assert response.status_code == 400
        assert await api.order_total(order["order_id"]) == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_status_only_update(self, api, client):
        """Debe modificar solo el estado."""
        order = await api.create_order()

        response = await client.put(f"{API}/orders/{order['order_id']}", json={"status": "SHIPPED"})

        assert response.status_code == 200
        assert response.json()["status"] == "SHIPPED"

    @pytest.mark.asyncio
    async def test_update_missing_order(self, client):
        """Debe responder 404 al modificar un pedido inexistente."""
        response = await client.put(f"{API}/orders/999", json={"status": "SHIPPED"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_update_is_rejected(self, api, client):
        """Debe rechazar una modificación sin campos."""
        order = await api.create_order()

        response = await client.put(f"{API}/orders/{order['order_id']}", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "No fields to update"


class TestDeleteOrder:
    """Tests para el borrado de pedidos."""

    @pytest.mark.asyncio
    async def test_delete_reverses_contribution(self, api, client):
        """Borrar el pedido de 150.00 devuelve el saldo a 0."""
        account = await api.create_account()
        order = await api.create_order(account_id=account["account_id"], total_amount="150.00")

        response = await client.delete(f"{API}/orders/{order['order_id']}")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert await api.balance(account["account_id"]) == Decimal("0.00")
        assert (await client.get(f"{API}/orders/{order['order_id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_with_lines_is_rejected(self, api, client):
        """Debe impedir borrar un pedido con líneas."""
        order = await api.create_order()
        await api.add_line(order["order_id"])

        response = await client.delete(f"{API}/orders/{order['order_id']}")

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete order with existing order lines or payments"

    @pytest.mark.asyncio
    async def test_delete_missing_order(self, client):
        """Debe responder 404 al borrar un pedido inexistente."""
        assert (await client.delete(f"{API}/orders/999")).status_code == 404
