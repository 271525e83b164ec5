"""Tests de integración para las líneas de pedido y su efecto en el saldo."""

from decimal import Decimal

import pytest

API = "/api/v1"


async def _account_order(api, credit_limit=None):
    account = await api.create_account(credit_limit=credit_limit)
    order = await api.create_order(account_id=account["account_id"])
    return account["account_id"], order["order_id"]


class TestCreateLine:
    """Tests para el alta de líneas."""

    @pytest.mark.asyncio
    async def test_line_within_limit_is_charged(self, api):
        """8 x Widget (10.00) deja el pedido y el saldo en 80.00."""
        account_id, order_id = await _account_order(api, credit_limit="100.00")

        response = await api.add_line(order_id, product_id=1, quantity=8)

        assert response.status_code == 201
        line = response.json()
        assert line["line_no"] == 1
        assert Decimal(line["unit_price"]) == Decimal("10.00")
        assert Decimal(line["line_total"]) == Decimal("80.00")
        assert line["product_name"] == "Widget"
        assert line["sku"] == "WID-001"
        assert await api.order_total(order_id) == Decimal("80.00")
        assert await api.balance(account_id) == Decimal("80.00")

    @pytest.mark.asyncio
    async def test_line_over_limit_is_rejected_without_side_effects(self, api, client):
        """Una línea de 30.00 sobre un saldo de 80.00 con límite 100.00 se rechaza."""
        account_id, order_id = await _account_order(api, credit_limit="100.00")
        await api.add_line(order_id, product_id=1, quantity=8)

        response = await api.add_line(order_id, product_id=3, quantity=6)

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "CREDIT_LIMIT_EXCEEDED"
        assert body["details"]["credit_limit"] == "100.00"
        assert body["details"]["current_balance"] == "80.00"
        assert body["details"]["proposed_balance"] == "110.00"
        lines = (await client.get(f"{API}/order-lines/order/{order_id}")).json()
        assert [line["line_no"] for line in lines] == [1]
        assert await api.order_total(order_id) == Decimal("80.00")
        assert await api.balance(account_id) == Decimal("80.00")

    @pytest.mark.asyncio
    async def test_line_reaching_limit_exactly_is_accepted(self, api):
        """Debe aceptar una línea que deja el saldo justo en el límite."""
        account_id, order_id = await _account_order(api, credit_limit="100.00")
        await api.add_line(order_id, product_id=1, quantity=8)

        response = await api.add_line(order_id, product_id=3, quantity=4)

        assert response.status_code == 201
        assert response.json()["line_no"] == 2
        assert await api.balance(account_id) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_explicit_price_and_discount(self, api):
        """Debe respetar precio, descuento y número de línea indicados."""
        account_id, order_id = await _account_order(api)

        response = await api.add_line(
            order_id, product_id=2, quantity=2, line_no=5, unit_price="20.00", discount_amount="5.50"
        )

        assert response.status_code == 201
        line = response.json()
        assert line["line_no"] == 5
        assert Decimal(line["line_total"]) == Decimal("34.50")
        assert await api.order_total(order_id) == Decimal("34.50")
        assert await api.balance(account_id) == Decimal("34.50")

    @pytest.mark.asyncio
    async def test_duplicate_line_number_is_conflict(self, api):
        """Debe rechazar un número de línea repetido."""
        _, order_id = await _account_order(api)
        await api.add_line(order_id, line_no=1)

        response = await api.add_line(order_id, line_no=1)

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "CONFLICT"
        assert body["error"] == "Order line already exists for this order and line number"

    @pytest.mark.asyncio
    async def test_discount_larger_than_line_is_rejected(self, api):
        """Debe rechazar un descuento mayor que la línea."""
        _, order_id = await _account_order(api)

        response = await api.add_line(order_id, product_id=3, quantity=1, discount_amount="6.00")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_zero_quantity_is_rejected(self, api):
        """Debe rechazar cantidad cero."""
        _, order_id = await _account_order(api)

        response = await api.add_line(order_id, quantity=0)

        assert response.status_code == 400
        assert response.json()["error"] == "quantity must be greater than 0"

    @pytest.mark.asyncio
    async def test_unknown_product_is_rejected(self, api):
        """Debe rechazar un producto inexistente."""
        _, order_id = await _account_order(api)

        response = await api.add_line(order_id, product_id=999)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid product_id: 999. Product does not exist."

    @pytest.mark.asyncio
    async def test_unknown_order_is_rejected(self, api):
        """Debe rechazar un pedido inexistente."""
        response = await api.add_line(999)

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "order_id"

    @pytest.mark.asyncio
    async def test_line_on_order_without_account_only_moves_total(self, api):
        """Debe recalcular el total aunque el pedido no tenga cuenta."""
        order = await api.create_order()

        response = await api.add_line(order["order_id"], product_id=2, quantity=3)

        assert response.status_code == 201
        assert await api.order_total(order["order_id"]) == Decimal("75.00")


class TestUpdateLine:
    """Tests para la modificación de líneas."""

    @pytest.mark.asyncio
    async def test_quantity_change_moves_balance(self, api, client):
        """Debe trasladar al saldo el cambio de cantidad."""
        account_id, order_id = await _account_order(api)
        await api.add_line(order_id, product_id=1, quantity=5)

        response = await client.put(f"{API}/order-lines/{order_id}/1", json={"quantity": 2})

        assert response.status_code == 200
        assert Decimal(response.json()["line_total"]) == Decimal("20.00")
        assert await api.balance(account_id) == Decimal("20.00")

    @pytest.mark.asyncio
    async def test_update_over_limit_keeps_previous_line(self, api, client):
        """Debe conservar la línea anterior si se excede el límite."""
        account_id, order_id = await _account_order(api, credit_limit="50.00")
        await api.add_line(order_id, product_id=1, quantity=3)

        response = await client.put(f"{API}/order-lines/{order_id}/1", json={"quantity": 6})

        assert response.status_code == 400
        assert response.json()["error_code"] == "CREDIT_LIMIT_EXCEEDED"
        line = (await client.get(f"{API}/order-lines/{order_id}/1")).json()
        assert line["quantity"] == 3
        assert await api.order_total(order_id) == Decimal("30.00")
        assert await api.balance(account_id) == Decimal("30.00")

    @pytest.mark.asyncio
    async def test_update_missing_line(self, api, client):
        """Debe responder 404 al modificar una línea inexistente."""
        _, order_id = await _account_order(api)

        response = await client.put(f"{API}/order-lines/{order_id}/7", json={"quantity": 2})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_update_is_rejected(self, api, client):
        """Debe rechazar una modificación sin campos."""
        _, order_id = await _account_order(api)
        await api.add_line(order_id)

        response = await client.put(f"{API}/order-lines/{order_id}/1", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "No fields to update"


class TestDeleteLine:
    """Tests para el borrado de líneas."""

    @pytest.mark.asyncio
    async def test_delete_reverses_line(self, api, client):
        """Debe revertir el importe de la línea borrada."""
        account_id, order_id = await _account_order(api)
        await api.add_line(order_id, product_id=1, quantity=2)
        await api.add_line(order_id, product_id=3, quantity=2)

        response = await client.delete(f"{API}/order-lines/{order_id}/1")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert await api.order_total(order_id) == Decimal("10.00")
        assert await api.balance(account_id) == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_delete_last_line_leaves_zero_total(self, api, client):
        """Debe dejar total y saldo en cero al borrar la última línea."""
        account_id, order_id = await _account_order(api)
        await api.add_line(order_id, product_id=2, quantity=1)

        await client.delete(f"{API}/order-lines/{order_id}/1")

        assert await api.order_total(order_id) == Decimal("0.00")
        assert await api.balance(account_id) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_delete_missing_line(self, client):
        """Debe responder 404 al borrar una línea inexistente."""
        assert (await client.delete(f"{API}/order-lines/1/1")).status_code == 404


class TestReadLines:
    """Tests para la consulta de líneas."""

    @pytest.mark.asyncio
    async def test_lines_by_order(self, api, client):
        """Debe listar solo las líneas del pedido indicado."""
        _, order_id = await _account_order(api)
        other = await api.create_order()
        await api.add_line(order_id, product_id=1)
        await api.add_line(order_id, product_id=2)
        await api.add_line(other["order_id"], product_id=3)

        lines = (await client.get(f"{API}/order-lines/order/{order_id}")).json()
        everything = (await client.get(f"{API}/order-lines")).json()

        assert [line["product_id"] for line in lines] == [1, 2]
        assert len(everything) == 3

    @pytest.mark.asyncio
    async def test_missing_line_body(self, client):
        """Debe responder con el cuerpo de error de línea no encontrada."""
        response = await client.get(f"{API}/order-lines/1/1")

        assert response.status_code == 404
        assert response.json()["error"] == "Order line not found"


class TestHeaderTotalReplacedByLines:
    """Tests para pedidos creados con total que después reciben líneas."""

    async def _reconciliation(self, client, account_id):
        return (await client.get(f"{API}/accounts/{account_id}/reconciliation")).json()

    @pytest.mark.asyncio
    async def test_first_line_replaces_header_total(self, api, client):
        """Debe sustituir el total de 150.00 por el de la línea sin contar dos veces."""
        account = await api.create_account()
        order = await api.create_order(account_id=account["account_id"], total_amount="150.00")

        response = await api.add_line(order["order_id"], product_id=1, quantity=1)

        assert response.status_code == 201
        assert await api.order_total(order["order_id"]) == Decimal("10.00")
        assert await api.balance(account["account_id"]) == Decimal("10.00")
        report = await self._reconciliation(client, account["account_id"])
        assert report["consistent"] is True
        assert Decimal(report["order_totals"]) == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_reduction_on_account_at_limit_is_reversed(self, api, client):
        """Debe aplicar la reducción como reversión aunque el saldo esté en el límite."""
        account = await api.create_account(credit_limit="150.00")
        order = await api.create_order(account_id=account["account_id"], total_amount="150.00")
        assert await api.balance(account["account_id"]) == Decimal("150.00")

        response = await api.add_line(order["order_id"], product_id=1, quantity=1)

        assert response.status_code == 201
        assert await api.order_total(order["order_id"]) == Decimal("10.00")
        assert await api.balance(account["account_id"]) == Decimal("10.00")
        assert (await self._reconciliation(client, account["account_id"]))["consistent"] is True

    @pytest.mark.asyncio
    async def test_increase_charges_only_the_difference(self, api, client):
        """Debe cargar solo la diferencia entre el total previo y el de las líneas."""
        account = await api.create_account(credit_limit="20.00")
        order = await api.create_order(account_id=account["account_id"], total_amount="5.00")

        response = await api.add_line(order["order_id"], product_id=1, quantity=2)

        assert response.status_code == 201
        assert await api.order_total(order["order_id"]) == Decimal("20.00")
        assert await api.balance(account["account_id"]) == Decimal("20.00")
        assert (await self._reconciliation(client, account["account_id"]))["consistent"] is True
