"""Tests de integración para pagos."""

from decimal import Decimal

import pytest

API = "/api/v1"


class TestCreatePayment:
    """Tests para el alta de pagos."""

    @pytest.mark.asyncio
    async def test_payment_reduces_balance(self, api):
        """Un pago de 60.00 sobre un saldo de 150.00 lo deja en 90.00."""
        account = await api.create_account()
        await api.create_order(account_id=account["account_id"], total_amount="150.00")

        response = await api.pay(account["account_id"], "60.00")

        assert response.status_code == 201
        payment = response.json()
        assert Decimal(payment["amount"]) == Decimal("60.00")
        assert payment["payment_method"] == "CARD"
        assert payment["account_id"] == account["account_id"]
        assert await api.balance(account["account_id"]) == Decimal("90.00")

    @pytest.mark.asyncio
    async def test_payment_can_leave_credit_balance(self, api):
        """Debe permitir un saldo negativo tras un pago."""
        account = await api.create_account(credit_limit="10.00")

        response = await api.pay(account["account_id"], "25.00")

        assert response.status_code == 201
        assert await api.balance(account["account_id"]) == Decimal("-25.00")

    @pytest.mark.asyncio
    async def test_payment_with_card_and_order(self, api):
        """Debe registrar tarjeta y pedido del pago."""
        account = await api.create_account()
        order = await api.create_order(account_id=account["account_id"], total_amount="20.00")

        response = await api.pay(account["account_id"], "20.00", card_id=1, order_id=order["order_id"])

        assert response.status_code == 201
        assert response.json()["card_id"] == 1
        assert response.json()["order_id"] == order["order_id"]
        assert await api.balance(account["account_id"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_payment_without_account(self, client):
        """Debe aceptar pagos sin cuenta."""
        response = await client.post(
            f"{API}/payments",
            json={"amount": "12.00", "payment_method": "CASH", "payment_date": "2024-05-02T12:00:00"},
        )

        assert response.status_code == 201
        assert response.json()["account_id"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "0.00", "-5.00"])
    async def test_non_positive_amount_is_rejected(self, api, amount):
        """Debe rechazar importes no positivos."""
        account = await api.create_account()

        response = await api.pay(account["account_id"], amount)

        assert response.status_code == 400
        assert response.json()["error"] == "amount must be greater than 0"
        assert await api.balance(account["account_id"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_amount_with_three_decimals_is_rejected(self, api):
        """Debe rechazar importes con más de dos decimales."""
        account = await api.create_account()

        response = await api.pay(account["account_id"], "10.005")

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid amount")

    @pytest.mark.asyncio
    async def test_unknown_card_is_rejected(self, api):
        """Debe rechazar una tarjeta inexistente."""
        account = await api.create_account()

        response = await api.pay(account["account_id"], "5.00", card_id=99)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid card_id: 99. Payment card does not exist."
        assert await api.balance(account["account_id"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_unknown_account_is_rejected(self, api):
        """Debe rechazar una cuenta inexistente."""
        response = await api.pay(999, "5.00")

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "account_id"


class TestDeletePayment:
    """Tests para el borrado de pagos."""

    @pytest.mark.asyncio
    async def test_delete_restores_balance(self, api, client):
        """Borrar el pago de 60.00 devuelve el saldo a 150.00."""
        account = await api.create_account()
        await api.create_order(account_id=account["account_id"], total_amount="150.00")
        payment = (await api.pay(account["account_id"], "60.00")).json()

        response = await client.delete(f"{API}/payments/{payment['payment_id']}")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert await api.balance(account["account_id"]) == Decimal("150.00")
        assert (await client.get(f"{API}/payments/{payment['payment_id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_is_not_limited_by_credit(self, api, client):
        """Revertir un pago no se bloquea aunque el saldo supere el límite."""
        account = await api.create_account(credit_limit="100.00")
        await api.create_order(account_id=account["account_id"], total_amount="100.00")
        payment = (await api.pay(account["account_id"], "50.00")).json()
        await api.create_order(account_id=account["account_id"], total_amount="50.00")

        response = await client.delete(f"{API}/payments/{payment['payment_id']}")

        assert response.status_code == 200
        assert await api.balance(account["account_id"]) == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_delete_missing_payment(self, client):
        """Debe responder 404 al borrar un pago inexistente."""
        response = await client.delete(f"{API}/payments/999")

        assert response.status_code == 404
        assert response.json()["error"] == "Payment not found"


class TestReadPayments:
    """Tests para la consulta de pagos."""

    @pytest.mark.asyncio
    async def test_list_and_get(self, api, client):
        """Debe listar del más reciente al más antiguo y obtener por id."""
        account = await api.create_account()
        first = (await api.pay(account["account_id"], "1.00", payment_date="2024-01-01T00:00:00")).json()
        second = (await api.pay(account["account_id"], "2.00", payment_date="2024-02-01T00:00:00")).json()

        payments = (await client.get(f"{API}/payments")).json()
        single = await client.get(f"{API}/payments/{first['payment_id']}")

        assert [p["payment_id"] for p in payments] == [second["payment_id"], first["payment_id"]]
        assert single.status_code == 200
        assert Decimal(single.json()["amount"]) == Decimal("1.00")
