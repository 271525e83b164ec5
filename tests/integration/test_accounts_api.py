"""Tests de integración para cuentas de cliente."""

from decimal import Decimal

import pytest

API = "/api/v1"


class TestCreateAccount:
    """Tests para el alta de cuentas."""

    @pytest.mark.asyncio
    async def test_new_account_starts_at_zero(self, client):
        """Debe abrir la cuenta con saldo 0.00."""
        response = await client.post(
            f"{API}/accounts",
            json={"customer_id": 1, "account_number": "ACC-0001", "credit_limit": "500.00", "opened_date": "2024-01-15"},
        )

        assert response.status_code == 201
        account = response.json()
        assert account["current_balance"] == "0.00"
        assert Decimal(account["credit_limit"]) == Decimal("500.00")
        assert account["opened_date"] == "2024-01-15"
        assert account["status"] == "ACTIVE"

    @pytest.mark.asyncio
    async def test_account_without_limit(self, api):
        """Debe permitir cuentas sin límite de crédito."""
        account = await api.create_account()

        assert account["credit_limit"] is None

    @pytest.mark.asyncio
    async def test_duplicate_account_number(self, api, client):
        """Debe rechazar un número de cuenta repetido."""
        await api.create_account(account_number="ACC-DUP")

        response = await client.post(f"{API}/accounts", json={"customer_id": 2, "account_number": "ACC-DUP"})

        assert response.status_code == 400
        assert response.json()["error"] == "Account number already exists"
        assert response.json()["error_code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_unknown_customer(self, client):
        """Debe rechazar un cliente inexistente."""
        response = await client.post(f"{API}/accounts", json={"customer_id": 999, "account_number": "ACC-X"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid customer_id: 999. Customer does not exist."

    @pytest.mark.asyncio
    async def test_negative_limit(self, client):
        """Debe rechazar un límite negativo."""
        response = await client.post(
            f"{API}/accounts", json={"customer_id": 1, "account_number": "ACC-NEG", "credit_limit": "-1.00"}
        )

        assert response.status_code == 400


class TestUpdateAccount:
    """Tests para la modificación de cuentas."""

    @pytest.mark.asyncio
    async def test_limit_below_balance_is_rejected(self, api, client):
        """Debe rechazar un límite por debajo del saldo actual."""
        account = await api.create_account(credit_limit="100.00")
        await api.create_order(account_id=account["account_id"], total_amount="60.00")

        response = await client.put(f"{API}/accounts/{account['account_id']}", json={"credit_limit": "50.00"})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "credit_limit"

    @pytest.mark.asyncio
    async def test_limit_and_status_update(self, api, client):
        """Debe modificar límite y estado."""
        account = await api.create_account(credit_limit="100.00")

        response = await client.put(
            f"{API}/accounts/{account['account_id']}", json={"credit_limit": "250.00", "status": "SUSPENDED"}
        )

        assert response.status_code == 200
        assert Decimal(response.json()["credit_limit"]) == Decimal("250.00")
        assert response.json()["status"] == "SUSPENDED"

    @pytest.mark.asyncio
    async def test_clearing_limit_makes_account_unlimited(self, api, client):
        """Debe dejar la cuenta sin límite al enviar null."""
        account = await api.create_account(credit_limit="10.00")

        response = await client.put(f"{API}/accounts/{account['account_id']}", json={"credit_limit": None})
        order = await api.create_order(account_id=account["account_id"], total_amount="1000.00")

        assert response.status_code == 200
        assert response.json()["credit_limit"] is None
        assert Decimal(order["total_amount"]) == Decimal("1000.00")

    @pytest.mark.asyncio
    async def test_balance_cannot_be_written_directly(self, api, client):
        """Debe ignorar intentos de escribir el saldo."""
        account = await api.create_account()

        response = await client.put(f"{API}/accounts/{account['account_id']}", json={"current_balance": "99.00"})

        assert response.status_code == 400
        assert response.json()["error"] == "No fields to update"
        assert await api.balance(account["account_id"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_number_taken_by_other_account(self, api, client):
        """Debe rechazar un número usado por otra cuenta."""
        await api.create_account(account_number="ACC-A")
        other = await api.create_account(account_number="ACC-B")

        response = await client.put(f"{API}/accounts/{other['account_id']}", json={"account_number": "ACC-A"})

        assert response.status_code == 400
        assert response.json()["error"] == "Account number already exists"

    @pytest.mark.asyncio
    async def test_update_missing_account(self, client):
        """Debe responder 404 para una cuenta inexistente."""
        response = await client.put(f"{API}/accounts/999", json={"status": "CLOSED"})

        assert response.status_code == 404


class TestDeleteAccount:
    """Tests para el borrado de cuentas."""

    @pytest.mark.asyncio
    async def test_account_in_use_cannot_be_deleted(self, api, client):
        """Debe impedir borrar una cuenta con pedidos."""
        account = await api.create_account()
        await api.create_order(account_id=account["account_id"])

        response = await client.delete(f"{API}/accounts/{account['account_id']}")

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete account with existing orders or payments"

    @pytest.mark.asyncio
    async def test_unused_account_is_deleted(self, api, client):
        """Debe borrar una cuenta sin referencias."""
        account = await api.create_account()

        response = await client.delete(f"{API}/accounts/{account['account_id']}")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert (await client.get(f"{API}/accounts/{account['account_id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_account(self, client):
        """Debe responder 404 al borrar una cuenta inexistente."""
        response = await client.delete(f"{API}/accounts/999")

        assert response.status_code == 404
        assert response.json()["error"] == "Account not found"


class TestReconciliation:
    """Tests para la conciliación de saldos."""

    @pytest.mark.asyncio
    async def test_reconciliation_of_active_account(self, api, client):
        """Debe cuadrar el saldo con pedidos menos pagos."""
        account = await api.create_account()
        await api.create_order(account_id=account["account_id"], total_amount="150.00")
        order = await api.create_order(account_id=account["account_id"])
        await api.add_line(order["order_id"], product_id=2, quantity=2)
        await api.pay(account["account_id"], "70.00")

        response = await client.get(f"{API}/accounts/{account['account_id']}/reconciliation")

        assert response.status_code == 200
        report = response.json()
        assert Decimal(report["order_totals"]) == Decimal("200.00")
        assert Decimal(report["payments"]) == Decimal("70.00")
        assert Decimal(report["expected_balance"]) == Decimal("130.00")
        assert Decimal(report["stored_balance"]) == Decimal("130.00")
        assert Decimal(report["difference"]) == Decimal("0.00")
        assert report["consistent"] is True

    @pytest.mark.asyncio
    async def test_reconciliation_of_missing_account(self, client):
        """Debe responder 404 al conciliar una cuenta inexistente."""
        assert (await client.get(f"{API}/accounts/999/reconciliation")).status_code == 404
