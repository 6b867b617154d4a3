"""Contract tests for payment API endpoints."""

from decimal import Decimal

import pytest

pytestmark = pytest.mark.contract


def pay(client, invoice_id, amount, **extra):
    return client.post(
        "/api/payments/records",
        json={"invoice_id": invoice_id, "payment_amount": amount, **extra},
    )


class TestPaymentRecordEndpoints:
    """Test payment record endpoints."""

    def test_create_payment_response(self, client, invoice_id):
        response = pay(
            client,
            invoice_id,
            "1500.50",
            payment_method="BANK_TRANSFER",
            payment_date="2024-03-05",
            transaction_reference="TX-9",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["invoice_id"] == invoice_id
        assert Decimal(data["payment_amount"]) == Decimal("1500.50")
        assert data["payment_method"] == "BANK_TRANSFER"
        assert data["payment_status"] == "PENDING"
        assert data["payment_date"] == "2024-03-05"
        assert data["transaction_reference"] == "TX-9"

    def test_overpayment_returns_remaining(self, client, invoice_id):
        pay(client, invoice_id, 5000, confirmed=True)

        response = pay(client, invoice_id, 500)

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "OverpaymentError"
        assert Decimal(error["remaining"]) == Decimal("459")

    def test_non_positive_amount(self, client, invoice_id):
        response = pay(client, invoice_id, 0)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "InvalidAmountError"

    def test_unknown_method(self, client, invoice_id):
        response = pay(client, invoice_id, 10, payment_method="BARTER")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "InvalidInput"

    def test_unknown_invoice(self, client):
        response = pay(client, 4242, 10)
        assert response.status_code == 404

    def test_confirm_completes_invoice(self, client, invoice_id):
        record = pay(client, invoice_id, 5459).json()

        response = client.put(
            f"/api/payments/records/{record['id']}/status",
            json={"payment_status": "CONFIRMED", "actor": "cashier"},
        )

        assert response.status_code == 200
        assert response.json()["payment_status"] == "CONFIRMED"
        assert client.get(f"/invoice/{invoice_id}").json()["status"] == "COMPLETE"

    def test_balance(self, client, invoice_id):
        pay(client, invoice_id, 1000, confirmed=True)
        pay(client, invoice_id, 400)

        response = client.get(f"/api/payments/invoices/{invoice_id}/balance")

        data = response.json()
        assert Decimal(data["remaining"]) == Decimal("4459")
        assert Decimal(data["total_confirmed"]) == Decimal("1000")
        assert Decimal(data["total_pending"]) == Decimal("400")

    def test_list_filter_update_delete(self, client, invoice_id):
        first = pay(client, invoice_id, 1000, confirmed=True).json()
        second = pay(client, invoice_id, 400).json()

        listed = client.get(
            "/api/payments/records",
            params={"invoice_id": invoice_id, "payment_status": "PENDING"},
        ).json()
        assert [item["id"] for item in listed] == [second["id"]]

        response = client.put(f"/api/payments/records/{second['id']}", json={"notes": "late"})
        assert response.json()["notes"] == "late"

        response = client.delete(f"/api/payments/records/{first['id']}", params={"actor": "admin"})
        assert response.status_code == 200
        assert response.json()["deleted"] == first["id"]
        assert Decimal(response.json()["remaining"]) == Decimal("5459")

        assert client.get(f"/api/payments/records/{first['id']}").status_code == 404

    def test_update_amount_overpayment(self, client, invoice_id):
        record = pay(client, invoice_id, 1000).json()

        response = client.put(
            f"/api/payments/records/{record['id']}", json={"payment_amount": 6000}
        )

        assert response.status_code == 409
        assert Decimal(response.json()["error"]["remaining"]) == Decimal("5459")


class TestProofEndpoints:
    """Test payment proof endpoints."""

    def test_attach_list_delete(self, client, invoice_id):
        record = pay(client, invoice_id, 100).json()
        base = f"/api/payments/records/{record['id']}/proofs"

        response = client.post(
            base, json={"file_ref": "uploads/slip-1.png", "proof_type": "BANK_SLIP"}
        )
        assert response.status_code == 201
        proof = response.json()
        assert proof["proof_type"] == "BANK_SLIP"
        assert proof["payment_record_id"] == record["id"]

        assert [item["id"] for item in client.get(base).json()] == [proof["id"]]

        response = client.delete(f"{base}/{proof['id']}")
        assert response.status_code == 204
        assert client.get(base).json() == []

    def test_unknown_proof_type(self, client, invoice_id):
        record = pay(client, invoice_id, 100).json()

        response = client.post(
            f"/api/payments/records/{record['id']}/proofs",
            json={"file_ref": "x.png", "proof_type": "SELFIE"},
        )
        assert response.status_code == 400
