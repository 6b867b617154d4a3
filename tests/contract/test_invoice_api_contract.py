"""Contract tests for invoice API endpoints."""

from decimal import Decimal

import pytest

pytestmark = pytest.mark.contract


class TestInvoiceEndpoints:
    """Test invoice lifecycle over HTTP."""

    def test_create_invoice_response(self, client, invoice_id):
        response = client.get(f"/invoice/{invoice_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["billing_month"] == "2024-03"
        assert data["status"] == "INCOMPLETE"
        assert Decimal(data["water_bill"]) == Decimal("120")
        assert Decimal(data["electricity_bill"]) == Decimal("1339")
        assert Decimal(data["net_amount"]) == Decimal("5459")
        assert data["due_date"] == "2024-03-31"

    def test_create_for_unknown_contract(self, client):
        response = client.post(
            "/invoice/create",
            json={
                "contract_id": 999,
                "create_date": "2024-03-01",
                "water_unit": 1,
                "electricity_unit": 1,
            },
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NotFound"

    def test_negative_units_are_invalid_input(self, client, contract_id):
        response = client.post(
            "/invoice/create",
            json={
                "contract_id": contract_id,
                "create_date": "2024-03-01",
                "water_unit": -4,
                "electricity_unit": 206,
            },
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "InvalidInput"

    def test_duplicate_month(self, client, contract_id, invoice_id):
        response = client.post(
            "/invoice/create",
            json={
                "contract_id": contract_id,
                "create_date": "2024-03-15",
                "water_unit": 1,
                "electricity_unit": 1,
            },
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "InvalidPeriod"

    def test_update_and_lock(self, client, invoice_id):
        response = client.put(f"/invoice/update/{invoice_id}", json={"water_unit": 5})
        assert response.status_code == 200
        assert Decimal(response.json()["net_amount"]) == Decimal("5489")

        client.post(
            "/api/payments/records", json={"invoice_id": invoice_id, "payment_amount": 100}
        )

        response = client.put(f"/invoice/update/{invoice_id}", json={"water_unit": 6})
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "InvoiceLocked"

    def test_list_and_cancel(self, client, contract_id, invoice_id):
        response = client.get("/invoice/list", params={"contract_id": contract_id})
        assert [item["id"] for item in response.json()] == [invoice_id]

        response = client.post(f"/invoice/{invoice_id}/cancel", json={"actor": "admin"})
        assert response.status_code == 200
        assert response.json()["cancelled_at"] is not None

        assert client.get("/invoice/list").json() == []
        assert len(client.get("/invoice/list", params={"include_cancelled": True}).json()) == 1

    def test_get_unknown_invoice(self, client):
        response = client.get("/invoice/12345")

        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "NotFound", "message": "Invoice 12345 not found"}
        }


class TestStatusAndPenaltyEndpoints:
    """Test status overrides and penalties over HTTP."""

    def test_override_and_recompute(self, client, invoice_id):
        response = client.post(f"/invoice/{invoice_id}/status", json={"status": "COMPLETE"})
        assert response.json()["status"] == "COMPLETE"

        response = client.post(f"/invoice/{invoice_id}/status", json={})
        assert response.json()["status"] == "INCOMPLETE"

    def test_unknown_status(self, client, invoice_id):
        response = client.post(f"/invoice/{invoice_id}/status", json={"status": "OVERDUE"})
        assert response.status_code == 400

    def test_penalty_applied_once(self, client, invoice_id):
        response = client.post(f"/invoice/{invoice_id}/penalty", json={"as_of": "2024-04-01"})
        data = response.json()
        assert data["applied"] is True
        assert Decimal(data["penalty"]) == Decimal("546")
        assert Decimal(data["net_amount"]) == Decimal("6005")

        response = client.post(f"/invoice/{invoice_id}/penalty", json={"as_of": "2024-05-01"})
        assert response.json()["applied"] is False
        assert response.json()["reason"] == "already_applied"

    def test_penalty_without_body_is_not_overdue_before_due_date(self, client, contract_id):
        created = client.post(
            "/invoice/create",
            json={
                "contract_id": contract_id,
                "create_date": "2099-01-01",
                "water_unit": 0,
                "electricity_unit": 0,
            },
        ).json()

        response = client.post(f"/invoice/{created['id']}/penalty")
        assert response.json()["reason"] == "not_overdue"

    def test_sweep_and_waive(self, client, invoice_id):
        response = client.post("/invoice/penalties/apply", json={"as_of": "2024-04-01"})
        assert [item["invoice_id"] for item in response.json()] == [invoice_id]

        response = client.post(f"/invoice/{invoice_id}/waive-penalty")
        assert response.status_code == 200
        assert Decimal(response.json()["penalty_total"]) == Decimal("0")
        assert Decimal(response.json()["net_amount"]) == Decimal("5459")


class TestOutstandingEndpoint:
    """Test the outstanding balance summary."""

    def test_carry_forward(self, client, contract_id, invoice_id):
        client.post(
            "/api/payments/records",
            json={"invoice_id": invoice_id, "payment_amount": 3000, "confirmed": True},
        )
        client.post(
            "/invoice/create",
            json={
                "contract_id": contract_id,
                "create_date": "2024-04-01",
                "water_unit": 0,
                "electricity_unit": 0,
            },
        )

        response = client.get(f"/invoice/outstanding/{contract_id}")

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total_outstanding"]) == Decimal("6459")
        assert data["total_invoices"] == 2
        assert [Decimal(item["remaining"]) for item in data["invoices"]] == [
            Decimal("2459"),
            Decimal("6459"),
        ]

    def test_unknown_contract(self, client):
        response = client.get("/invoice/outstanding/777")
        assert response.status_code == 404


class TestImportEndpoints:
    """Test usage import over HTTP."""

    def test_json_import_reports_rejections(self, client, contract_id):
        response = client.post(
            "/invoice/import",
            json=[
                {
                    "room_number": "M100",
                    "water_usage": "4",
                    "electricity_usage": "206",
                    "billing_month": "2024-03",
                },
                {
                    "room_number": "X000",
                    "water_usage": "1",
                    "electricity_usage": "1",
                    "billing_month": "2024-03",
                },
            ],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] == 1
        assert [(r["row_index"], r["reason"]) for r in data["rejected"]] == [(1, "UnknownRoom")]

    def test_csv_import(self, client, contract_id):
        body = (
            "RoomNumber,WaterUsage,ElectricityUsage,BillingMonth\n"
            "M100,4,206,2024-03\n"
            "M100,-1,206,2024-04\n"
        )

        response = client.post(
            "/invoice/import-csv", content=body, headers={"Content-Type": "text/csv"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] == 1
        assert [(r["row_index"], r["reason"]) for r in data["rejected"]] == [(1, "InvalidInput")]

        invoices = client.get("/invoice/list", params={"contract_id": contract_id}).json()
        assert invoices[0]["due_date"] == "2024-03-15"

    def test_csv_missing_column(self, client):
        response = client.post("/invoice/import-csv", content="RoomNumber,WaterUsage\nM100,4\n")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "InvalidInput"
