from __future__ import annotations

import pytest

RECEIPT = {
    "patient_name": "Ali Raza",
    "service_details": [
        {"service_name": "Consultation", "rate": 1000, "category": "consultation", "dr_share_percent": 50},
        {"service_name": "CBC", "rate": 600},
    ],
    "paid": 1600,
}


@pytest.fixture
def open_shift(client):
    res = client.post(
        "/api/shifts/open",
        json={"shift_date": "2025-01-01", "shift_type": "morning", "opened_by": "reception"},
    )
    assert res.status_code == 201
    return res.get_json()["data"]


def test_health(client):
    res = client.get("/api/health")

    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["message"] == "HIMS OPD Backend is running"


def test_current_shift_when_none_is_open(client):
    body = client.get("/api/shifts/current").get_json()

    assert body["success"] is True
    assert body["data"] is None
    assert body["message"] == "No open shift found"


def test_open_shift_and_conflict_envelope(client, open_shift):
    assert open_shift["shift_type"] == "Morning"
    assert open_shift["is_closed"] is False

    res = client.post(
        "/api/shifts/open",
        json={"shift_date": "2025-01-01", "shift_type": "Evening", "opened_by": "reception"},
    )

    assert res.status_code == 400
    body = res.get_json()
    assert body["success"] is False
    assert body["code"] == "open_shift_exists"
    assert body["record"]["shift_id"] == open_shift["shift_id"]


def test_invalid_shift_type(client):
    res = client.post(
        "/api/shifts/open",
        json={"shift_date": "2025-01-01", "shift_type": "afternoon", "opened_by": "reception"},
    )

    assert res.status_code == 400
    assert "shift_type must be one of" in res.get_json()["message"]


def test_create_and_fetch_receipt(client, open_shift):
    res = client.post("/api/opd-patient-data", json=RECEIPT)

    assert res.status_code == 201
    data = res.get_json()["data"]
    assert data["receipt_code"] == "OPD00001"
    assert data["total_amount"] == 1600.0
    assert data["dr_share_amount"] == 500.0
    assert data["shift_id"] == open_shift["shift_id"]

    fetched = client.get(f"/api/opd-patient-data/{data['receipt_id']}").get_json()
    assert fetched["data"]["receipt_code"] == "OPD00001"


def test_receipt_needs_a_list_of_items(client, open_shift):
    res = client.post("/api/opd-patient-data", json={"service_details": "CBC"})

    assert res.status_code == 400
    assert res.get_json()["message"] == "service_details must be a list of items"


def test_receipt_without_open_shift(client):
    res = client.post("/api/opd-patient-data", json=RECEIPT)

    assert res.status_code == 400
    assert res.get_json()["code"] == "no_open_shift"


def test_unknown_receipt(client):
    res = client.get("/api/opd-patient-data/99")

    assert res.status_code == 404
    assert res.get_json()["success"] is False


def test_close_shift_twice(client, open_shift):
    client.post("/api/opd-patient-data", json=RECEIPT)
    url = f"/api/shifts/{open_shift['shift_id']}/close"

    res = client.put(url, json={"closed_by": "reception"})
    assert res.status_code == 200
    summary = res.get_json()["data"]["summary"]
    assert summary["total_quantity"] == 1
    assert summary["total_paid"] == 1600.0

    again = client.put(url, json={"closed_by": "reception"})
    assert again.status_code == 400
    assert again.get_json()["code"] == "already_closed"


def test_close_through_cash_route(client, open_shift):
    res = client.post(
        "/api/opd-shift-cash/close",
        json={"shift_id": open_shift["shift_id"], "submitted_by": "reception"},
    )

    assert res.status_code == 201
    assert res.get_json()["data"]["shift"]["is_closed"] is True

    daily = client.get("/api/opd-shift-cash/daily/2025-01-01").get_json()["data"]
    assert len(daily["shifts"]) == 1


def test_expense_and_payment_routes(client, open_shift):
    expense = client.post(
        "/api/expenses",
        json={"expense_name": "Tea", "expense_amount": 120, "expense_by": "reception"},
    )
    assert expense.status_code == 201
    assert expense.get_json()["data"]["expense_code"] == "EXP0001"

    payment = client.post(
        "/api/consultant-payments",
        json={"doctor_name": "Dr Sara", "total": 1000, "share_percent": 40},
    )
    assert payment.status_code == 201
    assert payment.get_json()["data"]["share_amount"] == 400.0


def test_unknown_route_gets_json_envelope(client):
    res = client.get("/api/nope")

    assert res.status_code == 404
    assert res.get_json() == {"success": False, "message": "Route not found"}


def test_daily_report_as_csv(client, open_shift):
    client.post("/api/opd-patient-data", json=RECEIPT)

    res = client.get("/api/reports/daily?date=2025-01-01&format=csv")

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    text = res.get_data().decode("utf-8-sig")
    assert text.splitlines()[0].startswith("shift_type,patient_count")
    assert "Morning" in text


def test_shift_report_requires_shift_id(client):
    res = client.get("/api/reports/shift")

    assert res.status_code == 400
