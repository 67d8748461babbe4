"""API route tests against the in-memory gateway."""

from decimal import Decimal

import pytest

LAPTOP = {
    "name": "Laptop",
    "total_amount": "1200",
    "installments": 12,
    "start_date": "2024-01-15",
    "category": "Electronics",
}


# ── Incomes & expenses ────────────────────────────
@pytest.mark.asyncio
async def test_income_lifecycle(client):
    response = await client.post(
        "/api/v1/incomes", json={"date": "2024-03-01", "amount": "3000", "description": "Salary"}
    )
    assert response.status_code == 201
    income = response.json()
    assert Decimal(income["amount"]) == Decimal("3000")

    listed = await client.get("/api/v1/incomes", params={"month": "2024-03"})
    assert [i["id"] for i in listed.json()] == [income["id"]]
    assert (await client.get("/api/v1/incomes", params={"month": "2024-04"})).json() == []

    assert (await client.delete(f"/api/v1/incomes/{income['id']}")).status_code == 204
    assert (await client.delete(f"/api/v1/incomes/{income['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_negative_amount_is_rejected(client):
    response = await client.post("/api/v1/expenses", json={"date": "2024-03-01", "amount": "-1", "category": "X"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_malformed_month_filter(client):
    response = await client.get("/api/v1/expenses", params={"month": "March"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_fails_soft(client, gateway):
    gateway.failing_reads.add("expenses")

    response = await client.get("/api/v1/expenses")

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_write_failure_is_503(client, gateway):
    gateway.failing_expense_inserts.add(1)

    response = await client.post("/api/v1/expenses", json={"date": "2024-03-01", "amount": "5", "category": "X"})

    assert response.status_code == 503


# ── Categories ────────────────────────────────────
@pytest.mark.asyncio
async def test_category_lifecycle(client, gateway):
    created = await client.post("/api/v1/categories", json={"name": "Pets", "color": "#123456", "icon": "🐶"})
    assert created.status_code == 201
    duplicate = await client.post("/api/v1/categories", json={"name": "Pets"})
    assert duplicate.status_code == 409

    await client.post("/api/v1/expenses", json={"date": "2024-03-01", "amount": "5", "category": "Pets"})
    assert (await client.delete(f"/api/v1/categories/{created.json()['id']}")).status_code == 204

    expenses = (await client.get("/api/v1/expenses")).json()
    assert expenses[0]["category"] == "Uncategorized"


@pytest.mark.asyncio
async def test_category_color_must_be_hex(client):
    response = await client.post("/api/v1/categories", json={"name": "Pets", "color": "red"})
    assert response.status_code == 422


# ── Installments ──────────────────────────────────
@pytest.mark.asyncio
async def test_create_installment(client):
    response = await client.post("/api/v1/installments", json=LAPTOP)

    assert response.status_code == 201
    body = response.json()
    assert Decimal(body["installment"]["monthly_amount"]) == Decimal("100.00")
    assert len(body["expenses"]) == 12


@pytest.mark.asyncio
async def test_create_installment_rejects_zero_count(client):
    response = await client.post("/api/v1/installments", json={**LAPTOP, "installments": 0})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_installment_status_and_upcoming(client):
    await client.post("/api/v1/installments", json=LAPTOP)

    status = (await client.get("/api/v1/installments/status", params={"today": "2024-03-01"})).json()
    upcoming = (await client.get("/api/v1/installments/upcoming", params={"today": "2024-03-01"})).json()

    assert status[0]["paid_count"] == 2
    assert status[0]["remaining"] == 10
    assert Decimal(status[0]["remaining_amount"]) == Decimal("1000.00")
    assert status[0]["next_payment_date"] == "2024-03-15"
    assert status[0]["status_label"] == "InProgress"
    assert [u["name"] for u in upcoming] == ["Laptop"]

    finished = (await client.get("/api/v1/installments/upcoming", params={"today": "2025-01-01"})).json()
    assert finished == []


@pytest.mark.asyncio
async def test_partial_installment_then_complete(client, gateway):
    gateway.failing_expense_inserts.add(5)

    response = await client.post("/api/v1/installments", json=LAPTOP)

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert (detail["created"], detail["failed"]) == (11, 1)

    completed = await client.post(f"/api/v1/installments/{detail['installment_id']}/complete")
    assert completed.status_code == 200
    assert len(completed.json()["expenses"]) == 12


@pytest.mark.asyncio
async def test_partial_installment_then_discard(client, gateway):
    gateway.failing_expense_inserts.add(5)
    detail = (await client.post("/api/v1/installments", json=LAPTOP)).json()["detail"]

    response = await client.delete(f"/api/v1/installments/{detail['installment_id']}")

    assert response.status_code == 204
    assert gateway.installments == []
    assert gateway.expenses == []


@pytest.mark.asyncio
async def test_discard_unknown_installment(client):
    assert (await client.delete("/api/v1/installments/404")).status_code == 404


# ── Analytics ─────────────────────────────────────
@pytest.mark.asyncio
async def test_analytics(client):
    await client.post("/api/v1/categories", json={"name": "Groceries", "color": "#10B981"})
    await client.post("/api/v1/incomes", json={"date": "2024-02-01", "amount": "2000"})
    await client.post("/api/v1/expenses", json={"date": "2024-02-03", "amount": "150.25", "category": "Groceries"})
    await client.post("/api/v1/expenses", json={"date": "2024-01-03", "amount": "80", "category": "Groceries"})
    params = {"month": "2024-02", "today": "2024-03-10"}

    months = (await client.get("/api/v1/analytics/months", params={"today": "2024-03-10"})).json()
    totals = (await client.get("/api/v1/analytics/totals", params=params)).json()
    snapshot = (await client.get("/api/v1/analytics/snapshot", params=params)).json()
    by_category = (await client.get("/api/v1/analytics/by-category", params=params)).json()
    trend = (await client.get("/api/v1/analytics/trend", params=params)).json()

    assert months == {"data": ["2024-01", "2024-02", "2024-03"], "current": "2024-03"}
    assert Decimal(totals["balance"]) == Decimal("1849.75")
    assert len(snapshot["expenses"]) == 1
    assert [(c["name"], Decimal(c["value"])) for c in by_category] == [("Groceries", Decimal("150.25"))]
    assert [p["month"] for p in trend] == ["2024-01", "2024-02", "2024-03"]


@pytest.mark.asyncio
async def test_totals_default_to_current_month(client):
    totals = (await client.get("/api/v1/analytics/totals", params={"today": "2024-07-04"})).json()
    assert totals["month"] == "2024-07"


@pytest.mark.asyncio
async def test_totals_rejects_malformed_month(client):
    response = await client.get("/api/v1/analytics/totals", params={"month": "2024-13"})
    assert response.status_code == 422


# ── Backup ────────────────────────────────────────
@pytest.mark.asyncio
async def test_export_import_reset(client, gateway):
    await client.post("/api/v1/categories", json={"name": "Electronics"})
    await client.post("/api/v1/installments", json={**LAPTOP, "installments": 3, "total_amount": "300"})

    exported = (await client.get("/api/v1/backup/export", params={"today": "2024-03-10"})).json()
    assert exported["version"] == 2
    assert list(exported["monthlyData"]) == ["2024-01", "2024-02", "2024-03"]
    assert exported["monthlyData"]["2024-01"]["installments"][0]["totalAmount"] == "300"

    assert (await client.post("/api/v1/backup/reset")).status_code == 204
    assert gateway.expenses == []

    imported = await client.post("/api/v1/backup/import", json=exported)
    assert imported.status_code == 200
    assert imported.json()["expenses"] == 3
    installment_id = gateway.installments[0].id
    assert {e.installment_id for e in gateway.expenses} == {installment_id}


@pytest.mark.asyncio
async def test_import_rejects_invalid_document(client):
    response = await client.post("/api/v1/backup/import", json={"incomes": [{"date": "nope", "amount": 1}]})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_import_rejects_invalid_installment_without_writing(client, gateway):
    document = {
        "incomes": [{"date": "2024-01-05", "amount": "3000"}],
        "installments": [{"name": "", "totalAmount": 100, "installments": 2, "startDate": "2024-01-01"}],
    }

    response = await client.post("/api/v1/backup/import", json=document)

    assert response.status_code == 422
    assert gateway.categories == []
    assert gateway.incomes == []
