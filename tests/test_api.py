import io
from uuid import uuid4

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook

from app.api.v1.financial_reports import export
from app.core.models import FeeSetting, Student


def _payment_json(student_id, amount: str, month: str = "July", payment_date: str = "2025-07-15") -> dict:
    return {
        "student_id": str(student_id),
        "term": "Term 2",
        "month": month,
        "academic_year": "2025",
        "amount_paid": amount,
        "payment_date": payment_date,
    }


@pytest.mark.asyncio
async def test_record_payment_returns_receipt(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    response = await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "70"))

    assert response.status_code == 201
    body = response.json()
    assert body["student_name"] == "Benny Bosha"
    assert body["class_name"] == "Form 5 B"
    assert body["payment_status"] == "PART_PAYMENT"
    assert float(body["balance"]) == 30
    assert float(body["amount_owed"]) == 100


@pytest.mark.asyncio
async def test_record_payment_unknown_student(client: AsyncClient, fee_setting: FeeSetting) -> None:
    response = await client.post("/api/v1/fee-payments/record", json=_payment_json(uuid4(), "70"))

    assert response.status_code == 404
    assert response.json()["detail"] == "Student not found"


@pytest.mark.asyncio
async def test_record_payment_without_fee_setting(client: AsyncClient, benny: Student) -> None:
    response = await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "70"))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_record_payment_rejects_negative_amount(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    response = await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "-5"))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_class_status_and_daily_summary(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "100"))

    status_response = await client.get("/api/v1/fee-payments/status/class/Form 5/B")
    assert status_response.status_code == 200
    statuses = {s["status"]: s["students"] for s in status_response.json()}
    assert set(statuses) == {"NON_PAYER", "PART_PAYMENT", "FULL_PAYMENT"}
    assert [s["name"] for s in statuses["FULL_PAYMENT"]] == ["Benny Bosha"]

    summary = (await client.get("/api/v1/fee-payments/daily-summary/2025-07-15")).json()
    assert summary["date"] == "2025-07-15"
    assert summary["total_transactions"] == 1

    empty = (await client.get("/api/v1/fee-payments/daily-summary/2025-07-16")).json()
    assert empty["total_transactions"] == 0


@pytest.mark.asyncio
async def test_ledger_lookups(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "70"))

    rows = (await client.get(f"/api/v1/fee-payments/student/{benny.id}/term/Term 2/year/2025")).json()
    assert len(rows) == 1
    assert rows[0]["status"] == "PART_PAYMENT"

    by_date = (await client.get("/api/v1/fee-payments/date/2025-07-15")).json()
    assert [r["student_name"] for r in by_date] == ["Benny Bosha"]


@pytest.mark.asyncio
async def test_search_students(client: AsyncClient, benny: Student) -> None:
    found = (await client.get("/api/v1/fee-payments/search-students", params={"query": "BOS"})).json()
    assert [s["full_name"] for s in found] == ["Benny Bosha"]

    assert (await client.get("/api/v1/fee-payments/search-students", params={"query": " "})).json() == []


@pytest.mark.asyncio
async def test_repair_endpoints(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "70"))

    response = await client.post("/api/v1/fee-payments/fix-payment-status")
    assert response.status_code == 200
    assert response.json() == {"corrected": 0}

    by_name = (await client.post("/api/v1/fee-payments/fix-student-payment/Benny")).json()
    assert by_name["fixed_count"] == 0
    assert by_name["messages"][0] == "Processing student: Benny Bosha"


@pytest.mark.asyncio
async def test_generate_report(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "70"))

    response = await client.get(
        "/api/v1/financial-reports/generate",
        params={"term": "Term 2", "academic_year": "2025", "start_date": "2025-07-01", "end_date": "2025-07-31"},
    )

    assert response.status_code == 200
    report = response.json()
    assert float(report["total_collected_amount"]) == 70
    assert float(report["total_outstanding_amount"]) == 30
    assert float(report["total_expected_revenue"]) == 100
    assert report["class_summaries"][0]["class_name"] == "Form 5 B"
    assert len(report["daily_summaries"]) == 1


@pytest.mark.asyncio
async def test_generate_report_inverted_range(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/financial-reports/generate",
        params={"term": "Term 2", "academic_year": "2025", "start_date": "2025-07-31", "end_date": "2025-07-01"},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_student_history_not_found(client: AsyncClient) -> None:
    response = await client.get(f"/api/v1/financial-reports/student-payment-history/{uuid4()}")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_export_all_payments(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "70"))

    response = await client.get(
        "/api/v1/financial-reports/export/all-payments",
        params={"term": "Term 2", "academic_year": "2025"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert response.headers["content-disposition"] == 'attachment; filename="payments_Term-2_2025.xlsx"'
    ws = load_workbook(io.BytesIO(response.content)).active
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0][0] == "Student ID"
    assert rows[1][1] == "Benny Bosha"
    assert rows[1][9] == "PART_PAYMENT"


@pytest.mark.asyncio
async def test_export_student_history(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "70"))

    response = await client.get(f"/api/v1/financial-reports/export/student-history/{benny.id}")

    assert response.status_code == 200
    ws = load_workbook(io.BytesIO(response.content)).active
    values = [row for row in ws.iter_rows(values_only=True)]
    assert values[1][:2] == ("Student Name:", "Benny Bosha")
    assert ("Total Paid:", 70) == values[-2][:2]


@pytest.mark.asyncio
async def test_fee_settings_api(client: AsyncClient) -> None:
    payload = {"level": "A_LEVEL", "amount": "150", "academic_year": "2025", "term": "Term 1"}

    created = await client.post("/api/v1/fee-settings", json=payload)
    assert created.status_code == 201
    duplicate = await client.post("/api/v1/fee-settings", json=payload)
    assert duplicate.status_code == 409

    found = await client.get("/api/v1/fee-settings/level/A_LEVEL", params={"academic_year": "2025", "term": "Term 1"})
    assert found.status_code == 200
    assert found.json()["id"] == created.json()["id"]

    missing = await client.get("/api/v1/fee-settings/level/O_LEVEL", params={"academic_year": "2025", "term": "Term 1"})
    assert missing.status_code == 404

    deleted = await client.delete(f"/api/v1/fee-settings/{created.json()['id']}")
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_record_payment_rejects_sub_cent_amount(client: AsyncClient, fee_setting: FeeSetting, benny: Student) -> None:
    response = await client.post("/api/v1/fee-payments/record", json=_payment_json(benny.id, "10.005"))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_export_filename_drops_header_characters(client: AsyncClient, fee_setting: FeeSetting) -> None:
    response = await client.get(
        "/api/v1/financial-reports/export/all-payments",
        params={"term": 'Term 2"; evil=1', "academic_year": "2025"},
    )

    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="payments_Term-2-evil1_2025.xlsx"'


def test_export_filename() -> None:
    assert export.export_filename("payment_history", "Term 2", "") == "payment_history_Term-2.xlsx"
    assert export.export_filename("payments", ";", "2025") == "payments_2025.xlsx"
