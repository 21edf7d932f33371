from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.db import get_db
from main import app


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


def _as(user_id: int) -> dict:
    return {"X-User-Id": str(user_id)}


def _production(seed, tonnage: str) -> dict:
    return {
        "date_time": "2024-05-01T08:30:00",
        "contractor_id": seed.contractor_id,
        "truck_number": "KT 1234 AB",
        "tonnage": tonnage,
        "coal_grade": "high",
        "jetty_id": seed.jetty_id,
        "operator_id": seed.operator_id,
    }


def _barging(seed, tonnage: str) -> dict:
    return {
        "date_time": "2024-05-02T14:00:00",
        "contractor_id": seed.contractor_id,
        "ship_batch_number": "MV-0042",
        "tonnage": tonnage,
        "jetty_id": seed.jetty_id,
        "operator_id": seed.barging_operator_id,
    }


async def test_health_check(client):
    res = await client.get("/")

    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.json()["database"] == "sqlite"
    assert res.headers["X-Request-Id"]


async def test_request_id_is_echoed(client):
    res = await client.get("/", headers={"X-Request-Id": "trace-123"})

    assert res.headers["X-Request-Id"] == "trace-123"


async def test_production_listing_is_paged(client, seed):
    for _ in range(3):
        await client.post(
            "/production/", json=_production(seed, "1"), headers=_as(seed.operator_id)
        )

    res = await client.get(
        "/production/", params={"page": 2, "page_size": 2}, headers=_as(seed.auditor_id)
    )

    data = res.json()["data"]
    assert data["total"] == 3
    assert data["page"] == 2
    assert data["page_size"] == 2
    assert len(data["items"]) == 1


async def test_missing_user_header_is_a_validation_error(client, seed):
    res = await client.get("/stock/")

    assert res.status_code == 422
    assert res.json()["error_code"] == "VALIDATION_ERROR"


async def test_unknown_user_is_unauthorized(client, seed):
    res = await client.get("/stock/", headers=_as(9999))

    assert res.status_code == 401
    assert res.json()["error_code"] == "UNAUTHORIZED"


async def test_inactive_user_is_forbidden(client, seed):
    res = await client.get("/stock/", headers=_as(seed.inactive_user_id))

    assert res.status_code == 403


async def test_role_is_enforced(client, seed):
    res = await client.post(
        "/barging/", json=_barging(seed, "10"), headers=_as(seed.operator_id)
    )

    assert res.status_code == 403
    assert res.json()["error_code"] == "PERMISSION_DENIED"


async def test_production_and_barging_flow(client, seed):
    res = await client.post(
        "/production/", json=_production(seed, "25.50"), headers=_as(seed.operator_id)
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert Decimal(body["data"]["stock_tonnage"]) == Decimal("25.50")
    assert body["data"]["stock_version"] == 1

    res = await client.get(
        "/barging/validate-stock",
        params={"contractor_id": seed.contractor_id, "jetty_id": seed.jetty_id, "tonnage": "30"},
        headers=_as(seed.barging_operator_id),
    )
    assert res.status_code == 200
    assert res.json()["data"]["valid"] is False

    res = await client.post(
        "/barging/", json=_barging(seed, "30"), headers=_as(seed.barging_operator_id)
    )
    assert res.status_code == 409
    body = res.json()
    assert body["success"] is False
    assert body["error_code"] == "INSUFFICIENT_STOCK"
    assert body["details"] == {"available": "25.50", "requested": "30.00"}

    res = await client.post(
        "/barging/", json=_barging(seed, "25.50"), headers=_as(seed.barging_operator_id)
    )
    assert res.status_code == 200
    assert Decimal(res.json()["data"]["stock_tonnage"]) == Decimal("0")

    res = await client.get("/stock/totals", headers=_as(seed.auditor_id))
    assert Decimal(res.json()["data"]["total_tonnage"]) == Decimal("0")


async def test_barging_without_stock_is_not_found(client, seed):
    res = await client.post(
        "/barging/", json=_barging(seed, "10"), headers=_as(seed.barging_operator_id)
    )

    assert res.status_code == 404
    assert res.json()["error_code"] == "NO_STOCK_FOUND"


async def test_get_production_record_not_found(client, seed):
    res = await client.get("/production/4242", headers=_as(seed.admin_id))

    assert res.status_code == 404
    assert res.json()["error_code"] == "NOT_FOUND"


async def test_adjustment_and_approval_flow(client, seed, make_stock):
    stock = await make_stock(seed.contractor_id, seed.jetty_id, "100")
    payload = {
        "stock_id": stock.id,
        "adjustment_amount": "-4.75",
        "reason": "spillage",
        "reason_description": "Conveyor spill at berth 2",
        "adjusted_by": seed.admin_id,
    }

    # operators cannot adjust
    res = await client.post("/stock/adjustments", json=payload, headers=_as(seed.operator_id))
    assert res.status_code == 403

    res = await client.post("/stock/adjustments", json=payload, headers=_as(seed.admin_id))
    assert res.status_code == 200
    adjustment = res.json()["data"]
    assert Decimal(adjustment["new_tonnage"]) == Decimal("95.25")

    res = await client.post(
        f"/stock/adjustments/{adjustment['id']}/approve", headers=_as(seed.auditor_id)
    )
    assert res.status_code == 200
    assert res.json()["data"]["approved_by"] == seed.auditor_id

    res = await client.post(
        f"/stock/adjustments/{adjustment['id']}/approve", headers=_as(seed.admin_id)
    )
    assert res.status_code == 409
    assert res.json()["error_code"] == "ALREADY_APPROVED"

    res = await client.get("/stock/adjustments", headers=_as(seed.auditor_id))
    items = res.json()["data"]
    assert len(items) == 1
    assert items[0]["approved_by_name"] == "Audit Person"


async def test_negative_adjustment_is_conflict(client, seed, make_stock):
    stock = await make_stock(seed.contractor_id, seed.jetty_id, "1")
    payload = {
        "stock_id": stock.id,
        "adjustment_amount": "-2",
        "reason": "waste",
        "reason_description": "Washed out",
        "adjusted_by": seed.admin_id,
    }

    res = await client.post("/stock/adjustments", json=payload, headers=_as(seed.admin_id))

    assert res.status_code == 409
    assert "cannot be negative" in res.json()["message"].lower()


async def test_grouped_stock_views(client, seed, make_stock):
    await make_stock(seed.contractor_id, seed.jetty_id, "10")
    await make_stock(seed.other_contractor_id, seed.jetty_id, "5")

    res = await client.get("/stock/by-jetty", headers=_as(seed.auditor_id))
    groups = res.json()["data"]
    assert len(groups) == 1
    assert Decimal(groups[0]["total_tonnage"]) == Decimal("15")

    res = await client.get("/stock/by-contractor", headers=_as(seed.auditor_id))
    assert len(res.json()["data"]) == 2
