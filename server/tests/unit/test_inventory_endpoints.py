"""Tests for batch stock updates, inventory stats and audit logs."""

import pytest

from tourism_api.services.equipment_service import EquipmentService


@pytest.mark.asyncio
async def test_batch_update_applies_changes(test_client, equipment, admin_headers):
    equipment_id = str(equipment.id)

    response = await test_client.post("/api/inventory/batch-update", headers=admin_headers, json={
        "reason": "Delivery from supplier",
        "items": [{"equipment_id": equipment_id, "quantity_change": 5, "reference": "DN-1001"}],
    })

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Updated 1 of 1 items"
    result = data["results"][0]
    assert result["success"] is True
    assert result["quantity_before"] == 10
    assert result["quantity_after"] == 15

    response = await test_client.get(f"/api/camping-equipment/{equipment_id}")
    assert response.json()["equipment"]["quantity"] == 15


@pytest.mark.asyncio
async def test_batch_update_reports_failed_rows(test_client, equipment, admin_headers):
    equipment_id = str(equipment.id)
    missing_id = "00000000-0000-0000-0000-000000000000"

    response = await test_client.post("/api/inventory/batch-update", headers=admin_headers, json={
        "reason": "Stock count",
        "items": [
            {"equipment_id": equipment_id, "quantity_change": -3},
            {"equipment_id": missing_id, "quantity_change": 2},
            {"equipment_id": equipment_id, "quantity_change": -50},
        ],
    })

    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["success"] for r in results] == [True, False, False]
    assert results[1]["message"] == "Equipment not found"
    assert results[2]["quantity_before"] == 7

    response = await test_client.get(
        "/api/inventory/audit-logs",
        headers=admin_headers,
        params={"equipment_id": equipment_id},
    )
    actions = sorted(log["action_type"] for log in response.json()["logs"])
    assert actions == ["create", "stock-out"]


@pytest.mark.asyncio
async def test_batch_update_all_rows_failing(test_client, admin_headers):
    response = await test_client.post("/api/inventory/batch-update", headers=admin_headers, json={
        "reason": "Typo",
        "items": [{"equipment_id": "00000000-0000-0000-0000-000000000000", "quantity_change": 1}],
    })

    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "No stock changes could be applied"
    assert data["errors"] == {"00000000-0000-0000-0000-000000000000": "Equipment not found"}


@pytest.mark.asyncio
async def test_batch_update_requires_items(test_client, admin_headers):
    response = await test_client.post("/api/inventory/batch-update", headers=admin_headers, json={
        "reason": "Nothing",
        "items": [],
    })

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_inventory_requires_admin(test_client, customer_headers):
    assert (await test_client.get("/api/inventory/stats", headers=customer_headers)).status_code == 403
    assert (await test_client.get("/api/inventory/audit-logs", headers=customer_headers)).status_code == 403


@pytest.mark.asyncio
async def test_inventory_stats(test_client, test_session, admin, admin_headers, equipment):
    service = EquipmentService(test_session)
    await service.create_equipment(
        name="Down Sleeping Bag", description="Rated to -5C", price=100.0,
        performed_by=admin.username, quantity=2, category="Sleeping Bags",
    )
    await service.create_equipment(
        name="Headlamp", description="400 lumen", price=25.0,
        performed_by=admin.username, quantity=0, category="Lighting",
    )

    response = await test_client.get("/api/inventory/stats", headers=admin_headers)

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["total_items"] == 3
    assert stats["total_quantity"] == 12
    assert stats["total_value"] == 400.0
    assert stats["categories"]["Tents"]["item_count"] == 1
    assert stats["categories"]["Sleeping Bags"]["total_value"] == 200.0
    assert stats["categories"]["Cooking"]["item_count"] == 0
    assert [i["name"] for i in stats["low_stock_items"]] == ["Down Sleeping Bag"]
    assert [i["name"] for i in stats["out_of_stock_items"]] == ["Headlamp"]


@pytest.mark.asyncio
async def test_audit_logs_respect_limit(test_client, equipment, admin_headers):
    for change in (1, 1, 1):
        await test_client.post("/api/inventory/batch-update", headers=admin_headers, json={
            "reason": "Restock",
            "items": [{"equipment_id": str(equipment.id), "quantity_change": change}],
        })

    response = await test_client.get("/api/inventory/audit-logs", headers=admin_headers, params={"limit": 2})

    assert response.status_code == 200
    assert response.json()["count"] == 2
