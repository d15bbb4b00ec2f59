"""Tests for camping equipment endpoints."""

import pytest

from tourism_api.models.equipment import DEFAULT_EQUIPMENT_IMAGE


@pytest.mark.asyncio
async def test_list_equipment_filtered_by_category(test_client, equipment):
    response = await test_client.get("/api/camping-equipment", params={"category": "Tents"})
    assert response.status_code == 200
    assert response.json()["count"] == 1

    response = await test_client.get("/api/camping-equipment", params={"category": "Cooking"})
    assert response.json()["count"] == 0


@pytest.mark.asyncio
async def test_get_equipment(test_client, equipment):
    response = await test_client.get(f"/api/camping-equipment/{equipment.id}")

    assert response.status_code == 200
    item = response.json()["equipment"]
    assert item["name"] == "Two-Person Dome Tent"
    assert item["quantity"] == 10


@pytest.mark.asyncio
async def test_create_equipment_without_image_uses_default(test_client, admin_headers):
    response = await test_client.post(
        "/api/camping-equipment",
        headers=admin_headers,
        data={
            "name": "Camp Stove",
            "description": "Single burner stove",
            "price": "54.5",
            "quantity": "3",
            "category": "Cooking",
        },
    )

    assert response.status_code == 201
    item = response.json()["equipment"]
    assert item["image"] == DEFAULT_EQUIPMENT_IMAGE
    assert item["category"] == "Cooking"
    assert item["is_available"] is True


@pytest.mark.asyncio
async def test_create_equipment_with_image(test_client, admin_headers, png_bytes):
    response = await test_client.post(
        "/api/camping-equipment",
        headers=admin_headers,
        data={"name": "Headlamp", "description": "400 lumen", "price": "24.99", "category": "Lighting"},
        files={"image": ("lamp.png", png_bytes, "image/png")},
    )

    assert response.status_code == 201
    assert response.json()["equipment"]["image"].startswith("/uploads/equipment/")


@pytest.mark.asyncio
async def test_create_equipment_requires_name_description_price(test_client, admin_headers):
    response = await test_client.post(
        "/api/camping-equipment",
        headers=admin_headers,
        data={"name": "Mystery Item"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide name, description, and price"


@pytest.mark.asyncio
async def test_create_equipment_requires_admin(test_client, customer_headers):
    response = await test_client.post(
        "/api/camping-equipment",
        headers=customer_headers,
        data={"name": "Tent", "description": "A tent", "price": "10"},
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_equipment_writes_audit_log(test_client, admin_headers):
    response = await test_client.post(
        "/api/camping-equipment",
        headers=admin_headers,
        data={"name": "Trekking Poles", "description": "Pair of poles", "price": "30", "quantity": "7"},
    )
    equipment_id = response.json()["equipment"]["id"]

    response = await test_client.get(
        "/api/inventory/audit-logs",
        headers=admin_headers,
        params={"equipment_id": equipment_id},
    )

    logs = response.json()["logs"]
    assert len(logs) == 1
    assert logs[0]["action_type"] == "create"
    assert logs[0]["quantity_before"] == 0
    assert logs[0]["quantity_after"] == 7
    assert logs[0]["performed_by"] == "boss"


@pytest.mark.asyncio
async def test_update_equipment_quantity_is_audited(test_client, equipment, admin_headers):
    equipment_id = str(equipment.id)

    response = await test_client.put(
        f"/api/camping-equipment/{equipment_id}",
        headers=admin_headers,
        data={"quantity": "4", "price": "22.5"},
    )

    assert response.status_code == 200
    item = response.json()["equipment"]
    assert item["quantity"] == 4
    assert item["price"] == 22.5
    assert item["name"] == "Two-Person Dome Tent"

    response = await test_client.get(
        "/api/inventory/audit-logs",
        headers=admin_headers,
        params={"equipment_id": equipment_id},
    )
    actions = {log["action_type"] for log in response.json()["logs"]}
    assert actions == {"create", "update"}


@pytest.mark.asyncio
async def test_update_equipment_rejects_unknown_category(test_client, equipment, admin_headers):
    response = await test_client.put(
        f"/api/camping-equipment/{equipment.id}",
        headers=admin_headers,
        data={"category": "Boats"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_equipment(test_client, equipment, admin_headers):
    equipment_id = str(equipment.id)

    response = await test_client.delete(f"/api/camping-equipment/{equipment_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Equipment deleted successfully"

    response = await test_client.get(f"/api/camping-equipment/{equipment_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_equipment_drops_it_from_carts(
    test_client, equipment, customer, customer_headers, admin_headers
):
    equipment_id = str(equipment.id)
    await test_client.post("/api/cart/add", headers=customer_headers, json={
        "user_id": str(customer.id),
        "equipment_id": equipment_id,
        "quantity": 2,
    })

    await test_client.delete(f"/api/camping-equipment/{equipment_id}", headers=admin_headers)

    response = await test_client.get(f"/api/cart/user/{customer.id}", headers=customer_headers)
    data = response.json()
    assert data["cart_items"] == []
    assert data["total_price"] == 0
