"""Tests for cart endpoints and cart pricing."""

import pytest


def _add(customer, equipment, **overrides):
    body = {
        "user_id": str(customer.id),
        "equipment_id": str(equipment.id),
        "quantity": 1,
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_empty_cart(test_client, customer, customer_headers):
    response = await test_client.get(f"/api/cart/user/{customer.id}", headers=customer_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["cart_items"] == []
    assert data["total_price"] == 0
    assert data["message"] == "Cart is empty"


@pytest.mark.asyncio
async def test_cannot_view_another_users_cart(test_client, customer, other_headers):
    response = await test_client.get(f"/api/cart/user/{customer.id}", headers=other_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_add_purchase_item(test_client, customer, customer_headers, equipment):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(customer, equipment, quantity=3),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Item added to cart successfully"
    assert len(data["cart_items"]) == 1
    line = data["cart_items"][0]
    assert line["quantity"] == 3
    assert line["price"] == 20.0
    assert line["line_total"] == 60.0
    assert line["equipment"]["name"] == "Two-Person Dome Tent"
    assert data["purchase_subtotal"] == 60.0
    assert data["rental_subtotal"] == 0
    assert data["total_price"] == 60.0


@pytest.mark.asyncio
async def test_rental_is_priced_per_day(test_client, customer, customer_headers, equipment):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(
            customer,
            equipment,
            quantity=2,
            is_rental=True,
            start_date="2030-05-01T10:00:00",
            end_date="2030-05-04T09:00:00",
        ),
    )

    assert response.status_code == 200
    data = response.json()
    # 2 units * 20.0 * 3 days (2 days 23 hours rounds up)
    assert data["cart_items"][0]["line_total"] == 120.0
    assert data["rental_subtotal"] == 120.0
    assert data["total_price"] == 120.0


@pytest.mark.asyncio
async def test_rental_requires_dates(test_client, customer, customer_headers, equipment):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(customer, equipment, is_rental=True),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Rental items require start and end dates"


@pytest.mark.asyncio
async def test_rental_end_must_follow_start(test_client, customer, customer_headers, equipment):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(
            customer,
            equipment,
            is_rental=True,
            start_date="2030-05-04T00:00:00",
            end_date="2030-05-01T00:00:00",
        ),
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "start_date, end_date, days",
    [
        ("2030-05-01T10:00:00Z", "2030-05-04T09:00:00", 3),
        ("2030-05-01T10:00:00+02:00", "2030-05-04T09:00:00", 4),
        ("2030-05-01T10:00:00", "2030-05-04T09:00:00-03:00", 4),
    ],
)
async def test_rental_dates_with_and_without_offsets(
    test_client, customer, customer_headers, equipment, start_date, end_date, days
):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(customer, equipment, is_rental=True, start_date=start_date, end_date=end_date),
    )

    assert response.status_code == 200
    assert response.json()["rental_subtotal"] == 20.0 * days


@pytest.mark.asyncio
async def test_rental_end_before_start_across_offsets(test_client, customer, customer_headers, equipment):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(
            customer,
            equipment,
            is_rental=True,
            start_date="2030-05-01T10:00:00Z",
            end_date="2030-05-01T11:00:00+02:00",
        ),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Rental end date must be after the start date"


@pytest.mark.asyncio
@pytest.mark.parametrize("price", [0, None])
async def test_zero_or_missing_price_uses_equipment_price(test_client, customer, customer_headers, equipment, price):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(customer, equipment, quantity=3, price=price),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["cart_items"][0]["price"] == 20.0
    assert data["total_price"] == 60.0


@pytest.mark.asyncio
async def test_explicit_price_is_kept(test_client, customer, customer_headers, equipment):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(customer, equipment, quantity=2, price=15.5),
    )

    assert response.json()["total_price"] == 31.0


@pytest.mark.asyncio
async def test_same_item_is_merged(test_client, customer, customer_headers, equipment):
    await test_client.post("/api/cart/add", headers=customer_headers, json=_add(customer, equipment, quantity=2))
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(customer, equipment, quantity=3),
    )

    data = response.json()
    assert len(data["cart_items"]) == 1
    assert data["cart_items"][0]["quantity"] == 5
    assert data["total_price"] == 100.0


@pytest.mark.asyncio
async def test_add_more_than_stock(test_client, customer, customer_headers, equipment):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(customer, equipment, quantity=11),
    )

    assert response.status_code == 400
    data = response.json()
    assert data["available_quantity"] == 10
    assert data["requested_quantity"] == 11


@pytest.mark.asyncio
async def test_merge_checks_combined_quantity(test_client, customer, customer_headers, equipment):
    await test_client.post("/api/cart/add", headers=customer_headers, json=_add(customer, equipment, quantity=8))
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(customer, equipment, quantity=3),
    )

    assert response.status_code == 400
    assert response.json()["requested_quantity"] == 11


@pytest.mark.asyncio
async def test_add_for_another_user_forbidden(test_client, other_customer, customer_headers, equipment):
    response = await test_client.post(
        "/api/cart/add",
        headers=customer_headers,
        json=_add(other_customer, equipment),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_add_unknown_equipment(test_client, customer, customer_headers):
    response = await test_client.post("/api/cart/add", headers=customer_headers, json={
        "user_id": str(customer.id),
        "equipment_id": "00000000-0000-0000-0000-000000000000",
        "quantity": 1,
    })

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_item_quantity(test_client, customer, customer_headers, equipment):
    added = await test_client.post("/api/cart/add", headers=customer_headers, json=_add(customer, equipment))
    item_id = added.json()["cart_items"][0]["id"]

    response = await test_client.put(f"/api/cart/update/{item_id}", headers=customer_headers, json={"quantity": 4})

    assert response.status_code == 200
    data = response.json()
    assert data["cart_items"][0]["quantity"] == 4
    assert data["total_price"] == 80.0


@pytest.mark.asyncio
async def test_update_item_quantity_must_be_positive(test_client, customer, customer_headers, equipment):
    added = await test_client.post("/api/cart/add", headers=customer_headers, json=_add(customer, equipment))
    item_id = added.json()["cart_items"][0]["id"]

    response = await test_client.put(f"/api/cart/update/{item_id}", headers=customer_headers, json={"quantity": 0})

    assert response.status_code == 400
    assert response.json()["message"] == "Quantity must be greater than zero"


@pytest.mark.asyncio
async def test_other_user_cannot_update_item(test_client, customer, customer_headers, other_headers, equipment):
    added = await test_client.post("/api/cart/add", headers=customer_headers, json=_add(customer, equipment))
    item_id = added.json()["cart_items"][0]["id"]

    response = await test_client.put(f"/api/cart/update/{item_id}", headers=other_headers, json={"quantity": 2})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_remove_item(test_client, customer, customer_headers, equipment):
    added = await test_client.post("/api/cart/add", headers=customer_headers, json=_add(customer, equipment))
    item_id = added.json()["cart_items"][0]["id"]

    response = await test_client.delete(f"/api/cart/remove/{item_id}", headers=customer_headers)

    assert response.status_code == 200
    assert response.json()["cart_items"] == []


@pytest.mark.asyncio
async def test_clear_cart(test_client, customer, customer_headers, equipment):
    await test_client.post("/api/cart/add", headers=customer_headers, json=_add(customer, equipment))

    response = await test_client.delete(f"/api/cart/clear/{customer.id}", headers=customer_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Cart cleared successfully"}

    response = await test_client.get(f"/api/cart/user/{customer.id}", headers=customer_headers)
    assert response.json()["cart_items"] == []


@pytest.mark.asyncio
async def test_clear_missing_cart(test_client, customer, customer_headers):
    response = await test_client.delete(f"/api/cart/clear/{customer.id}", headers=customer_headers)

    assert response.status_code == 404
