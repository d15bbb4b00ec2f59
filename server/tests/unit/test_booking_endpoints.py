"""Tests for tour booking endpoints."""

import pytest

MISSING_ID = "00000000-0000-0000-0000-000000000000"


async def _book(client, headers, tour_id, travel_date="2030-03-15T00:00:00"):
    return await client.post(
        "/api/booking/bookings",
        headers=headers,
        json={"tour_id": str(tour_id), "travel_date": travel_date},
    )


@pytest.mark.asyncio
async def test_create_booking_starts_pending(test_client, tour, customer, customer_headers):
    response = await _book(test_client, customer_headers, tour.id)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    booking = data["booking"]
    assert booking["status"] == "PENDING"
    assert booking["user_id"] == str(customer.id)
    assert booking["tour"]["name"] == tour.name
    assert booking["travel_date"].startswith("2030-03-15")


@pytest.mark.asyncio
async def test_create_booking_requires_auth(test_client, tour):
    response = await test_client.post(
        "/api/booking/bookings",
        json={"tour_id": str(tour.id), "travel_date": "2030-03-15T00:00:00"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_booking_unknown_tour(test_client, customer_headers):
    response = await _book(test_client, customer_headers, MISSING_ID)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_booking_missing_date(test_client, tour, customer_headers):
    response = await test_client.post(
        "/api/booking/bookings",
        headers=customer_headers,
        json={"tour_id": str(tour.id)},
    )

    assert response.status_code == 400
    assert response.json()["violations"][0]["field"] == "travel_date"


@pytest.mark.asyncio
async def test_list_own_bookings(test_client, tour, customer, customer_headers, other_headers):
    await _book(test_client, customer_headers, tour.id)
    await _book(test_client, other_headers, tour.id)

    response = await test_client.get(f"/api/booking/bookings/user/{customer.id}", headers=customer_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["bookings"][0]["user_id"] == str(customer.id)


@pytest.mark.asyncio
async def test_cannot_list_other_users_bookings(test_client, customer, other_headers):
    response = await test_client.get(f"/api/booking/bookings/user/{customer.id}", headers=other_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_lists_all_bookings(test_client, tour, customer_headers, other_headers, admin_headers):
    await _book(test_client, customer_headers, tour.id)
    await _book(test_client, other_headers, tour.id)

    response = await test_client.get("/api/booking/all", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["count"] == 2


@pytest.mark.asyncio
async def test_list_all_bookings_requires_admin(test_client, customer_headers):
    response = await test_client.get("/api/booking/all", headers=customer_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_bookings_for_tour(test_client, tour, customer_headers):
    await _book(test_client, customer_headers, tour.id)

    response = await test_client.get(f"/api/booking/bookings/tour/{tour.id}", headers=customer_headers)

    assert response.status_code == 200
    assert response.json()["count"] == 1


@pytest.mark.asyncio
async def test_get_booking_visibility(test_client, tour, customer_headers, other_headers, admin_headers):
    booking_id = (await _book(test_client, customer_headers, tour.id)).json()["booking"]["id"]

    assert (await test_client.get(f"/api/booking/booking/{booking_id}", headers=customer_headers)).status_code == 200
    assert (await test_client.get(f"/api/booking/booking/{booking_id}", headers=admin_headers)).status_code == 200
    assert (await test_client.get(f"/api/booking/booking/{booking_id}", headers=other_headers)).status_code == 403


@pytest.mark.asyncio
async def test_admin_confirms_booking(test_client, tour, customer_headers, admin_headers):
    booking_id = (await _book(test_client, customer_headers, tour.id)).json()["booking"]["id"]

    response = await test_client.put(
        f"/api/booking/bookings/{booking_id}/status",
        headers=admin_headers,
        json={"status": "CONFIRMED"},
    )

    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "CONFIRMED"


@pytest.mark.asyncio
async def test_invalid_booking_status_rejected(test_client, tour, customer_headers, admin_headers):
    booking_id = (await _book(test_client, customer_headers, tour.id)).json()["booking"]["id"]

    response = await test_client.put(
        f"/api/booking/bookings/{booking_id}/status",
        headers=admin_headers,
        json={"status": "SHIPPED"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_deletes_booking(test_client, tour, customer_headers, admin_headers):
    booking_id = (await _book(test_client, customer_headers, tour.id)).json()["booking"]["id"]

    response = await test_client.delete(f"/api/booking/bookings/{booking_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Booking deleted successfully"

    response = await test_client.get(f"/api/booking/booking/{booking_id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_missing_booking(test_client, admin_headers):
    response = await test_client.delete(f"/api/booking/bookings/{MISSING_ID}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["resource_type"] == "booking"


@pytest.mark.asyncio
async def test_customer_cannot_delete_booking(test_client, tour, customer_headers):
    booking_id = (await _book(test_client, customer_headers, tour.id)).json()["booking"]["id"]

    response = await test_client.delete(f"/api/booking/bookings/{booking_id}", headers=customer_headers)

    assert response.status_code == 403
