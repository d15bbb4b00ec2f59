"""Tests for tour payment endpoints."""

import pytest


def _tour_payment(card, tour, **overrides):
    body = {
        **card,
        "tour_id": str(tour.id),
        "amount": 300.0,
        "number_of_persons": 2,
        "customer_info": {"name": "Jane Traveller", "email": "jane@example.com", "phone": "0771234567"},
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_submit_tour_payment(test_client, customer_headers, card, tour):
    response = await test_client.post(
        "/api/tour-payments/submit",
        headers=customer_headers,
        json=_tour_payment(card, tour, special_requirements="Vegetarian meals"),
    )

    assert response.status_code == 201
    payment = response.json()["payment"]
    assert payment["type"] == "tour"
    assert payment["status"] == "pending"
    assert payment["tour_id"] == str(tour.id)
    assert payment["number_of_tickets"] == 2
    assert payment["tour_details"]["name"] == tour.name
    assert payment["tour_details"]["persons"] == 2
    assert payment["customer_info"]["email"] == "jane@example.com"
    assert payment["card_number"] == "XXXX-XXXX-XXXX-1234"


@pytest.mark.asyncio
async def test_tour_payment_amount_must_match(test_client, customer_headers, card, tour):
    response = await test_client.post(
        "/api/tour-payments/submit",
        headers=customer_headers,
        json=_tour_payment(card, tour, amount=250.0),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid payment amount. Expected: 300.0, Received: 250.0"


@pytest.mark.asyncio
async def test_tour_payment_unknown_tour(test_client, customer_headers, card, tour):
    response = await test_client.post(
        "/api/tour-payments/submit",
        headers=customer_headers,
        json=_tour_payment(card, tour, tour_id="00000000-0000-0000-0000-000000000000"),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_tour_payment_requires_customer_email(test_client, customer_headers, card, tour):
    response = await test_client.post(
        "/api/tour-payments/submit",
        headers=customer_headers,
        json=_tour_payment(card, tour, customer_info={"name": "Jane", "email": "nope"}),
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_tour_payment_persons_limit(test_client, customer_headers, card, tour):
    response = await test_client.post(
        "/api/tour-payments/submit",
        headers=customer_headers,
        json=_tour_payment(card, tour, number_of_persons=51, amount=7650.0),
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_my_tour_bookings(test_client, customer_headers, other_headers, card, tour):
    await test_client.post("/api/tour-payments/submit", headers=customer_headers, json=_tour_payment(card, tour))
    await test_client.post("/api/tour-payments/submit", headers=other_headers, json=_tour_payment(card, tour))
    await test_client.post(
        "/api/payments/submit",
        headers=customer_headers,
        json={**card, "type": "general", "amount": 10},
    )

    response = await test_client.get("/api/tour-payments/my-bookings", headers=customer_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["bookings"][0]["type"] == "tour"


@pytest.mark.asyncio
async def test_admin_tour_payment_views(test_client, customer_headers, admin_headers, card, tour):
    await test_client.post("/api/tour-payments/submit", headers=customer_headers, json=_tour_payment(card, tour))

    response = await test_client.get("/api/tour-payments/all", headers=admin_headers)
    assert response.json()["count"] == 1

    response = await test_client.get(f"/api/tour-payments/tour/{tour.id}", headers=admin_headers)
    assert response.json()["count"] == 1

    response = await test_client.get(
        "/api/tour-payments/tour/00000000-0000-0000-0000-000000000000",
        headers=admin_headers,
    )
    assert response.json()["count"] == 0


@pytest.mark.asyncio
async def test_tour_payment_admin_views_forbidden_for_customers(test_client, customer_headers):
    response = await test_client.get("/api/tour-payments/all", headers=customer_headers)

    assert response.status_code == 403
