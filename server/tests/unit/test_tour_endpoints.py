"""Tests for the tour catalogue endpoints."""

import pytest

from tourism_api.core.config import settings


def _tour_form(**overrides):
    form = {
        "name": "Yala Safari Weekend",
        "description": "Two-day wildlife safari",
        "location": "Yala",
        "price": "320",
        "duration": "2",
        "date": "2030-06-01T06:00:00",
    }
    form.update(overrides)
    return form


@pytest.mark.asyncio
async def test_list_tours_is_public(test_client, tour):
    response = await test_client.get("/api/tours")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["tours"][0]["name"] == tour.name


@pytest.mark.asyncio
async def test_get_tour_not_found(test_client):
    response = await test_client.get("/api/tours/00000000-0000-0000-0000-000000000000")

    assert response.status_code == 404
    assert response.json()["resource_type"] == "tour"


@pytest.mark.asyncio
async def test_create_tour_requires_admin(test_client, customer_headers, png_bytes):
    response = await test_client.post(
        "/api/tours",
        headers=customer_headers,
        data=_tour_form(),
        files={"image": ("yala.png", png_bytes, "image/png")},
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_tour_with_image(test_client, admin_headers, png_bytes):
    response = await test_client.post(
        "/api/tours",
        headers=admin_headers,
        data=_tour_form(),
        files={"image": ("yala.png", png_bytes, "image/png")},
    )

    assert response.status_code == 201
    tour = response.json()["tour"]
    assert tour["price"] == 320.0
    assert tour["image"].startswith("/uploads/tours/")
    assert tour["image"].endswith(".png")

    stored = settings.upload_path / tour["image"][len("/uploads/"):]
    assert stored.read_bytes() == png_bytes


@pytest.mark.asyncio
async def test_create_tour_requires_image(test_client, admin_headers):
    response = await test_client.post("/api/tours", headers=admin_headers, data=_tour_form())

    assert response.status_code == 400
    assert response.json()["message"] == "Please upload an image"


@pytest.mark.asyncio
async def test_create_tour_rejects_non_image(test_client, admin_headers):
    response = await test_client.post(
        "/api/tours",
        headers=admin_headers,
        data=_tour_form(),
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"


@pytest.mark.asyncio
async def test_update_tour_keeps_image_without_upload(test_client, tour, admin_headers):
    response = await test_client.put(
        f"/api/tours/{tour.id}",
        headers=admin_headers,
        data={"price": "175.5", "name": "Ella Rock at Dawn"},
    )

    assert response.status_code == 200
    updated = response.json()["tour"]
    assert updated["price"] == 175.5
    assert updated["name"] == "Ella Rock at Dawn"
    assert updated["image"] == "/uploads/tours/ella.jpg"


@pytest.mark.asyncio
async def test_delete_tour_removes_bookings(test_client, tour, customer_headers, admin_headers):
    response = await test_client.post(
        "/api/booking/bookings",
        headers=customer_headers,
        json={"tour_id": str(tour.id), "travel_date": "2030-01-01T00:00:00"},
    )
    booking_id = response.json()["booking"]["id"]
    tour_id = str(tour.id)

    response = await test_client.delete(f"/api/tours/{tour_id}", headers=admin_headers)
    assert response.status_code == 200

    response = await test_client.get(f"/api/tours/{tour_id}")
    assert response.status_code == 404
    response = await test_client.get(f"/api/booking/booking/{booking_id}", headers=admin_headers)
    assert response.status_code == 404
