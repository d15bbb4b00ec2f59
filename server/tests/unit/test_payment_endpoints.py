"""Tests for payment submission, owner edits and admin review."""

import pytest
from sqlalchemy import select

from tourism_api.models.idempotency import IdempotencyRecord
from tourism_api.services.idempotency_service import request_fingerprint


def _payment(card, **overrides):
    body = {**card, "type": "general", "amount": 49.99}
    body.update(overrides)
    return body


async def _submit(client, headers, body, **kwargs):
    return await client.post("/api/payments/submit", headers=headers, json=body, **kwargs)


@pytest.mark.asyncio
async def test_submit_general_payment(test_client, customer, customer_headers, card):
    response = await _submit(test_client, customer_headers, _payment(card))

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Payment submitted successfully and awaiting approval"
    payment = data["payment"]
    assert payment["status"] == "pending"
    assert payment["user_id"] == str(customer.id)
    assert payment["card_number"] == "XXXX-XXXX-XXXX-1234"
    assert "cvv" not in payment


@pytest.mark.asyncio
async def test_submit_requires_auth(test_client, card):
    response = await test_client.post("/api/payments/submit", json=_payment(card))

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_card_number_must_have_16_digits(test_client, customer_headers, card):
    response = await _submit(test_client, customer_headers, _payment(card, card_number="4111 1111 1111 123"))

    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Card number must be 16 digits"
    assert data["violations"][0]["field"] == "card_number"


@pytest.mark.asyncio
async def test_card_number_must_use_ascii_digits(test_client, customer_headers, card):
    response = await _submit(test_client, customer_headers, _payment(card, card_number="\u0661" * 16))

    assert response.status_code == 400
    assert response.json()["message"] == "Card number must be 16 digits"


@pytest.mark.asyncio
async def test_expired_card_rejected(test_client, customer_headers, card):
    response = await _submit(test_client, customer_headers, _payment(card, expiry_date="01/20"))

    assert response.status_code == 400
    assert response.json()["message"] == "Card has expired"


@pytest.mark.asyncio
async def test_bad_expiry_format_rejected(test_client, customer_headers, card):
    response = await _submit(test_client, customer_headers, _payment(card, expiry_date="2030-01"))

    assert response.status_code == 400
    assert response.json()["message"] == "Expiry date must be in MM/YY format"


@pytest.mark.asyncio
async def test_card_holder_letters_only(test_client, customer_headers, card):
    response = await _submit(test_client, customer_headers, _payment(card, card_holder="R2D2"))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_event_payment_requires_event_id(test_client, customer_headers, card):
    response = await _submit(test_client, customer_headers, _payment(card, type="event"))

    assert response.status_code == 400
    assert response.json()["message"] == "Event ID is required for event payments"


@pytest.mark.asyncio
async def test_event_payment(test_client, customer_headers, card):
    response = await _submit(
        test_client,
        customer_headers,
        _payment(card, type="event", event_id="kandy-perahera-2030", number_of_tickets=3),
    )

    assert response.status_code == 201
    payment = response.json()["payment"]
    assert payment["type"] == "event"
    assert payment["event_ref"] == "kandy-perahera-2030"
    assert payment["number_of_tickets"] == 3


@pytest.mark.asyncio
async def test_cart_payment_stores_items(test_client, customer_headers, card, equipment):
    response = await _submit(
        test_client,
        customer_headers,
        _payment(card, type="cart", amount=40.0, items=[
            {"equipment_id": str(equipment.id), "quantity": 2, "price": 20.0},
        ]),
    )

    assert response.status_code == 201
    items = response.json()["payment"]["items"]
    assert items == [{"equipment_id": str(equipment.id), "quantity": 2, "price": 20.0}]


@pytest.mark.asyncio
async def test_tour_type_rejected_on_general_endpoint(test_client, customer_headers, card):
    response = await _submit(test_client, customer_headers, _payment(card, type="tour"))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_idempotent_retry_replays_response(test_client, customer_headers, admin_headers, card):
    headers = {**customer_headers, "Idempotency-Key": "order-42"}

    first = await _submit(test_client, headers, _payment(card))
    second = await _submit(test_client, headers, _payment(card))

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.headers["Idempotent-Replayed"] == "true"
    assert second.json()["payment"]["id"] == first.json()["payment"]["id"]

    response = await test_client.get("/api/payments", headers=admin_headers)
    assert response.json()["count"] == 1


@pytest.mark.asyncio
async def test_idempotency_key_reused_with_different_body(test_client, customer_headers, card):
    headers = {**customer_headers, "Idempotency-Key": "order-43"}

    await _submit(test_client, headers, _payment(card))
    response = await _submit(test_client, headers, _payment(card, amount=99.0))

    assert response.status_code == 422
    assert response.json()["idempotency_key"] == "order-43"


@pytest.mark.asyncio
async def test_idempotency_fingerprint_leaves_out_card_secrets(test_client, test_session, customer_headers, card):
    headers = {**customer_headers, "Idempotency-Key": "order-44"}
    body = _payment(card, cvv="123")

    await _submit(test_client, headers, body)

    record = (await test_session.execute(
        select(IdempotencyRecord).where(IdempotencyRecord.idempotency_key == "order-44")
    )).scalar_one()
    assert record.request_hash != request_fingerprint(body)

    # Same card, different CVV: still the same request
    retry = await _submit(test_client, headers, _payment(card, cvv="999"))
    assert retry.status_code == 201
    assert retry.headers["Idempotent-Replayed"] == "true"


@pytest.mark.asyncio
async def test_user_history_only_shows_own_payments(test_client, customer_headers, other_headers, card):
    await _submit(test_client, customer_headers, _payment(card))
    await _submit(test_client, other_headers, _payment(card))

    response = await test_client.get("/api/payments/user-history", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["count"] == 1

    response = await test_client.get("/api/payments/user-orders", headers=other_headers)
    assert response.json()["count"] == 1


@pytest.mark.asyncio
async def test_admin_approves_payment(test_client, customer_headers, admin_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]

    pending = await test_client.get("/api/payments/pending", headers=admin_headers)
    assert [p["id"] for p in pending.json()["payments"]] == [payment_id]

    response = await test_client.put(f"/api/payments/approve/{payment_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["payment"]["status"] == "approved"

    pending = await test_client.get("/api/payments/pending", headers=admin_headers)
    assert pending.json()["count"] == 0


@pytest.mark.asyncio
async def test_payment_cannot_be_reviewed_twice(test_client, customer_headers, admin_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]
    await test_client.put(f"/api/payments/reject/{payment_id}", headers=admin_headers)

    response = await test_client.put(f"/api/payments/approve/{payment_id}", headers=admin_headers)

    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Payment already rejected"
    assert data["current_status"] == "rejected"


@pytest.mark.asyncio
async def test_customer_cannot_approve(test_client, customer_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]

    response = await test_client.put(f"/api/payments/approve/{payment_id}", headers=customer_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_filters_payments(test_client, customer_headers, admin_headers, card):
    first = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]
    await _submit(test_client, customer_headers, _payment(card, type="event", event_id="gig"))
    await test_client.put(f"/api/payments/approve/{first}", headers=admin_headers)

    approved = await test_client.get("/api/payments", headers=admin_headers, params={"status": "approved"})
    assert [p["id"] for p in approved.json()["payments"]] == [first]

    events = await test_client.get("/api/payments", headers=admin_headers, params={"type": "event"})
    assert events.json()["count"] == 1


@pytest.mark.asyncio
async def test_admin_gets_payment_with_user(test_client, customer_headers, admin_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]

    response = await test_client.get(f"/api/payments/{payment_id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["payment"]["user"]["username"] == "jane"


@pytest.mark.asyncio
async def test_resubmit_rejected_payment(test_client, customer_headers, admin_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]
    await test_client.put(f"/api/payments/reject/{payment_id}", headers=admin_headers)

    response = await test_client.put(
        f"/api/payments/{payment_id}",
        headers=customer_headers,
        json={"card_number": "5555555555554444", "expiry_date": "11/98"},
    )

    assert response.status_code == 200
    payment = response.json()["payment"]
    assert payment["status"] == "pending"
    assert payment["card_number"] == "XXXX-XXXX-XXXX-4444"
    assert payment["expiry_date"] == "11/98"


@pytest.mark.asyncio
async def test_approved_payment_cannot_be_edited(test_client, customer_headers, admin_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]
    await test_client.put(f"/api/payments/approve/{payment_id}", headers=admin_headers)

    response = await test_client.put(f"/api/payments/{payment_id}", headers=customer_headers, json={"amount": 10})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_other_user_cannot_edit_payment(test_client, customer_headers, other_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]

    response = await test_client.put(f"/api/payments/{payment_id}", headers=other_headers, json={"amount": 10})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_pending_payment(test_client, customer_headers, admin_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]

    response = await test_client.delete(f"/api/payments/{payment_id}", headers=customer_headers)
    assert response.status_code == 200

    response = await test_client.get(f"/api/payments/{payment_id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reviewed_payment_cannot_be_deleted(test_client, customer_headers, admin_headers, card):
    payment_id = (await _submit(test_client, customer_headers, _payment(card))).json()["payment"]["id"]
    await test_client.put(f"/api/payments/approve/{payment_id}", headers=admin_headers)

    response = await test_client.delete(f"/api/payments/{payment_id}", headers=customer_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Only pending payments can be deleted"
