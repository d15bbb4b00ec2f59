"""Tests for registration, login, profile and admin user management."""

import pytest

from tourism_api.core.security import decode_access_token


@pytest.mark.asyncio
async def test_register_returns_token_and_user(test_client):
    response = await test_client.post("/api/auth/register", json={
        "username": "maya",
        "email": "Maya@Example.com",
        "password": "secret123",
        "contact_number": "+94 77 123 4567",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["user"]["email"] == "maya@example.com"
    assert data["user"]["role"] == "user"
    assert "password_hash" not in data["user"]

    payload = decode_access_token(data["token"])
    assert payload["sub"] == data["user"]["id"]
    assert payload["role"] == "user"


@pytest.mark.asyncio
async def test_admin_registers_admin_account(test_client, admin_headers):
    response = await test_client.post("/api/auth/register", headers=admin_headers, json={
        "username": "root",
        "email": "root@example.com",
        "password": "secret123",
        "role": "admin",
    })

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["role"] == "admin"
    assert user["admin_id"].startswith("ADM-")
    assert user["department"] == "General"


@pytest.mark.asyncio
@pytest.mark.parametrize("as_customer", [False, True])
async def test_self_registration_cannot_claim_admin(test_client, customer_headers, as_customer):
    response = await test_client.post(
        "/api/auth/register",
        headers=customer_headers if as_customer else None,
        json={
            "username": "intruder",
            "email": "intruder@example.com",
            "password": "secret123",
            "role": "admin",
        },
    )

    assert response.status_code == 403
    data = response.json()
    assert data["message"] == "Only an admin can create admin accounts"
    assert data["required_role"] == "admin"

    login = await test_client.post("/api/auth/login", json={"email": "intruder@example.com", "password": "secret123"})
    assert login.status_code == 401


@pytest.mark.asyncio
async def test_register_duplicate_email_rejected(test_client, customer):
    response = await test_client.post("/api/auth/register", json={
        "username": "someone-else",
        "email": customer.email,
        "password": "secret123",
    })

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["message"] == "User with this email or username already exists"


@pytest.mark.asyncio
async def test_register_invalid_email_rejected(test_client):
    response = await test_client.post("/api/auth/register", json={
        "username": "maya",
        "email": "not-an-email",
        "password": "secret123",
    })

    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Please enter a valid email address"
    assert data["violations"][0]["field"] == "email"


@pytest.mark.asyncio
async def test_login_success(test_client, customer):
    response = await test_client.post("/api/auth/login", json={
        "email": "JANE@example.com",
        "password": "secret123",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == str(customer.id)
    assert decode_access_token(data["token"])["email"] == customer.email


@pytest.mark.asyncio
async def test_login_wrong_password(test_client, customer):
    response = await test_client.post("/api/auth/login", json={
        "email": customer.email,
        "password": "wrong-password",
    })

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_me_requires_token(test_client):
    response = await test_client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["message"] == "Not authorized, no token"


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(test_client):
    response = await test_client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_returns_current_user(test_client, customer, customer_headers):
    response = await test_client.get("/api/auth/me", headers=customer_headers)

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["username"] == "jane"
    assert user["admin_id"] is None


@pytest.mark.asyncio
async def test_update_profile(test_client, customer_headers):
    response = await test_client.put("/api/auth/update-profile", headers=customer_headers, json={
        "address": "12 Temple Road, Kandy",
        "contact_number": "0771234567",
    })

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["address"] == "12 Temple Road, Kandy"
    assert user["contact_number"] == "0771234567"


@pytest.mark.asyncio
async def test_change_password_requires_current_password(test_client, customer_headers):
    response = await test_client.put("/api/auth/update-profile", headers=customer_headers, json={
        "current_password": "wrong-one",
        "new_password": "brand-new-secret",
    })

    assert response.status_code == 400
    assert response.json()["message"] == "Current password is incorrect"


@pytest.mark.asyncio
async def test_change_password_then_login(test_client, customer, customer_headers):
    response = await test_client.put("/api/auth/update-profile", headers=customer_headers, json={
        "current_password": "secret123",
        "new_password": "brand-new-secret",
    })
    assert response.status_code == 200

    response = await test_client.post("/api/auth/login", json={
        "email": "jane@example.com",
        "password": "brand-new-secret",
    })
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_profile_email_taken(test_client, other_customer, customer_headers):
    response = await test_client.put("/api/auth/update-profile", headers=customer_headers, json={
        "email": "john@example.com",
    })

    assert response.status_code == 400
    assert response.json()["message"] == "Email is already in use by another account"


@pytest.mark.asyncio
async def test_list_users_requires_admin(test_client, customer_headers):
    response = await test_client.get("/api/auth/users", headers=customer_headers)

    assert response.status_code == 403
    data = response.json()
    assert data["message"] == "Not authorized as an admin"
    assert data["required_role"] == "admin"


@pytest.mark.asyncio
async def test_admin_lists_users(test_client, customer, admin, admin_headers):
    response = await test_client.get("/api/auth/users", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert {u["username"] for u in data["users"]} == {"jane", "boss"}


@pytest.mark.asyncio
async def test_admin_promotes_user(test_client, customer, admin_headers):
    response = await test_client.put(
        f"/api/auth/users/{customer.id}",
        headers=admin_headers,
        json={"role": "admin", "department": "Operations"},
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["role"] == "admin"
    assert user["department"] == "Operations"
    assert user["admin_id"].startswith("ADM-")


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(test_client, admin, admin_headers):
    response = await test_client.delete(f"/api/auth/users/{admin.id}", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "You cannot delete your own account"


@pytest.mark.asyncio
async def test_admin_deletes_user(test_client, customer, admin_headers):
    customer_id = str(customer.id)

    response = await test_client.delete(f"/api/auth/users/{customer_id}", headers=admin_headers)
    assert response.status_code == 200

    response = await test_client.get(f"/api/auth/users/{customer_id}", headers=admin_headers)
    assert response.status_code == 404
