"""Tests for health, readiness, info and metrics endpoints."""

import pytest
from fastapi import HTTPException


@pytest.mark.asyncio
async def test_health_endpoint(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data


@pytest.mark.asyncio
async def test_api_health_endpoint(test_client):
    response = await test_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"success": True, "status": "healthy", "message": "API is running"}


@pytest.mark.asyncio
async def test_readiness_endpoint_checks_database(test_client):
    response = await test_client.get("/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["database"] is True


@pytest.mark.asyncio
async def test_info_endpoint(test_client):
    response = await test_client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "tourism-api"
    assert data["environment"] == "test"
    assert data["endpoints"]["metrics"] == "/metrics"


@pytest.mark.asyncio
async def test_metrics_endpoint(test_client):
    await test_client.get("/api/health")
    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]
    assert "http_requests_total" in response.text


@pytest.mark.asyncio
async def test_request_id_is_echoed(test_client):
    response = await test_client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_is_generated(test_client):
    response = await test_client.get("/health")

    assert response.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_unknown_route_uses_problem_envelope(test_client):
    response = await test_client.get("/api/does-not-exist")

    assert response.status_code == 404
    data = response.json()
    assert data["success"] is False
    assert data["status"] == 404
    assert "message" in data


@pytest.mark.asyncio
async def test_traceparent_keeps_incoming_trace_id(test_client):
    trace_id = "4bf92f3577b34da6a3ce929d0e0e4736"
    response = await test_client.get(
        "/api/health",
        headers={"traceparent": f"00-{trace_id}-00f067aa0ba902b7-01", "tracestate": "vendor=1"},
    )

    version, returned_trace_id, span_id, flags = response.headers["traceparent"].split("-")
    assert version == "00"
    assert returned_trace_id == trace_id
    assert len(span_id) == 16
    assert response.headers["tracestate"] == "vendor=1"


@pytest.mark.asyncio
async def test_unhandled_error_uses_problem_envelope(test_app, test_client):
    async def explode():
        raise RuntimeError("boom")

    test_app.add_api_route("/api/explode", explode, methods=["GET"])

    response = await test_client.get("/api/explode", headers={"X-Request-ID": "req-500"})

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["message"] == "Server error"
    assert data["type"].endswith("/internal-server-error")
    assert data["detail"] == "An unexpected error occurred while processing the request"
    assert data["error_id"]
    assert "boom" not in response.text
    assert response.headers["X-Request-ID"] == "req-500"


@pytest.mark.asyncio
async def test_http_500_carries_error_id(test_app, test_client):
    async def fail():
        raise HTTPException(status_code=500, detail="Internal server error")

    test_app.add_api_route("/api/fail", fail, methods=["GET"])

    response = await test_client.get("/api/fail")

    assert response.status_code == 500
    data = response.json()
    assert data["message"] == "Internal server error"
    assert data["error_id"]
