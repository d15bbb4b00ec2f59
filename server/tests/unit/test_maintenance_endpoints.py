"""Tests for maintenance records and damage reports."""

from datetime import timedelta

import pytest

from tourism_api.core.database import utcnow


def _maintenance(equipment, hours_ahead: int, **overrides) -> dict:
    return {
        "equipment_id": str(equipment.id),
        "maintenance_type": "cleaning",
        "description": "Reproof the fly sheet",
        "scheduled_date": (utcnow() + timedelta(hours=hours_ahead)).isoformat(),
        **overrides,
    }


def _damage(equipment, severity: str) -> dict:
    return {
        "equipment_id": str(equipment.id),
        "damage_type": "physical",
        "severity": severity,
        "description": "Torn groundsheet",
        "location": "Returns desk",
    }


async def _is_available(client, equipment) -> bool:
    response = await client.get(f"/api/camping-equipment/{equipment.id}")
    return response.json()["equipment"]["is_available"]


async def _audit_actions(client, headers, equipment) -> list[str]:
    response = await client.get(
        "/api/inventory/audit-logs",
        headers=headers,
        params={"equipment_id": str(equipment.id)},
    )
    return sorted(log["action_type"] for log in response.json()["logs"])


@pytest.mark.asyncio
async def test_imminent_maintenance_takes_item_out_of_service(test_client, admin_headers, equipment):
    response = await test_client.post(
        "/api/maintenance/records", headers=admin_headers, json=_maintenance(equipment, 2)
    )

    assert response.status_code == 201
    record = response.json()["record"]
    assert record["status"] == "scheduled"
    assert record["priority"] == "medium"
    assert record["created_by"] == "boss"
    assert await _is_available(test_client, equipment) is False
    assert await _audit_actions(test_client, admin_headers, equipment) == ["create", "maintenance"]

    response = await test_client.put(
        f"/api/maintenance/records/{record['id']}",
        headers=admin_headers,
        json={"status": "completed", "actual_cost": 15.0},
    )
    assert response.status_code == 200
    completed = response.json()["record"]
    assert completed["completion_date"] is not None
    assert completed["updated_by"] == "boss"
    assert await _is_available(test_client, equipment) is True


@pytest.mark.asyncio
async def test_later_maintenance_leaves_item_in_service(test_client, admin_headers, equipment):
    response = await test_client.post(
        "/api/maintenance/records", headers=admin_headers, json=_maintenance(equipment, 24 * 7)
    )
    record = response.json()["record"]
    assert await _is_available(test_client, equipment) is True

    response = await test_client.put(
        f"/api/maintenance/records/{record['id']}",
        headers=admin_headers,
        json={"status": "in-progress"},
    )
    assert response.json()["record"]["start_date"] is not None
    assert await _is_available(test_client, equipment) is False


@pytest.mark.asyncio
async def test_started_maintenance_cannot_be_deleted(test_client, admin_headers, equipment):
    response = await test_client.post(
        "/api/maintenance/records", headers=admin_headers, json=_maintenance(equipment, 24 * 7)
    )
    record_id = response.json()["record"]["id"]
    await test_client.put(
        f"/api/maintenance/records/{record_id}",
        headers=admin_headers,
        json={"status": "in-progress"},
    )

    response = await test_client.delete(f"/api/maintenance/records/{record_id}", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete maintenance record with status 'in-progress'"


@pytest.mark.asyncio
async def test_list_maintenance_records_paginates(test_client, admin_headers, equipment):
    for days in (3, 1, 2):
        await test_client.post(
            "/api/maintenance/records",
            headers=admin_headers,
            json=_maintenance(equipment, 24 * days, priority="high" if days == 2 else "low"),
        )

    response = await test_client.get("/api/maintenance/records", headers=admin_headers, params={"limit": 2})
    data = response.json()
    assert (data["count"], data["total"], data["pages"]) == (2, 3, 2)
    assert data["records"][0]["scheduled_date"] < data["records"][1]["scheduled_date"]

    response = await test_client.get("/api/maintenance/records", headers=admin_headers, params={"priority": "high"})
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_maintenance_for_unknown_equipment(test_client, admin_headers, equipment):
    payload = _maintenance(equipment, 2, equipment_id="00000000-0000-0000-0000-000000000000")

    response = await test_client.post("/api/maintenance/records", headers=admin_headers, json=payload)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_severe_damage_marks_item_unavailable_and_alerts_admins(
    test_client, admin_headers, customer_headers, equipment
):
    response = await test_client.post("/api/maintenance/damage-reports", headers=customer_headers,
                                      json=_damage(equipment, "major"))

    assert response.status_code == 201
    report = response.json()["report"]
    assert report["status"] == "reported"
    assert report["reported_by"] == "jane"
    assert await _is_available(test_client, equipment) is False

    response = await test_client.get("/api/notifications", headers=admin_headers)
    (notification,) = response.json()["notifications"]
    assert notification["type"] == "damage_report"
    assert notification["message"] == "Major physical damage reported for Two-Person Dome Tent by jane"

    response = await test_client.put(
        f"/api/maintenance/damage-reports/{report['id']}",
        headers=admin_headers,
        json={"status": "repaired", "actual_repair_cost": 8.0},
    )
    assert response.status_code == 200
    assert await _is_available(test_client, equipment) is True


@pytest.mark.asyncio
async def test_minor_damage_keeps_item_in_service(test_client, customer_headers, equipment):
    response = await test_client.post("/api/maintenance/damage-reports", headers=customer_headers,
                                      json=_damage(equipment, "minor"))

    assert response.status_code == 201
    assert await _is_available(test_client, equipment) is True


@pytest.mark.asyncio
async def test_written_off_item_leaves_stock(test_client, admin_headers, equipment):
    response = await test_client.post("/api/maintenance/damage-reports", headers=admin_headers,
                                      json=_damage(equipment, "critical"))
    report_id = response.json()["report"]["id"]

    response = await test_client.put(
        f"/api/maintenance/damage-reports/{report_id}",
        headers=admin_headers,
        json={"status": "written-off", "resolution_notes": "Frame snapped"},
    )

    assert response.status_code == 200
    assert response.json()["report"]["resolution_notes"] == "Frame snapped"
    response = await test_client.get(f"/api/camping-equipment/{equipment.id}")
    item = response.json()["equipment"]
    assert (item["quantity"], item["is_available"]) == (9, True)
    assert await _audit_actions(test_client, admin_headers, equipment) == ["create", "damage", "stock-out"]


@pytest.mark.asyncio
async def test_damage_reports_listing_is_admin_only(test_client, admin_headers, customer_headers, equipment):
    await test_client.post("/api/maintenance/damage-reports", headers=customer_headers,
                           json=_damage(equipment, "moderate"))

    response = await test_client.get("/api/maintenance/damage-reports", headers=customer_headers)
    assert response.status_code == 403

    response = await test_client.get(
        "/api/maintenance/damage-reports", headers=admin_headers, params={"severity": "moderate"}
    )
    assert response.status_code == 200
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_damage_reports_require_auth(test_client, equipment):
    response = await test_client.post("/api/maintenance/damage-reports", json=_damage(equipment, "minor"))

    assert response.status_code == 401
