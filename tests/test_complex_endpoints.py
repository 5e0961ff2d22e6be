"""Tests for the complex status endpoint and its error contract."""

from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_deactivate_with_transfer(client: AsyncClient, cascade_data, auth_headers, actor_id):
    """A full cascade returns camelCase counts and the acting user."""
    response = await client.patch(
        f"/api/v1/complexes/{cascade_data['source_id']}/status",
        headers=auth_headers,
        json={
            "status": "inactive",
            "targetComplexId": str(cascade_data["target_id"]),
            "transferClinics": True,
            "deactivationReason": "Consolidation",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["complex"]["id"] == str(cascade_data["source_id"])
    assert data["complex"]["status"] == "inactive"
    assert data["complex"]["deactivatedBy"] == str(actor_id)
    assert data["complex"]["deactivationReason"] == "Consolidation"
    assert data["servicesDeactivated"] == 3
    assert data["clinicsTransferred"] == 2
    assert data["appointmentsMarkedForRescheduling"] == 0
    assert data["targetCapacity"]["total"]["maxDoctors"] == 29


@pytest.mark.asyncio
async def test_reactivate_omits_cascade_fields(client: AsyncClient, cascade_data):
    """Fields that did not apply are left out of the response."""
    response = await client.patch(
        f"/api/v1/complexes/{cascade_data['empty_complex_id']}/status",
        json={"status": "active"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["servicesDeactivated"] == 0
    assert "clinicsTransferred" not in data
    assert "targetCapacity" not in data
    assert "deactivatedAt" not in data["complex"]


@pytest.mark.asyncio
async def test_transfer_required(client: AsyncClient, cascade_data):
    """Active clinics without a target give a precondition error with bilingual text."""
    response = await client.patch(
        f"/api/v1/complexes/{cascade_data['source_id']}/status",
        json={"status": "suspended"},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "COMPLEX_004"
    assert data["messages"] == {
        "ar": "يجب نقل العيادات قبل إلغاء التنشيط",
        "en": "Must transfer clinics before deactivation",
    }
    assert data["details"] == {"activeClinics": 2, "requiresTransfer": True}


@pytest.mark.asyncio
async def test_inactive_target(client: AsyncClient, cascade_data):
    """An inactive target complex is rejected."""
    response = await client.patch(
        f"/api/v1/complexes/{cascade_data['source_id']}/status",
        json={
            "status": "inactive",
            "targetComplexId": str(cascade_data["inactive_target_id"]),
            "transferClinics": True,
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "COMPLEX_005"


@pytest.mark.asyncio
async def test_unknown_complex(client: AsyncClient, cascade_data):
    """A missing complex is a 404."""
    response = await client.patch(
        f"/api/v1/complexes/{uuid4()}/status",
        json={"status": "inactive"},
    )

    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "COMPLEX_006"
    assert data["messages"]["en"] == "Complex not found"


@pytest.mark.asyncio
async def test_unknown_target_complex(client: AsyncClient, cascade_data):
    """A missing target complex is a 404."""
    response = await client.patch(
        f"/api/v1/complexes/{cascade_data['source_id']}/status",
        json={"status": "inactive", "targetComplexId": str(uuid4()), "transferClinics": True},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "COMPLEX_006"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("path_id", "body"),
    [
        ("not-a-uuid", {"status": "inactive"}),
        (None, {"status": "closed"}),
        (None, {"status": "inactive", "targetComplexId": "12345"}),
    ],
)
async def test_malformed_requests(client: AsyncClient, cascade_data, path_id, body):
    """Malformed identifiers and unknown statuses are validation errors."""
    complex_id = path_id or str(cascade_data["source_id"])

    response = await client.patch(f"/api/v1/complexes/{complex_id}/status", json=body)

    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "VALIDATION_001"
    assert data["details"]


@pytest.mark.asyncio
async def test_invalid_token(client: AsyncClient, cascade_data):
    """A bearer token that does not verify is refused."""
    response = await client.patch(
        f"/api/v1/complexes/{cascade_data['empty_complex_id']}/status",
        headers={"Authorization": "Bearer not-a-jwt"},
        json={"status": "inactive"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    """Every response carries the request id it was logged under."""
    response = await client.get("/api/v1/ping", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-42"
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Basic health check reports the running version."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
