"""Tests for bulk service deactivation."""

from uuid import uuid4

import pytest
from sqlalchemy import select

from app.models.services import services
from app.services.service_deactivation_service import ServiceDeactivationService


@pytest.mark.asyncio
async def test_deactivate_all_is_idempotent(cascade_data, coordinator, fetch_rows):
    """The first call switches off clinic and department services, the second touches nothing."""
    service = ServiceDeactivationService()

    async with coordinator.unit_of_work() as uow:
        first = await service.deactivate_all(uow, cascade_data["source_id"])
    async with coordinator.unit_of_work() as uow:
        second = await service.deactivate_all(uow, cascade_data["source_id"])

    assert first == 3
    assert second == 0

    rows = await fetch_rows(select(services.c.name, services.c.is_active))
    active = {row["name"]: row["is_active"] for row in rows}
    assert active == {
        "ECG": False,
        "Vaccination": False,
        "X-Ray": False,
        "Stress Test": False,
        "Skin Biopsy": True,
    }


@pytest.mark.asyncio
async def test_deactivate_all_without_clinics_or_departments(cascade_data, coordinator):
    """A complex with nothing under it deactivates nothing."""
    async with coordinator.unit_of_work() as uow:
        count = await ServiceDeactivationService().deactivate_all(
            uow, cascade_data["empty_complex_id"]
        )

    assert count == 0


@pytest.mark.asyncio
async def test_deactivate_all_unknown_complex(db_session, coordinator):
    """An unknown complex resolves to no services."""
    async with coordinator.unit_of_work() as uow:
        count = await ServiceDeactivationService().deactivate_all(uow, uuid4())

    assert count == 0
