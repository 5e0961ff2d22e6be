"""Lookups shared by the status-change and clinic-transfer workflows."""

from typing import Any
from uuid import UUID

from sqlalchemy import select

from app.core.exceptions import NotFoundException
from app.core.transaction import UnitOfWork
from app.models.clinics import clinics
from app.models.complexes import complexes


async def get_complex(uow: UnitOfWork, complex_id: UUID) -> dict[str, Any]:
    """
    Load a non-deleted complex.

    Raises:
        NotFoundException: If the complex does not exist
    """
    result = await uow.execute(
        select(complexes).where(complexes.c.id == complex_id, complexes.c.deleted_at.is_(None))
    )
    row = result.mappings().first()
    if row is None:
        raise NotFoundException(f"Complex {complex_id} not found", code="COMPLEX_006")
    return dict(row)


async def get_active_clinic_ids(uow: UnitOfWork, complex_id: UUID) -> list[UUID]:
    """Ids of the complex's active, non-deleted clinics."""
    result = await uow.execute(
        select(clinics.c.id)
        .where(
            clinics.c.complex_id == complex_id,
            clinics.c.is_active.is_(True),
            clinics.c.deleted_at.is_(None),
        )
        .order_by(clinics.c.name)
    )
    return list(result.scalars().all())
