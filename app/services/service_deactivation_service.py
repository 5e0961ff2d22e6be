"""Bulk deactivation of the services offered under a complex."""

from uuid import UUID

import structlog
from sqlalchemy import or_, select, update

from app.core.transaction import UnitOfWork
from app.models.clinics import clinics
from app.models.departments import complex_departments
from app.models.services import services

logger = structlog.get_logger(__name__)


class ServiceDeactivationService:
    """Service for switching off every service reachable from a complex."""

    async def deactivate_all(self, uow: UnitOfWork, complex_id: UUID) -> int:
        """
        Deactivate services linked to the complex's clinics or departments.

        Only services that are still active are touched, so a repeated call
        returns 0 and writes nothing.

        Returns:
            Number of services deactivated by this call
        """
        clinic_ids = (
            (await uow.execute(select(clinics.c.id).where(clinics.c.complex_id == complex_id)))
            .scalars()
            .all()
        )
        department_ids = (
            (
                await uow.execute(
                    select(complex_departments.c.id).where(
                        complex_departments.c.complex_id == complex_id
                    )
                )
            )
            .scalars()
            .all()
        )

        if not clinic_ids and not department_ids:
            return 0

        linkage = []
        if clinic_ids:
            linkage.append(services.c.clinic_id.in_(clinic_ids))
        if department_ids:
            linkage.append(services.c.complex_department_id.in_(department_ids))

        result = await uow.execute(
            update(services)
            .where(or_(*linkage), services.c.is_active.is_(True))
            .values(is_active=False)
        )
        deactivated = result.rowcount or 0

        logger.info(
            "complex_services_deactivated",
            complex_id=str(complex_id),
            clinics=len(clinic_ids),
            departments=len(department_ids),
            services_deactivated=deactivated,
        )
        return deactivated
