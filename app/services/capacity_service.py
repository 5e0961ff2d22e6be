"""Capacity service for complex-wide capacity and utilization figures."""

import math
from uuid import UUID

import structlog
from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException
from app.core.redis_client import CacheManager
from app.core.transaction import UnitOfWork
from app.models.appointments import appointments
from app.models.clinics import clinics
from app.models.complexes import complexes
from app.models.users import users
from app.schemas.complexes import (
    CapacityBreakdown,
    CapacityCounts,
    CapacityTotals,
    ClinicCapacityBreakdown,
)

logger = structlog.get_logger(__name__)

# Roles that never count as staff
NON_STAFF_ROLES = ("doctor", "patient")


def utilization_percentage(current: int, total: int) -> int:
    """Percentage of ``total`` used by ``current``, rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    return math.floor(current / total * 100 + 0.5)


class CapacityService:
    """Service computing capacity breakdowns for complexes."""

    def __init__(self, cache_manager: CacheManager | None = None, cache_ttl: int = 300):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager
        self.cache_ttl = cache_ttl

    @staticmethod
    def _get_capacity_cache_key(complex_id: UUID) -> str:
        """Generate cache key for a complex's capacity."""
        return f"complex:{complex_id}:capacity"

    def invalidate(self, *complex_ids: UUID | None) -> None:
        """Drop cached capacity for the given complexes."""
        if not self.cache:
            return
        for complex_id in complex_ids:
            if complex_id is not None:
                self.cache.delete(self._get_capacity_cache_key(complex_id))

    async def get_capacity(
        self, db: AsyncSession | UnitOfWork, complex_id: UUID
    ) -> CapacityBreakdown:
        """Get a complex's capacity, served from cache when fresh."""
        if self.cache:
            cached = self.cache.get_json(self._get_capacity_cache_key(complex_id))
            if cached:
                return CapacityBreakdown.model_validate(cached)

        exists = await db.execute(select(complexes.c.id).where(complexes.c.id == complex_id))
        if exists.first() is None:
            raise NotFoundException(f"Complex {complex_id} not found", code="COMPLEX_006")

        breakdown = await self.compute_capacity(db, complex_id)

        if self.cache:
            self.cache.set_json(
                self._get_capacity_cache_key(complex_id),
                breakdown.model_dump(mode="json"),
                ttl=self.cache_ttl,
            )

        return breakdown

    async def compute_capacity(
        self, db: AsyncSession | UnitOfWork, complex_id: UUID
    ) -> CapacityBreakdown:
        """
        Sum capacity limits and live headcounts over a complex's active clinics.

        Doctors are active users with the ``doctor`` role, staff are active users
        with any other non-patient role, patients are distinct patients with a
        non-deleted appointment. A read only; safe outside a unit of work.
        """
        clinic_rows = (
            (
                await db.execute(
                    select(
                        clinics.c.id,
                        clinics.c.name,
                        clinics.c.max_doctors,
                        clinics.c.max_staff,
                        clinics.c.max_patients,
                    )
                    .where(
                        clinics.c.complex_id == complex_id,
                        clinics.c.is_active.is_(True),
                        clinics.c.deleted_at.is_(None),
                    )
                    .order_by(clinics.c.name)
                )
            )
            .mappings()
            .all()
        )
        clinic_ids = [row["id"] for row in clinic_rows]

        doctors_by_clinic: dict[UUID, int] = {}
        staff_by_clinic: dict[UUID, int] = {}
        patients_by_clinic: dict[UUID, int] = {}
        total_patients = 0

        if clinic_ids:
            doctors_by_clinic = await self._count_by_clinic(
                db,
                select(users.c.clinic_id, func.count())
                .where(
                    users.c.clinic_id.in_(clinic_ids),
                    users.c.role == "doctor",
                    users.c.is_active.is_(True),
                )
                .group_by(users.c.clinic_id),
            )
            staff_by_clinic = await self._count_by_clinic(
                db,
                select(users.c.clinic_id, func.count())
                .where(
                    users.c.clinic_id.in_(clinic_ids),
                    users.c.role.not_in(NON_STAFF_ROLES),
                    users.c.is_active.is_(True),
                )
                .group_by(users.c.clinic_id),
            )
            patients_by_clinic = await self._count_by_clinic(
                db,
                select(appointments.c.clinic_id, func.count(distinct(appointments.c.patient_id)))
                .where(
                    appointments.c.clinic_id.in_(clinic_ids),
                    appointments.c.deleted_at.is_(None),
                )
                .group_by(appointments.c.clinic_id),
            )
            # A patient seen at two clinics of the complex counts once
            total_patients = (
                await db.execute(
                    select(func.count(distinct(appointments.c.patient_id))).where(
                        appointments.c.clinic_id.in_(clinic_ids),
                        appointments.c.deleted_at.is_(None),
                    )
                )
            ).scalar_one()

        by_clinic = [
            ClinicCapacityBreakdown(
                clinic_id=row["id"],
                clinic_name=row["name"],
                max_doctors=row["max_doctors"] or 0,
                max_staff=row["max_staff"] or 0,
                max_patients=row["max_patients"] or 0,
                current_doctors=doctors_by_clinic.get(row["id"], 0),
                current_staff=staff_by_clinic.get(row["id"], 0),
                current_patients=patients_by_clinic.get(row["id"], 0),
            )
            for row in clinic_rows
        ]

        total = CapacityTotals(
            max_doctors=sum(c.max_doctors for c in by_clinic),
            max_staff=sum(c.max_staff for c in by_clinic),
            max_patients=sum(c.max_patients for c in by_clinic),
        )
        current = CapacityCounts(
            doctors=sum(c.current_doctors for c in by_clinic),
            staff=sum(c.current_staff for c in by_clinic),
            patients=total_patients,
        )
        utilization = CapacityCounts(
            doctors=utilization_percentage(current.doctors, total.max_doctors),
            staff=utilization_percentage(current.staff, total.max_staff),
            patients=utilization_percentage(current.patients, total.max_patients),
        )

        return CapacityBreakdown(
            total=total,
            current=current,
            utilization=utilization,
            by_clinic=by_clinic,
            recommendations=self._generate_recommendations(utilization),
        )

    @staticmethod
    async def _count_by_clinic(db: AsyncSession | UnitOfWork, query) -> dict[UUID, int]:
        """Run a ``(clinic_id, count)`` grouped query into a dict."""
        result = await db.execute(query)
        return {clinic_id: count for clinic_id, count in result.all()}

    @staticmethod
    def _generate_recommendations(utilization: CapacityCounts) -> list[str]:
        """Generate capacity recommendations for every resource above 100%."""
        recommendations: list[str] = []

        if utilization.doctors > 100:
            recommendations.append(
                "Doctor capacity exceeded. Consider increasing maxDoctors or redistributing workload."
            )

        if utilization.staff > 100:
            recommendations.append(
                "Staff capacity exceeded. Consider hiring more staff or increasing maxStaff limit."
            )

        if utilization.patients > 100:
            recommendations.append(
                "Patient capacity exceeded. Consider expanding facilities or limiting patient intake."
            )

        return recommendations
