"""Clinic transfer service for moving clinics between complexes."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import InternalException, PreconditionException, ValidationException
from app.core.transaction import TransactionCoordinator, UnitOfWork
from app.models.appointments import RESCHEDULABLE_STATUSES, appointments
from app.models.clinics import clinics
from app.models.users import users
from app.schemas.complexes import ComplexStatus, TransferResult
from app.services.capacity_service import CapacityService
from app.services.complex_queries import get_complex
from app.services.working_hours_service import WorkingHoursConflictDetector
from app.utils.identifiers import parse_id, parse_ids

logger = structlog.get_logger(__name__)

RESCHEDULING_REASON = "Working hours conflict detected during clinic transfer"


class ClinicTransferService:
    """Service for reassigning clinics, their staff and their appointments to another complex."""

    def __init__(
        self,
        coordinator: TransactionCoordinator | None = None,
        conflict_detector: WorkingHoursConflictDetector | None = None,
        capacity_service: CapacityService | None = None,
    ):
        """Initialize service with its collaborators."""
        self.coordinator = coordinator
        self.conflict_detector = conflict_detector or WorkingHoursConflictDetector()
        self.capacity_service = capacity_service

    async def transfer_clinics(
        self,
        source_complex_id: UUID | str,
        target_complex_id: UUID | str,
        clinic_ids: list[UUID | str],
        actor_id: UUID | None = None,
    ) -> TransferResult:
        """
        Transfer clinics in a unit of work of their own.

        Raises:
            NotFoundException: If either complex is missing
            PreconditionException: If the target is unusable or a clinic is not the source's
            ValidationException: If identifiers are malformed or no clinic is given
            InternalException: If the data store fails once writes have started
        """
        if self.coordinator is None:
            raise RuntimeError("ClinicTransferService needs a coordinator for standalone transfers")

        source_id = parse_id(source_complex_id, "complexId")
        target_id = parse_id(target_complex_id, "targetComplexId")

        try:
            async with self.coordinator.unit_of_work() as uow:
                result = await self.transfer(uow, source_id, target_id, clinic_ids, actor_id)
        except SQLAlchemyError as e:
            logger.error(
                "clinic_transfer_failed",
                source_complex_id=str(source_id),
                target_complex_id=str(target_id),
                error=str(e),
            )
            raise InternalException("Clinic transfer failed") from e

        if self.capacity_service:
            self.capacity_service.invalidate(source_id, target_id)

        return result

    async def transfer(
        self,
        uow: UnitOfWork,
        source_complex_id: UUID,
        target_complex_id: UUID,
        clinic_ids: list[UUID | str],
        actor_id: UUID | None = None,
    ) -> TransferResult:
        """
        Move clinics from the source complex to the target complex.

        Every precondition is checked before the first write. The whole batch
        is rejected when any clinic does not belong to the source complex.
        Staff working at the moved clinics follow them. When the target's
        working hours do not cover the clinics' hours, their open appointments
        are marked for rescheduling.

        Args:
            uow: Unit of work all writes go through
            source_complex_id: Complex the clinics currently belong to
            target_complex_id: Active complex receiving the clinics
            clinic_ids: Clinics to move
            actor_id: User performing the transfer; defaults to the source owner

        Returns:
            Counts of rows touched and the detected conflicts
        """
        requested_ids = parse_ids(clinic_ids, "clinicIds")
        if not requested_ids:
            raise ValidationException(
                "At least one clinic must be selected for transfer", code="VALIDATION_002"
            )

        source = await get_complex(uow, source_complex_id)
        target = await get_complex(uow, target_complex_id)

        if target_complex_id == source_complex_id:
            raise PreconditionException(
                "Target complex must differ from the source complex",
                code="COMPLEX_005",
                details={"targetComplexId": str(target_complex_id)},
            )
        if target["status"] != ComplexStatus.ACTIVE.value:
            raise PreconditionException(
                f"Target complex {target_complex_id} is not active",
                code="COMPLEX_005",
                details={"targetComplexId": str(target_complex_id), "status": target["status"]},
            )

        owned = await uow.execute(
            select(clinics.c.id, clinics.c.complex_id).where(
                clinics.c.id.in_(requested_ids),
                clinics.c.deleted_at.is_(None),
            )
        )
        owner_by_clinic = {row.id: row.complex_id for row in owned}
        foreign = [
            str(clinic_id)
            for clinic_id in requested_ids
            if owner_by_clinic.get(clinic_id) != source_complex_id
        ]
        if foreign:
            raise PreconditionException(
                "Clinic does not belong to the source complex",
                code="COMPLEX_011",
                details={"clinicIds": foreign},
            )

        clinics_result = await uow.execute(
            update(clinics)
            .where(clinics.c.id.in_(requested_ids), clinics.c.complex_id == source_complex_id)
            .values(complex_id=target_complex_id, updated_at=datetime.now(UTC))
        )
        clinics_transferred = clinics_result.rowcount or 0

        staff_result = await uow.execute(
            update(users)
            .where(users.c.clinic_id.in_(requested_ids), users.c.is_active.is_(True))
            .values(complex_id=target_complex_id, updated_at=datetime.now(UTC))
        )
        staff_updated = staff_result.rowcount or 0

        report = await self.conflict_detector.detect_conflicts(
            uow, source_complex_id, target_complex_id, requested_ids
        )

        appointments_marked = 0
        if report.conflicts:
            appointments_marked = await self._mark_appointments_for_rescheduling(
                uow, requested_ids, actor_id or source["owner_id"]
            )

        logger.info(
            "clinics_transferred",
            source_complex_id=str(source_complex_id),
            target_complex_id=str(target_complex_id),
            clinics_transferred=clinics_transferred,
            staff_updated=staff_updated,
            conflicts=len(report.conflicts),
            conflict_detection_complete=report.complete,
            appointments_marked_for_rescheduling=appointments_marked,
        )

        return TransferResult(
            clinics_transferred=clinics_transferred,
            staff_updated=staff_updated,
            appointments_marked_for_rescheduling=appointments_marked,
            conflicts=report.conflicts,
        )

    @staticmethod
    async def _mark_appointments_for_rescheduling(
        uow: UnitOfWork, clinic_ids: list[UUID], marked_by: UUID
    ) -> int:
        """Flag open, non-deleted appointments of the clinics for rescheduling."""
        now = datetime.now(UTC)
        result = await uow.execute(
            update(appointments)
            .where(
                appointments.c.clinic_id.in_(clinic_ids),
                appointments.c.status.in_(RESCHEDULABLE_STATUSES),
                appointments.c.deleted_at.is_(None),
            )
            .values(
                rescheduling_reason=RESCHEDULING_REASON,
                marked_for_rescheduling_at=now,
                marked_by=marked_by,
                updated_at=now,
            )
        )
        return result.rowcount or 0
