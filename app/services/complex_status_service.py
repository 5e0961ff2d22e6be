"""Complex status service orchestrating the deactivation cascade."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import InternalException, PreconditionException
from app.core.transaction import TransactionCoordinator, UnitOfWork
from app.models.complexes import complexes
from app.schemas.complexes import (
    ComplexResponse,
    ComplexStatus,
    ComplexStatusUpdate,
    StatusChangeResult,
)
from app.services.capacity_service import CapacityService
from app.services.clinic_transfer_service import ClinicTransferService
from app.services.complex_queries import get_active_clinic_ids, get_complex
from app.services.service_deactivation_service import ServiceDeactivationService
from app.utils.identifiers import parse_id

logger = structlog.get_logger(__name__)


class ComplexStatusService:
    """
    Service for complex status changes.

    Deactivating or suspending a complex deactivates its services and, when
    asked, moves its clinics to another active complex. Reactivation only
    clears the deactivation metadata. Everything runs in one unit of work.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        transfer_service: ClinicTransferService | None = None,
        deactivation_service: ServiceDeactivationService | None = None,
        capacity_service: CapacityService | None = None,
    ):
        """Initialize service with its collaborators."""
        self.coordinator = coordinator
        self.capacity_service = capacity_service or CapacityService()
        self.transfer_service = transfer_service or ClinicTransferService(
            coordinator, capacity_service=self.capacity_service
        )
        self.deactivation_service = deactivation_service or ServiceDeactivationService()

    async def change_status(
        self,
        complex_id: UUID | str,
        status_update: ComplexStatusUpdate,
        actor_id: UUID | None = None,
    ) -> StatusChangeResult:
        """
        Change a complex's status and cascade the change to its dependents.

        Args:
            complex_id: Complex to update
            status_update: Requested status, optional target complex and reason
            actor_id: User performing the change; defaults to the complex owner

        Returns:
            Updated complex and counts of cascaded changes

        Raises:
            NotFoundException: If the complex or target complex is missing
            PreconditionException: If clinics need a target, or the target is unusable
            ValidationException: If identifiers are malformed
            InternalException: If the data store fails once writes have started
        """
        complex_id = parse_id(complex_id, "complexId")
        uow = await self.coordinator.begin()

        try:
            if status_update.status == ComplexStatus.ACTIVE:
                result = await self._reactivate(uow, complex_id)
            else:
                result = await self._deactivate(uow, complex_id, status_update, actor_id)

            await self.coordinator.commit(uow)
        except SQLAlchemyError as e:
            await self.coordinator.abort(uow)
            logger.error(
                "complex_status_change_failed",
                complex_id=str(complex_id),
                status=status_update.status.value,
                error=str(e),
            )
            raise InternalException("Complex status change failed") from e
        except Exception:
            await self.coordinator.abort(uow)
            raise
        finally:
            await self.coordinator.end(uow)

        self.capacity_service.invalidate(complex_id, status_update.target_complex_id)

        logger.info(
            "complex_status_changed",
            complex_id=str(complex_id),
            status=status_update.status.value,
            services_deactivated=result.services_deactivated,
            clinics_transferred=result.clinics_transferred,
            appointments_marked_for_rescheduling=result.appointments_marked_for_rescheduling,
            transactional=uow.transactional,
        )
        return result

    async def _deactivate(
        self,
        uow: UnitOfWork,
        complex_id: UUID,
        status_update: ComplexStatusUpdate,
        actor_id: UUID | None,
    ) -> StatusChangeResult:
        """Run the inactive/suspended cascade inside the given unit of work."""
        complex_row = await get_complex(uow, complex_id)
        clinic_ids = await get_active_clinic_ids(uow, complex_id)
        target_id = status_update.target_complex_id

        if clinic_ids and target_id is None:
            raise PreconditionException(
                "Must transfer clinics before deactivation",
                code="COMPLEX_004",
                details={"activeClinics": len(clinic_ids), "requiresTransfer": True},
            )

        # Validate the target before the first write
        if target_id is not None:
            target = await get_complex(uow, target_id)
            if target_id == complex_id or target["status"] != ComplexStatus.ACTIVE.value:
                raise PreconditionException(
                    f"Target complex {target_id} is not a valid transfer target",
                    code="COMPLEX_005",
                    details={"targetComplexId": str(target_id), "status": target["status"]},
                )

        services_deactivated = await self.deactivation_service.deactivate_all(uow, complex_id)

        clinics_transferred = None
        appointments_marked = None
        target_capacity = None
        if target_id is not None and status_update.transfer_clinics and clinic_ids:
            transfer = await self.transfer_service.transfer(
                uow, complex_id, target_id, clinic_ids, actor_id
            )
            clinics_transferred = transfer.clinics_transferred
            appointments_marked = transfer.appointments_marked_for_rescheduling
            target_capacity = await self.capacity_service.compute_capacity(uow, target_id)

        updated = await self._write_status(
            uow,
            complex_id,
            status=status_update.status.value,
            deactivated_at=datetime.now(UTC),
            deactivated_by=actor_id or complex_row["owner_id"],
            deactivation_reason=status_update.deactivation_reason,
        )

        return StatusChangeResult(
            complex=updated,
            services_deactivated=services_deactivated,
            clinics_transferred=clinics_transferred,
            appointments_marked_for_rescheduling=appointments_marked,
            target_capacity=target_capacity,
        )

    async def _reactivate(self, uow: UnitOfWork, complex_id: UUID) -> StatusChangeResult:
        """Return the complex to active and clear its deactivation metadata."""
        await get_complex(uow, complex_id)
        updated = await self._write_status(
            uow,
            complex_id,
            status=ComplexStatus.ACTIVE.value,
            deactivated_at=None,
            deactivated_by=None,
            deactivation_reason=None,
        )
        return StatusChangeResult(complex=updated, services_deactivated=0)

    @staticmethod
    async def _write_status(uow: UnitOfWork, complex_id: UUID, **values) -> ComplexResponse:
        """Persist status fields and return the refreshed complex."""
        await uow.execute(
            update(complexes)
            .where(complexes.c.id == complex_id)
            .values(**values, updated_at=datetime.now(UTC))
        )
        return ComplexResponse.model_validate(await get_complex(uow, complex_id))
